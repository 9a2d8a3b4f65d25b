"""FastAPI application for the AI Productivity Companion."""

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from app.routers import ai, analytics, chat, projects, tasks
from config.settings import LOG_LEVEL
from execution.assistant import ParseError
from execution.llm_client import LLMClientError, LLMUnavailableError

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

APP_DIR = Path(__file__).parent

app = FastAPI(title="AI Productivity Companion")

# Templates and static files
templates = Jinja2Templates(directory=str(APP_DIR / "templates"))
app.mount("/static", StaticFiles(directory=str(APP_DIR / "static")), name="static")

# Store templates on app state so routers can access them
app.state.templates = templates

# Include routers
app.include_router(projects.router)
app.include_router(tasks.router)
app.include_router(analytics.router)
app.include_router(chat.router)
app.include_router(ai.router)


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Report invalid values from the workspace store as 400s."""
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(ParseError)
async def parse_error_handler(request: Request, exc: ParseError):
    logger.warning("Structured assistant reply could not be parsed: %s", exc)
    return JSONResponse(
        status_code=502,
        content={"error": "parse_error", "detail": "The AI response could not be understood."},
    )


@app.exception_handler(LLMClientError)
async def llm_client_error_handler(request: Request, exc: LLMClientError):
    logger.warning("LLM call failed: %s", exc)
    return JSONResponse(
        status_code=502,
        content={"error": "llm_error", "detail": "The AI service returned an error."},
    )


@app.exception_handler(LLMUnavailableError)
async def llm_unavailable_handler(request: Request, exc: LLMUnavailableError):
    return JSONResponse(
        status_code=503,
        content={"error": "llm_unavailable", "detail": "The AI service is not configured."},
    )
