"""Assistant routes backed by the user's stored data.

Endpoints:
    POST   /api/ai/chat      - Chat with persisted history and workspace context
    GET    /api/ai/history   - Persisted chat history
    DELETE /api/ai/history   - Clear persisted chat history
    POST   /api/ai/estimate  - Estimate human / AI minutes for a task
    GET    /api/ai/insights  - Productivity insights over all tasks
"""

import asyncio
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.dependencies import get_user_id, get_workspace
from app.models.chat import ChatMessageRequest, EstimateTaskRequest
from config.settings import CHAT_HISTORY_LIMIT, LLM_TIMEOUT_SECONDS
from execution import assistant
from execution.workspace_store import (
    append_chat_message,
    clear_chat_history,
    get_chat_history,
    list_projects,
    list_tasks,
    save_workspace,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["ai"])


@router.post("/chat")
async def ai_chat(body: ChatMessageRequest, user_id: str = Depends(get_user_id)):
    """Reply using the last CHAT_HISTORY_LIMIT stored turns plus a data summary.

    The workspace is reloaded after the assistant call so that writes made
    while waiting (guided flows, other requests) are kept.
    """
    workspace = get_workspace(user_id)
    history = get_chat_history(workspace, limit=CHAT_HISTORY_LIMIT)
    context = assistant.build_context(list_tasks(workspace), list_projects(workspace))

    loop = asyncio.get_running_loop()
    try:
        reply = await asyncio.wait_for(
            loop.run_in_executor(None, assistant.chat, history, body.message, context),
            timeout=LLM_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.warning("Assistant reply timed out after %ss", LLM_TIMEOUT_SECONDS)
        reply = assistant.APOLOGY_REPLY

    workspace = get_workspace(user_id)
    append_chat_message(workspace, "user", body.message)
    append_chat_message(workspace, "assistant", reply)
    save_workspace(workspace)
    return JSONResponse(content={
        "message": reply,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    })


@router.get("/history")
async def ai_history(user_id: str = Depends(get_user_id)):
    workspace = get_workspace(user_id)
    return JSONResponse(content={"messages": get_chat_history(workspace)})


@router.delete("/history")
async def ai_clear_history(user_id: str = Depends(get_user_id)):
    workspace = get_workspace(user_id)
    count = clear_chat_history(workspace)
    save_workspace(workspace)
    return JSONResponse(content={"deleted_count": count})


@router.post("/estimate")
async def ai_estimate(body: EstimateTaskRequest, user_id: str = Depends(get_user_id)):
    """Estimate a task from its description and the user's recorded tasks."""
    workspace = get_workspace(user_id)
    loop = asyncio.get_running_loop()
    estimate = await loop.run_in_executor(
        None, assistant.estimate_task, body.task_description, list_tasks(workspace),
    )
    return JSONResponse(content=estimate)


@router.get("/insights")
async def ai_insights(user_id: str = Depends(get_user_id)):
    workspace = get_workspace(user_id)
    loop = asyncio.get_running_loop()
    insights = await loop.run_in_executor(
        None, assistant.generate_insights, list_tasks(workspace), list_projects(workspace),
    )
    return JSONResponse(content=insights)
