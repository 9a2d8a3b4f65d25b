"""Analytics routes: workspace overview, per-project totals, chart rows."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.dependencies import get_user_id, get_workspace
from execution.analytics import get_by_project, get_chart_data, get_overview

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("")
async def overview(user_id: str = Depends(get_user_id)):
    return JSONResponse(content=get_overview(get_workspace(user_id)))


@router.get("/projects")
async def by_project(user_id: str = Depends(get_user_id)):
    return JSONResponse(content=get_by_project(get_workspace(user_id)))


@router.get("/chart")
async def chart_data(user_id: str = Depends(get_user_id)):
    return JSONResponse(content=get_chart_data(get_workspace(user_id)))
