"""Recorded task routes: list, record, update, delete, clear."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.dependencies import get_user_id, get_workspace, require_project, require_task
from app.models.task import CreateTaskRequest, UpdateTaskRequest
from execution.workspace_store import (
    clear_tasks,
    delete_task,
    list_tasks,
    record_task,
    save_workspace,
    update_task,
)

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.get("")
async def get_tasks(project_id: str | None = None, user_id: str = Depends(get_user_id)):
    """List recorded tasks, newest first, optionally for one project."""
    workspace = get_workspace(user_id)
    if project_id is not None:
        require_project(workspace, project_id)
    return JSONResponse(content=list_tasks(workspace, project_id))


@router.post("", status_code=201)
async def post_task(body: CreateTaskRequest, user_id: str = Depends(get_user_id)):
    """Record a completed task against a project."""
    workspace = get_workspace(user_id)
    require_project(workspace, body.project_id)
    task = record_task(workspace, body.project_id, body.name, body.human_time, body.ai_time)
    save_workspace(workspace)
    return JSONResponse(content=task, status_code=201)


@router.patch("/{task_id}")
async def patch_task(task_id: str, body: UpdateTaskRequest, user_id: str = Depends(get_user_id)):
    workspace = get_workspace(user_id)
    require_task(workspace, task_id)
    task = update_task(
        workspace, task_id,
        name=body.name, human_time=body.human_time, ai_time=body.ai_time,
    )
    save_workspace(workspace)
    return JSONResponse(content=task)


@router.delete("/{task_id}")
async def delete_task_route(task_id: str, user_id: str = Depends(get_user_id)):
    workspace = get_workspace(user_id)
    require_task(workspace, task_id)
    delete_task(workspace, task_id)
    save_workspace(workspace)
    return JSONResponse(content={"deleted": task_id})


@router.delete("")
async def clear_tasks_route(user_id: str = Depends(get_user_id)):
    """Delete every recorded task in the workspace."""
    workspace = get_workspace(user_id)
    count = clear_tasks(workspace)
    save_workspace(workspace)
    return JSONResponse(content={"deleted_count": count})
