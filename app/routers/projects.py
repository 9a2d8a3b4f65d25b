"""Project management routes: dashboard page, project CRUD, task definitions."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.chat_engine import QUICK_ACTIONS, get_welcome_message
from app.dependencies import get_user_id, get_workspace, require_project
from app.models.project import (
    CreateProjectRequest,
    TaskDefinitionRequest,
    UpdateProjectRequest,
)
from execution.analytics import get_chart_data, get_overview
from execution.workspace_store import (
    add_task_definition,
    create_project,
    delete_project,
    list_projects,
    remove_task_definition,
    rename_project,
    save_workspace,
)

router = APIRouter()


@router.get("/")
async def index(request: Request, user_id: str = Depends(get_user_id)):
    """Dashboard: projects, recorded tasks, totals, and the chat panel."""
    workspace = get_workspace(user_id)
    return request.app.state.templates.TemplateResponse(
        request, "index.html",
        {
            "projects": list_projects(workspace),
            "chart_data": get_chart_data(workspace),
            "overview": get_overview(workspace),
            "quick_actions": QUICK_ACTIONS,
            "welcome": get_welcome_message(),
        },
    )


@router.get("/api/projects")
async def get_projects(user_id: str = Depends(get_user_id)):
    """List projects, newest first."""
    workspace = get_workspace(user_id)
    return JSONResponse(content=list_projects(workspace))


@router.post("/api/projects", status_code=201)
async def post_project(body: CreateProjectRequest, user_id: str = Depends(get_user_id)):
    """Create a project with optional initial task definitions."""
    workspace = get_workspace(user_id)
    project = create_project(workspace, body.name, body.task_names)
    save_workspace(workspace)
    return JSONResponse(content=project, status_code=201)


@router.get("/api/projects/{project_id}")
async def get_project_detail(project_id: str, user_id: str = Depends(get_user_id)):
    workspace = get_workspace(user_id)
    return JSONResponse(content=require_project(workspace, project_id))


@router.patch("/api/projects/{project_id}")
async def patch_project(
    project_id: str,
    body: UpdateProjectRequest,
    user_id: str = Depends(get_user_id),
):
    """Rename a project."""
    workspace = get_workspace(user_id)
    require_project(workspace, project_id)
    project = rename_project(workspace, project_id, body.name)
    save_workspace(workspace)
    return JSONResponse(content=project)


@router.delete("/api/projects/{project_id}")
async def delete_project_route(project_id: str, user_id: str = Depends(get_user_id)):
    """Delete a project and the tasks recorded against it."""
    workspace = get_workspace(user_id)
    require_project(workspace, project_id)
    delete_project(workspace, project_id)
    save_workspace(workspace)
    return JSONResponse(content={"deleted": project_id})


@router.post("/api/projects/{project_id}/tasks/definition", status_code=201)
async def post_task_definition(
    project_id: str,
    body: TaskDefinitionRequest,
    user_id: str = Depends(get_user_id),
):
    """Append a task-name definition to a project."""
    workspace = get_workspace(user_id)
    require_project(workspace, project_id)
    project = add_task_definition(workspace, project_id, body.name)
    save_workspace(workspace)
    return JSONResponse(content=project, status_code=201)


@router.delete("/api/projects/{project_id}/tasks/definition/{task_name}")
async def delete_task_definition(
    project_id: str,
    task_name: str,
    user_id: str = Depends(get_user_id),
):
    """Remove a task-name definition from a project."""
    workspace = get_workspace(user_id)
    require_project(workspace, project_id)
    project = remove_task_definition(workspace, project_id, task_name)
    save_workspace(workspace)
    return JSONResponse(content=project)
