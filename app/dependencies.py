"""Shared dependencies for the FastAPI web layer."""

from fastapi import Header, HTTPException

from app.chat_sessions import ChatSession, get_session
from config.settings import DEFAULT_USER_ID
from execution.workspace_store import get_or_create_workspace, get_project, get_task


def get_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Return the workspace owner for this request.

    Authentication is handled upstream; the caller identifies the user with
    the X-User-Id header, falling back to DEFAULT_USER_ID.
    """
    user_id = (x_user_id or "").strip() or DEFAULT_USER_ID
    if ".." in user_id or "/" in user_id or "\\" in user_id:
        raise HTTPException(status_code=400, detail=f"Invalid user id: {user_id}")
    return user_id


def get_workspace(user_id: str) -> dict:
    """Load the user's workspace, creating it on first use."""
    return get_or_create_workspace(user_id)


def require_project(workspace: dict, project_id: str) -> dict:
    """Return the project or raise 404."""
    try:
        return get_project(workspace, project_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Project '{project_id}' not found")


def require_task(workspace: dict, task_id: str) -> dict:
    """Return the recorded task or raise 404."""
    try:
        return get_task(workspace, task_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Task '{task_id}' not found")


def require_chat_session(session_id: str, user_id: str) -> ChatSession:
    """Return the user's open chat session or raise 404."""
    try:
        session = get_session(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Chat session '{session_id}' not found")
    if session.user_id != user_id:
        raise HTTPException(status_code=404, detail=f"Chat session '{session_id}' not found")
    return session
