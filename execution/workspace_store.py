"""Workspace store for the AI Productivity Companion.

Manages the per-user workspace JSON file: load, save, initialize, project and
task-definition mutations, recorded tasks, and the persisted assistant chat
history.

Every write path in the application goes through this module.
"""

import json
import os
import shutil
import tempfile
import uuid
from datetime import datetime, timezone
from pathlib import Path

from config.settings import DATA_DIR

CHAT_ROLES = ("user", "assistant")


def _now() -> str:
    """Return current UTC time as ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return str(uuid.uuid4())


def _check_user_id(user_id: str) -> None:
    """Reject user ids that could escape DATA_DIR."""
    if not user_id or ".." in user_id or "/" in user_id or "\\" in user_id:
        raise ValueError(f"Invalid user id: {user_id!r}")


def _workspace_path(user_id: str) -> Path:
    """Return the path to a user's workspace file."""
    _check_user_id(user_id)
    return DATA_DIR / user_id / "workspace.json"


def _clean_name(value: str, label: str) -> str:
    name = (value or "").strip()
    if not name:
        raise ValueError(f"{label} cannot be empty")
    return name


def _check_minutes(value, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{label} must be a whole number of minutes")
    if value < 0:
        raise ValueError(f"{label} cannot be negative")
    return value


# ---------------------------------------------------------------------------
# Workspace lifecycle
# ---------------------------------------------------------------------------


def initialize_workspace(user_id: str) -> dict:
    """Create a new empty workspace and write it to disk.

    Args:
        user_id: Identifier of the workspace owner.

    Returns:
        The initialized workspace dictionary.
    """
    now = _now()
    workspace = {
        "user_id": user_id,
        "created_at": now,
        "updated_at": now,
        "projects": [],
        "tasks": [],
        "chat_history": [],
    }
    save_workspace(workspace)
    return workspace


def load_workspace(user_id: str) -> dict:
    """Load a workspace from its JSON file.

    Args:
        user_id: Identifier of the workspace owner.

    Returns:
        The workspace dictionary.

    Raises:
        FileNotFoundError: If the workspace file does not exist.
        json.JSONDecodeError: If the workspace file contains invalid JSON.
    """
    path = _workspace_path(user_id)
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def get_or_create_workspace(user_id: str) -> dict:
    """Load the user's workspace, creating an empty one on first use."""
    try:
        return load_workspace(user_id)
    except FileNotFoundError:
        return initialize_workspace(user_id)


def save_workspace(workspace: dict) -> None:
    """Write the workspace to its JSON file with an atomic write.

    Args:
        workspace: The workspace dictionary to save.
    """
    workspace["updated_at"] = _now()

    path = _workspace_path(workspace["user_id"])
    path.parent.mkdir(parents=True, exist_ok=True)

    # Atomic write: write to temp file in same directory, then rename
    fd, tmp_path = tempfile.mkstemp(
        dir=str(path.parent), suffix=".tmp", prefix="workspace_"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(workspace, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, str(path))
    except Exception:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def delete_workspace(user_id: str) -> bool:
    """Delete a user's workspace directory.

    Returns:
        True if the workspace was deleted, False if it didn't exist.
    """
    path = _workspace_path(user_id)
    if not path.exists():
        return False
    shutil.rmtree(path.parent)
    return True


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


def list_projects(workspace: dict) -> list[dict]:
    """Return projects newest first."""
    return list(reversed(workspace["projects"]))


def get_project(workspace: dict, project_id: str) -> dict:
    """Return a project by id.

    Raises:
        KeyError: If no project has this id.
    """
    for project in workspace["projects"]:
        if project["id"] == project_id:
            return project
    raise KeyError(f"Project '{project_id}' not found")


def create_project(workspace: dict, name: str, task_names: list[str] | None = None) -> dict:
    """Create a project with optional initial task definitions.

    Args:
        workspace: The workspace dictionary.
        name: Project name.
        task_names: Initial task-name definitions, in order.

    Returns:
        The new project dictionary.

    Raises:
        ValueError: If the name (or any task name) is blank.
    """
    project = {
        "id": _new_id(),
        "name": _clean_name(name, "Project name"),
        "task_names": [_clean_name(t, "Task name") for t in (task_names or [])],
        "created_at": _now(),
    }
    workspace["projects"].append(project)
    return project


def rename_project(workspace: dict, project_id: str, name: str) -> dict:
    project = get_project(workspace, project_id)
    project["name"] = _clean_name(name, "Project name")
    return project


def delete_project(workspace: dict, project_id: str) -> dict:
    """Remove a project and every task recorded against it.

    Returns:
        The removed project dictionary.

    Raises:
        KeyError: If no project has this id.
    """
    project = get_project(workspace, project_id)
    workspace["projects"].remove(project)
    workspace["tasks"] = [t for t in workspace["tasks"] if t["project_id"] != project_id]
    return project


def add_task_definition(workspace: dict, project_id: str, task_name: str) -> dict:
    """Append a task-name definition to a project.

    Names are not deduplicated; adding an existing name appends it again.

    Returns:
        The updated project dictionary.

    Raises:
        KeyError: If no project has this id.
        ValueError: If the task name is blank.
    """
    project = get_project(workspace, project_id)
    project["task_names"].append(_clean_name(task_name, "Task name"))
    return project


def remove_task_definition(workspace: dict, project_id: str, task_name: str) -> dict:
    """Remove every definition with this name from a project."""
    project = get_project(workspace, project_id)
    project["task_names"] = [n for n in project["task_names"] if n != task_name]
    return project


def project_snapshot(workspace: dict) -> list[dict]:
    """Return the ordered, read-only project view used by the chat engine.

    Each entry is ``{"id", "name", "tasks"}`` where ``tasks`` is a copy of the
    project's task-name definitions.
    """
    return [
        {"id": p["id"], "name": p["name"], "tasks": list(p["task_names"])}
        for p in list_projects(workspace)
    ]


# ---------------------------------------------------------------------------
# Recorded tasks
# ---------------------------------------------------------------------------


def list_tasks(workspace: dict, project_id: str | None = None) -> list[dict]:
    """Return recorded tasks newest first, optionally for a single project."""
    tasks = workspace["tasks"]
    if project_id is not None:
        tasks = [t for t in tasks if t["project_id"] == project_id]
    return list(reversed(tasks))


def get_task(workspace: dict, task_id: str) -> dict:
    """Return a recorded task by id.

    Raises:
        KeyError: If no task has this id.
    """
    for task in workspace["tasks"]:
        if task["id"] == task_id:
            return task
    raise KeyError(f"Task '{task_id}' not found")


def record_task(
    workspace: dict,
    project_id: str,
    name: str,
    human_time: int,
    ai_time: int,
) -> dict:
    """Record a completed task with its human-only and human+AI times.

    Args:
        workspace: The workspace dictionary.
        project_id: The project the task belongs to.
        name: Task name.
        human_time: Minutes taken without AI.
        ai_time: Minutes taken with AI.

    Returns:
        The new task dictionary.

    Raises:
        KeyError: If the project does not exist.
        ValueError: If the name is blank or a time is not a non-negative integer.
    """
    get_project(workspace, project_id)
    task = {
        "id": _new_id(),
        "project_id": project_id,
        "name": _clean_name(name, "Task name"),
        "human_time": _check_minutes(human_time, "Human time"),
        "ai_time": _check_minutes(ai_time, "AI time"),
        "created_at": _now(),
    }
    workspace["tasks"].append(task)
    return task


def update_task(
    workspace: dict,
    task_id: str,
    name: str | None = None,
    human_time: int | None = None,
    ai_time: int | None = None,
) -> dict:
    """Update the given fields of a recorded task."""
    task = get_task(workspace, task_id)
    if name is not None:
        task["name"] = _clean_name(name, "Task name")
    if human_time is not None:
        task["human_time"] = _check_minutes(human_time, "Human time")
    if ai_time is not None:
        task["ai_time"] = _check_minutes(ai_time, "AI time")
    return task


def delete_task(workspace: dict, task_id: str) -> dict:
    task = get_task(workspace, task_id)
    workspace["tasks"].remove(task)
    return task


def clear_tasks(workspace: dict) -> int:
    """Remove every recorded task. Returns how many were removed."""
    count = len(workspace["tasks"])
    workspace["tasks"] = []
    return count


# ---------------------------------------------------------------------------
# Assistant chat history
# ---------------------------------------------------------------------------


def append_chat_message(workspace: dict, role: str, text: str) -> dict:
    """Append a message to the persisted assistant chat history.

    Args:
        workspace: The workspace dictionary.
        role: 'user' or 'assistant'.
        text: The message text.

    Returns:
        The updated workspace dictionary.
    """
    if role not in CHAT_ROLES:
        raise ValueError(f"Invalid chat role: {role}. Must be 'user' or 'assistant'")
    workspace["chat_history"].append({"role": role, "text": text, "created_at": _now()})
    return workspace


def get_chat_history(workspace: dict, limit: int | None = None) -> list[dict]:
    """Return the persisted chat history, oldest first, optionally the last `limit` entries."""
    history = workspace["chat_history"]
    if limit is not None:
        history = history[-limit:] if limit > 0 else []
    return list(history)


def clear_chat_history(workspace: dict) -> int:
    count = len(workspace["chat_history"])
    workspace["chat_history"] = []
    return count
