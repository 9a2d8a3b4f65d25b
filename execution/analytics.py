"""Productivity analytics over a workspace's recorded tasks.

Time saved for a task is human_time - ai_time (minutes). Productivity gain is
that saving as a percentage of human_time, or 0 when human_time is 0.
"""

from execution.workspace_store import list_projects, list_tasks


def productivity_gain(task: dict) -> float:
    """Return the percentage of human time saved by using AI on a task."""
    human = task["human_time"]
    if human <= 0:
        return 0.0
    return (human - task["ai_time"]) / human * 100


def _time_saved(tasks: list[dict]) -> int:
    return round(sum(t["human_time"] - t["ai_time"] for t in tasks))


def _average_gain(tasks: list[dict]) -> float:
    if not tasks:
        return 0.0
    avg = sum(productivity_gain(t) for t in tasks) / len(tasks)
    return round(avg, 1)


def get_overview(workspace: dict) -> dict:
    """Return workspace-wide totals.

    Returns:
        Dict with total_tasks, total_projects, total_time_saved (minutes,
        rounded) and avg_productivity_gain (percent, one decimal).
    """
    tasks = workspace["tasks"]
    return {
        "total_tasks": len(tasks),
        "total_projects": len(workspace["projects"]),
        "total_time_saved": _time_saved(tasks),
        "avg_productivity_gain": _average_gain(tasks),
    }


def get_by_project(workspace: dict) -> list[dict]:
    """Return per-project totals, newest project first."""
    result = []
    for project in list_projects(workspace):
        tasks = list_tasks(workspace, project["id"])
        result.append({
            "project_id": project["id"],
            "project_name": project["name"],
            "task_count": len(tasks),
            "total_time_saved": _time_saved(tasks),
            "avg_productivity_gain": _average_gain(tasks),
        })
    return result


def get_chart_data(workspace: dict) -> list[dict]:
    """Return one chart row per recorded task, newest first."""
    names = {p["id"]: p["name"] for p in workspace["projects"]}
    return [
        {
            "id": task["id"],
            "name": task["name"],
            "human_time": task["human_time"],
            "ai_time": task["ai_time"],
            "productivity_gain": productivity_gain(task),
            "project_name": names.get(task["project_id"], "Unknown"),
        }
        for task in list_tasks(workspace)
    ]
