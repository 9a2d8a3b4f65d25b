"""Shared test fixtures for the AI Productivity Companion test suite."""

import pytest

from app.chat_sessions import clear_sessions


@pytest.fixture(autouse=True)
def set_test_environment(monkeypatch):
    """Ensure all tests run with ENVIRONMENT=test and no live LLM."""
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setattr("execution.llm_client.OPENAI_API_KEY", "")
    monkeypatch.setattr("execution.llm_client.LLM_ENABLED", True)


@pytest.fixture(autouse=True)
def reset_chat_sessions():
    """Start and finish every test with an empty session registry."""
    clear_sessions()
    yield
    clear_sessions()


@pytest.fixture
def tmp_data_dir(monkeypatch, tmp_path):
    """Redirect DATA_DIR to a temporary directory for test isolation."""
    import config.settings as settings
    import execution.workspace_store as ws

    monkeypatch.setattr(settings, "DATA_DIR", tmp_path)
    # Also patch it in modules that import DATA_DIR at module level
    monkeypatch.setattr(ws, "DATA_DIR", tmp_path)
    return tmp_path


@pytest.fixture
def sample_workspace():
    """Return a minimal valid in-memory workspace."""
    return {
        "user_id": "tester",
        "created_at": "2025-01-01T00:00:00+00:00",
        "updated_at": "2025-01-01T00:00:00+00:00",
        "projects": [
            {
                "id": "proj-web",
                "name": "Website Redesign",
                "task_names": ["Design Homepage", "Write Copy"],
                "created_at": "2025-01-01T00:00:00+00:00",
            },
            {
                "id": "proj-empty",
                "name": "Empty Project",
                "task_names": [],
                "created_at": "2025-01-02T00:00:00+00:00",
            },
        ],
        "tasks": [
            {
                "id": "task-1",
                "project_id": "proj-web",
                "name": "Design Homepage",
                "human_time": 120,
                "ai_time": 30,
                "created_at": "2025-01-03T00:00:00+00:00",
            },
            {
                "id": "task-2",
                "project_id": "proj-web",
                "name": "Write Copy",
                "human_time": 60,
                "ai_time": 45,
                "created_at": "2025-01-04T00:00:00+00:00",
            },
        ],
        "chat_history": [],
    }


@pytest.fixture
def sample_projects():
    """Return an ordered project snapshot as the chat engine receives it."""
    return [
        {"id": "proj-web", "name": "Website Redesign", "tasks": ["Design Homepage", "Write Copy"]},
        {"id": "proj-empty", "name": "Empty Project", "tasks": []},
    ]
