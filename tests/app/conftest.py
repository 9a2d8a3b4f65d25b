"""Test fixtures for the web layer."""

import pytest
from fastapi.testclient import TestClient

from app.main import app


@pytest.fixture
def client(tmp_data_dir):
    """Create a TestClient with workspaces directed to a temp directory."""
    return TestClient(app)


@pytest.fixture
def created_project(client):
    """Create a project with one task definition and return it."""
    response = client.post(
        "/api/projects",
        json={"name": "Website Redesign", "task_names": ["Design Homepage"]},
    )
    return response.json()


@pytest.fixture
def chat_session(client):
    """Open a chat session and return its id."""
    response = client.post("/api/chat/sessions")
    return response.json()["session_id"]
