"""Tests for chat session routes."""

from unittest.mock import patch

from app.chat_sessions import get_session
from execution.assistant import DEMO_REPLY


def _send(client, session_id, message, **kwargs):
    return client.post(f"/api/chat/sessions/{session_id}/messages", json={"message": message}, **kwargs)


def _action(client, session_id, action, **kwargs):
    return client.post(f"/api/chat/sessions/{session_id}/actions", json={"action": action}, **kwargs)


class TestSessionLifecycle:
    def test_open_session(self, client):
        response = client.post("/api/chat/sessions")
        assert response.status_code == 201
        data = response.json()
        assert data["mode"] == "free_chat"
        assert data["buffer"] is None
        assert data["messages"] == []
        assert [a["label"] for a in data["quick_actions"]] == [
            "+ New Project", "+ Add Task", "Add to Dashboard",
        ]

    def test_get_snapshot(self, client, chat_session):
        response = client.get(f"/api/chat/sessions/{chat_session}")
        assert response.status_code == 200
        assert response.json()["session_id"] == chat_session

    def test_unknown_session_returns_404(self, client):
        assert client.get("/api/chat/sessions/missing").status_code == 404

    def test_other_users_session_returns_404(self, client):
        session_id = client.post(
            "/api/chat/sessions", headers={"X-User-Id": "alice"},
        ).json()["session_id"]
        response = client.get(f"/api/chat/sessions/{session_id}", headers={"X-User-Id": "bob"})
        assert response.status_code == 404

    def test_close_session(self, client, chat_session):
        response = client.delete(f"/api/chat/sessions/{chat_session}")
        assert response.json() == {"session_id": chat_session, "closed": True}
        assert client.get(f"/api/chat/sessions/{chat_session}").status_code == 404


class TestFreeChatMessages:
    def test_demo_reply(self, client, chat_session):
        response = _send(client, chat_session, "Hello")
        assert response.status_code == 200
        data = response.json()
        assert data["assistant_messages"] == [DEMO_REPLY]
        assert data["messages"][-2:] == [
            {"role": "user", "text": "Hello"},
            {"role": "assistant", "text": DEMO_REPLY},
        ]
        assert data["awaiting_response"] is False

    def test_assistant_reply(self, client, chat_session):
        with patch("execution.assistant.chat", return_value="You saved 0 minutes."):
            response = _send(client, chat_session, "How am I doing?")
        assert response.json()["assistant_messages"] == ["You saved 0 minutes."]

    def test_blank_message_returns_422(self, client, chat_session):
        assert _send(client, chat_session, "   ").status_code == 422
        assert _send(client, chat_session, "").status_code == 422
        assert client.get(f"/api/chat/sessions/{chat_session}").json()["messages"] == []

    def test_busy_session_returns_409(self, client, chat_session):
        get_session(chat_session).awaiting_response = True
        assert _send(client, chat_session, "Hello").status_code == 409
        assert _action(client, chat_session, "create_project").status_code == 409


class TestGuidedFlows:
    def test_create_project(self, client, chat_session):
        response = _action(client, chat_session, "create_project")
        assert response.status_code == 200
        data = response.json()
        assert data["mode"] == "awaiting_project_name"
        assert data["buffer"] == {}
        assert data["quick_actions"] == []
        assert data["assistant_messages"] == ["Great! What should we name the new project?"]

        data = _send(client, chat_session, "Launch").json()
        assert data["mode"] == "awaiting_project_initial_task"
        assert data["buffer"] == {"project_name": "Launch"}

        data = _send(client, chat_session, "Draft plan").json()
        assert data["mode"] == "free_chat"
        assert data["buffer"] is None
        assert data["assistant_messages"] == ['Project "Launch" created with task "Draft plan"!']

        [project] = client.get("/api/projects").json()
        assert project["name"] == "Launch"
        assert project["task_names"] == ["Draft plan"]

    def test_fill_form(self, client, created_project, chat_session):
        data = _action(client, chat_session, "fill_form").json()
        assert "1. Website Redesign" in data["assistant_messages"][0]

        _send(client, chat_session, "1")
        data = _send(client, chat_session, "1").json()
        assert data["mode"] == "awaiting_form_human_time"
        assert data["buffer"]["task_name"] == "Design Homepage"

        data = _send(client, chat_session, "abc").json()
        assert data["assistant_messages"] == ["Please enter a valid number for minutes."]
        assert data["mode"] == "awaiting_form_human_time"

        _send(client, chat_session, "120")
        data = _send(client, chat_session, "30").json()
        assert data["assistant_messages"] == ["Task added to the dashboard!"]

        [task] = client.get("/api/tasks").json()
        assert task["project_id"] == created_project["id"]
        assert task["name"] == "Design Homepage"
        assert task["human_time"] == 120
        assert task["ai_time"] == 30

    def test_add_task_invalid_selection(self, client, created_project, chat_session):
        _action(client, chat_session, "add_task")
        data = _send(client, chat_session, "5").json()
        assert data["assistant_messages"] == [
            "Invalid selection. Please type the number of the project."
        ]
        assert data["mode"] == "awaiting_task_target_project_selection"

    def test_no_projects(self, client, chat_session):
        data = _action(client, chat_session, "add_task").json()
        assert data["mode"] == "free_chat"
        assert data["assistant_messages"] == ["You don't have any projects yet. Create one first!"]

    def test_action_during_flow_returns_409(self, client, chat_session):
        _action(client, chat_session, "create_project")
        response = _action(client, chat_session, "fill_form")
        assert response.status_code == 409
        snapshot = client.get(f"/api/chat/sessions/{chat_session}").json()
        assert snapshot["mode"] == "awaiting_project_name"

    def test_unknown_action_returns_422(self, client, chat_session):
        assert _action(client, chat_session, "delete_everything").status_code == 422

    def test_closing_mid_flow_writes_nothing(self, client, chat_session):
        _action(client, chat_session, "create_project")
        _send(client, chat_session, "Launch")
        client.delete(f"/api/chat/sessions/{chat_session}")
        assert client.get("/api/projects").json() == []
