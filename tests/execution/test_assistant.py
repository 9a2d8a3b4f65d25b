"""Unit tests for execution/assistant.py."""

import json
from unittest.mock import patch

import pytest

from execution.assistant import (
    APOLOGY_REPLY,
    DEMO_REPLY,
    ParseError,
    build_context,
    chat,
    estimate_task,
    extract_json_object,
    generate_insights,
)
from execution.llm_client import LLMClientError, LLMResponse, LLMUnavailableError


def _response(content):
    return LLMResponse(content=content, model="gpt-4o-mini", usage={}, stop_reason="stop")


@pytest.fixture
def llm_on(monkeypatch):
    monkeypatch.setattr("execution.llm_client.OPENAI_API_KEY", "sk-test")


class TestBuildContext:
    def test_summary(self, sample_workspace):
        context = build_context(
            list(reversed(sample_workspace["tasks"])), sample_workspace["projects"],
        )
        assert "Total Projects: 2" in context
        assert "Total Tasks: 2" in context
        assert "Total Time Saved: 105 minutes" in context
        assert "- Write Copy: 60min (human) vs 45min (AI)" in context

    def test_empty(self):
        context = build_context([], [])
        assert "Total Tasks: 0" in context
        assert "- None yet" in context

    def test_recent_tasks_limited(self, monkeypatch):
        monkeypatch.setattr("execution.assistant.RECENT_TASKS_IN_CONTEXT", 1)
        tasks = [
            {"name": "New", "human_time": 10, "ai_time": 5},
            {"name": "Old", "human_time": 10, "ai_time": 5},
        ]
        context = build_context(tasks, [])
        assert "- New:" in context
        assert "- Old:" not in context


class TestChat:
    def test_demo_reply_when_unavailable(self):
        with patch("execution.llm_client.chat") as mock_chat:
            assert chat([], "Hello") == DEMO_REPLY
        mock_chat.assert_not_called()

    def test_reply(self, llm_on):
        with patch("execution.llm_client.chat", return_value=_response("  Hi!  ")) as mock_chat:
            reply = chat(
                [{"role": "user", "text": "Earlier"}, {"role": "assistant", "text": "Sure"}],
                "Hello",
                context="Total Tasks: 0",
            )
        assert reply == "Hi!"
        kwargs = mock_chat.call_args[1]
        assert kwargs["messages"] == [
            {"role": "user", "content": "Earlier"},
            {"role": "assistant", "content": "Sure"},
            {"role": "user", "content": "Hello"},
        ]
        assert kwargs["system_prompt"].endswith("User Context:\nTotal Tasks: 0")

    def test_no_context(self, llm_on):
        with patch("execution.llm_client.chat", return_value=_response("ok")) as mock_chat:
            chat([], "Hello")
        assert "User Context" not in mock_chat.call_args[1]["system_prompt"]

    @pytest.mark.parametrize("error", [
        LLMClientError("boom"), LLMUnavailableError("gone"), RuntimeError("odd"),
    ])
    def test_errors_become_apology(self, llm_on, error):
        with patch("execution.llm_client.chat", side_effect=error):
            assert chat([], "Hello") == APOLOGY_REPLY

    def test_empty_reply_becomes_apology(self, llm_on):
        with patch("execution.llm_client.chat", return_value=_response("   ")):
            assert chat([], "Hello") == APOLOGY_REPLY


class TestExtractJsonObject:
    def test_plain_object(self):
        assert extract_json_object('{"a": 1}') == {"a": 1}

    def test_surrounding_prose(self):
        text = 'Here you go:\n```json\n{"a": {"b": [1, 2]}}\n```\nThanks!'
        assert extract_json_object(text) == {"a": {"b": [1, 2]}}

    def test_first_object_wins(self):
        assert extract_json_object('{"a": 1} {"b": 2}') == {"a": 1}

    def test_no_object(self):
        with pytest.raises(ParseError, match="No JSON object"):
            extract_json_object("no json here")

    def test_invalid_object(self):
        with pytest.raises(ParseError, match="Invalid JSON"):
            extract_json_object('{"a": ')

    def test_none(self):
        with pytest.raises(ParseError):
            extract_json_object(None)


class TestEstimateTask:
    VALID = {
        "humanTime": 60, "aiTime": 20, "confidence": 80,
        "category": "Writing", "reasoning": "Drafts are quick with AI.",
    }

    def test_estimate(self, llm_on, sample_workspace):
        content = "Estimate: " + json.dumps(self.VALID)
        with patch("execution.llm_client.chat", return_value=_response(content)) as mock_chat:
            estimate = estimate_task("Write a blog post", sample_workspace["tasks"])
        assert estimate == {
            "human_time": 60, "ai_time": 20, "confidence": 80,
            "category": "Writing", "reasoning": "Drafts are quick with AI.",
        }
        kwargs = mock_chat.call_args[1]
        assert kwargs["response_format"] == {"type": "json_object"}
        assert "Write a blog post" in kwargs["messages"][0]["content"]
        assert '"humanTime": 120' in kwargs["messages"][0]["content"]

    def test_history_limited(self, llm_on, monkeypatch, sample_workspace):
        monkeypatch.setattr("execution.assistant.ESTIMATE_HISTORY_LIMIT", 1)
        with patch("execution.llm_client.chat",
                   return_value=_response(json.dumps(self.VALID))) as mock_chat:
            estimate_task("Task", sample_workspace["tasks"])
        prompt = mock_chat.call_args[1]["messages"][0]["content"]
        assert "Design Homepage" in prompt
        assert "Write Copy" not in prompt

    def test_missing_field_raises(self, llm_on):
        partial = {k: v for k, v in self.VALID.items() if k != "aiTime"}
        with patch("execution.llm_client.chat", return_value=_response(json.dumps(partial))):
            with pytest.raises(ParseError, match="missing required fields"):
                estimate_task("Task", [])

    def test_not_json_raises(self, llm_on):
        with patch("execution.llm_client.chat", return_value=_response("about an hour")):
            with pytest.raises(ParseError):
                estimate_task("Task", [])

    def test_unavailable_propagates(self):
        with pytest.raises(LLMUnavailableError):
            estimate_task("Task", [])


class TestGenerateInsights:
    VALID = {
        "patterns": ["Writing is faster"],
        "topAITasks": [{"task": "Design Homepage", "gain": 75}],
        "totalTimeSaved": 105,
        "recommendations": ["Keep using AI for drafts"],
        "trends": [],
    }

    def test_insights(self, llm_on, sample_workspace):
        with patch("execution.llm_client.chat",
                   return_value=_response(json.dumps(self.VALID))) as mock_chat:
            insights = generate_insights(sample_workspace["tasks"], sample_workspace["projects"])
        assert insights["top_ai_tasks"] == [{"task": "Design Homepage", "gain": 75}]
        assert insights["total_time_saved"] == 105
        assert insights["trends"] == []
        assert mock_chat.call_args[1]["max_tokens"] == 2048

    def test_invalid_shape_raises(self, llm_on):
        bad = dict(self.VALID, patterns="none")
        with patch("execution.llm_client.chat", return_value=_response(json.dumps(bad))):
            with pytest.raises(ParseError):
                generate_insights([], [])

    def test_client_error_propagates(self, llm_on):
        with patch("execution.llm_client.chat", side_effect=LLMClientError("boom")):
            with pytest.raises(LLMClientError):
                generate_insights([], [])
