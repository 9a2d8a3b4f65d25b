"""AI assistant bridge for productivity chat, task estimates, and insights.

`chat()` is the free-form conversation entry point used by chat sessions and
the persisted-history chat API. It never raises: an unconfigured backend gets a
demo notice and any backend failure gets a fixed apology.

`estimate_task()` and `generate_insights()` ask the model for a JSON object and
fail closed with ParseError when no valid object can be extracted from the
reply. Transport errors from llm_client propagate unchanged.
"""

import json
import logging

from config.settings import (
    ESTIMATE_HISTORY_LIMIT,
    LLM_MAX_TOKENS,
    RECENT_TASKS_IN_CONTEXT,
)
from execution import llm_client
from execution.llm_client import LLMClientError, LLMUnavailableError
from execution.schema_validator import (
    get_estimate_validation_errors,
    get_insights_validation_errors,
)

logger = logging.getLogger(__name__)


class ParseError(Exception):
    """Raised when a structured reply does not contain a usable JSON object."""


DEMO_REPLY = (
    "I'm a demo AI assistant! To make me real, please add an "
    "OPENAI_API_KEY to your .env file."
)

APOLOGY_REPLY = "Sorry, I encountered an error while trying to reach the AI service."


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

CHAT_SYSTEM_PROMPT = """\
You are a helpful AI assistant for productivity tracking.

You can help users:
- Add tasks and projects
- Analyze their productivity data
- Answer questions about their work patterns
- Provide recommendations

Be concise and actionable in your responses."""

CONTEXT_PREAMBLE = "\n\nUser Context:\n{context}"

ESTIMATE_SYSTEM_PROMPT = """\
You are a time estimation specialist. You respond with a single JSON object \
and nothing else."""

ESTIMATE_USER_PROMPT = """\
Analyze this task description and provide estimates:
Task: "{description}"

User's historical data:
{history}

Provide estimates in JSON format:
{{
  "humanTime": number (in minutes),
  "aiTime": number (in minutes),
  "confidence": number (0-100),
  "category": string,
  "reasoning": string
}}"""

INSIGHTS_SYSTEM_PROMPT = """\
You are a productivity insights analyst. You respond with a single JSON object \
and nothing else."""

INSIGHTS_USER_PROMPT = """\
Analyze this user's data and provide insights:

Tasks: {tasks}
Projects: {projects}

Provide insights in JSON format:
{{
  "patterns": string[],
  "topAITasks": [{{ "task": string, "gain": number }}],
  "totalTimeSaved": number,
  "recommendations": string[],
  "trends": [{{ "period": string, "metric": string, "value": number }}]
}}"""


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


def build_context(tasks: list[dict], projects: list[dict]) -> str:
    """Summarize a user's stored data for the chat system preamble.

    Args:
        tasks: Recorded task dicts, newest first.
        projects: Project dicts.

    Returns:
        A short plain-text summary: counts, total time saved, recent tasks.
    """
    total_saved = sum(t["human_time"] - t["ai_time"] for t in tasks)
    recent = tasks[:RECENT_TASKS_IN_CONTEXT]
    recent_lines = "\n".join(
        f"- {t['name']}: {t['human_time']}min (human) vs {t['ai_time']}min (AI)"
        for t in recent
    ) or "- None yet"
    return (
        f"Total Projects: {len(projects)}\n"
        f"Total Tasks: {len(tasks)}\n"
        f"Total Time Saved: {round(total_saved)} minutes\n"
        f"\n"
        f"Recent Tasks:\n{recent_lines}"
    )


def _to_llm_messages(history: list[dict]) -> list[dict]:
    """Map conversation messages ({role, text}) to OpenAI chat messages."""
    return [
        {
            "role": "assistant" if m["role"] == "assistant" else "user",
            "content": m["text"],
        }
        for m in history
    ]


# ---------------------------------------------------------------------------
# Free-form chat
# ---------------------------------------------------------------------------


def chat(history: list[dict], utterance: str, context: str | None = None) -> str:
    """Produce an assistant reply to `utterance` given the prior turns.

    Args:
        history: Prior messages, oldest first, each with 'role' and 'text'.
        utterance: The new user message.
        context: Optional workspace summary injected ahead of the history.

    Returns:
        The reply text, or a user-safe fallback string. Never raises.
    """
    if not llm_client.is_available():
        logger.info("LLM unavailable, returning demo reply")
        return DEMO_REPLY

    system_prompt = CHAT_SYSTEM_PROMPT
    if context:
        system_prompt += CONTEXT_PREAMBLE.format(context=context)

    messages = _to_llm_messages(history)
    messages.append({"role": "user", "content": utterance})

    try:
        response = llm_client.chat(
            system_prompt=system_prompt,
            messages=messages,
            max_tokens=LLM_MAX_TOKENS,
            temperature=0.7,
        )
    except (LLMUnavailableError, LLMClientError) as e:
        logger.warning("Assistant chat failed: %s", e)
        return APOLOGY_REPLY
    except Exception as e:
        logger.warning("Unexpected error in assistant chat: %s", e)
        return APOLOGY_REPLY

    reply = (response.content or "").strip()
    if not reply:
        logger.warning("Assistant returned an empty reply")
        return APOLOGY_REPLY
    return reply


# ---------------------------------------------------------------------------
# Structured replies
# ---------------------------------------------------------------------------


def extract_json_object(text: str) -> dict:
    """Return the first complete JSON object found in `text`.

    Raises:
        ParseError: If there is no '{', or the object starting there is not valid JSON.
    """
    start = (text or "").find("{")
    if start == -1:
        raise ParseError("No JSON object found in assistant response")
    try:
        data, _ = json.JSONDecoder().raw_decode(text, start)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON object in assistant response: {e}") from e
    return data


def estimate_task(description: str, historical_tasks: list[dict]) -> dict:
    """Estimate human-only and human+AI minutes for a task description.

    Args:
        description: Free-text description of the task.
        historical_tasks: The user's recorded tasks, newest first.

    Returns:
        Dict with human_time, ai_time, confidence, category, reasoning.

    Raises:
        LLMUnavailableError: If the LLM is not configured.
        LLMClientError: If the API call fails.
        ParseError: If the reply has no valid estimate object.
    """
    history = [
        {"name": t["name"], "humanTime": t["human_time"], "aiTime": t["ai_time"]}
        for t in historical_tasks[:ESTIMATE_HISTORY_LIMIT]
    ]
    prompt = ESTIMATE_USER_PROMPT.format(
        description=description,
        history=json.dumps(history, indent=2),
    )
    response = llm_client.chat(
        system_prompt=ESTIMATE_SYSTEM_PROMPT,
        messages=[{"role": "user", "content": prompt}],
        temperature=0.3,
        response_format={"type": "json_object"},
    )
    data = extract_json_object(response.content)
    errors = get_estimate_validation_errors(data)
    if errors:
        logger.warning("Task estimate failed validation: %s", errors)
        raise ParseError(f"Estimate response is missing required fields: {errors[0]}")

    return {
        "human_time": data["humanTime"],
        "ai_time": data["aiTime"],
        "confidence": data["confidence"],
        "category": data["category"],
        "reasoning": data["reasoning"],
    }


def generate_insights(tasks: list[dict], projects: list[dict]) -> dict:
    """Ask the model for productivity patterns and recommendations.

    Raises:
        LLMUnavailableError: If the LLM is not configured.
        LLMClientError: If the API call fails.
        ParseError: If the reply has no valid insights object.
    """
    prompt = INSIGHTS_USER_PROMPT.format(
        tasks=json.dumps(tasks, indent=2, ensure_ascii=False),
        projects=json.dumps(projects, indent=2, ensure_ascii=False),
    )
    response = llm_client.chat(
        system_prompt=INSIGHTS_SYSTEM_PROMPT,
        messages=[{"role": "user", "content": prompt}],
        max_tokens=2048,
        temperature=0.5,
        response_format={"type": "json_object"},
    )
    data = extract_json_object(response.content)
    errors = get_insights_validation_errors(data)
    if errors:
        logger.warning("Insights failed validation: %s", errors)
        raise ParseError(f"Insights response is missing required fields: {errors[0]}")

    return {
        "patterns": data["patterns"],
        "top_ai_tasks": data["topAITasks"],
        "total_time_saved": data["totalTimeSaved"],
        "recommendations": data["recommendations"],
        "trends": data["trends"],
    }
