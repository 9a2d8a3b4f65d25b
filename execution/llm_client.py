"""OpenAI transport for the productivity assistant.

Callers in execution/assistant.py build the prompts; this module turns them
into one chat completion request and wraps every SDK failure in
LLMClientError. Availability depends on both LLM_ENABLED and an API key, so a
deployment can switch the assistant off without removing its key.
"""

import logging
from dataclasses import dataclass

from config.settings import (
    LLM_ENABLED,
    LLM_MAX_RETRIES,
    LLM_MAX_TOKENS,
    LLM_MODEL,
    LLM_TEMPERATURE,
    LLM_TIMEOUT_SECONDS,
    OPENAI_API_KEY,
)

logger = logging.getLogger(__name__)


class LLMUnavailableError(Exception):
    """Raised when the assistant backend is disabled or has no API key."""


class LLMClientError(Exception):
    """Raised when a completion request fails."""


@dataclass
class LLMResponse:
    """One completion: reply text plus request metadata."""

    content: str
    model: str
    usage: dict
    stop_reason: str


def is_available() -> bool:
    return bool(LLM_ENABLED and OPENAI_API_KEY)


def _usage(response) -> dict:
    usage = getattr(response, "usage", None)
    if usage is None:
        return {}
    return {
        "prompt_tokens": usage.prompt_tokens,
        "completion_tokens": usage.completion_tokens,
    }


def chat(
    system_prompt: str,
    messages: list[dict],
    model: str | None = None,
    max_tokens: int | None = None,
    temperature: float | None = None,
    response_format: dict | None = None,
    timeout: float | None = None,
) -> LLMResponse:
    """Run one chat completion.

    Args:
        system_prompt: Sent as the leading system message.
        messages: Conversation turns as {'role', 'content'} dicts, oldest first.
        model: Overrides LLM_MODEL.
        max_tokens: Overrides LLM_MAX_TOKENS.
        temperature: Overrides LLM_TEMPERATURE; 0.0 is honoured.
        response_format: Passed through when given, e.g. {"type": "json_object"}.
        timeout: Per-request timeout in seconds; overrides LLM_TIMEOUT_SECONDS.

    Returns:
        The LLMResponse. Content is "" when the model returned none.

    Raises:
        LLMUnavailableError: If the assistant is disabled or has no API key.
        LLMClientError: On any API, network, or timeout failure.
    """
    if not is_available():
        raise LLMUnavailableError("OPENAI_API_KEY is not configured or LLM_ENABLED is off")

    try:
        import openai
    except ImportError as e:
        raise LLMUnavailableError(
            "openai package is not installed. Run: pip install openai"
        ) from e

    request = {
        "model": model or LLM_MODEL,
        "max_tokens": max_tokens or LLM_MAX_TOKENS,
        "temperature": LLM_TEMPERATURE if temperature is None else temperature,
        "messages": [{"role": "system", "content": system_prompt}, *messages],
    }
    if response_format is not None:
        request["response_format"] = response_format

    logger.debug(
        "Requesting completion from %s (%d messages)", request["model"], len(messages),
    )
    try:
        client = openai.OpenAI(
            api_key=OPENAI_API_KEY,
            timeout=LLM_TIMEOUT_SECONDS if timeout is None else timeout,
            max_retries=LLM_MAX_RETRIES,
        )
        response = client.chat.completions.create(**request)
    except openai.APITimeoutError as e:
        raise LLMClientError(f"OpenAI request timed out: {e}") from e
    except openai.APIError as e:
        raise LLMClientError(f"OpenAI API error: {e}") from e
    except Exception as e:
        raise LLMClientError(f"LLM call failed: {e}") from e

    choice = response.choices[0]
    result = LLMResponse(
        content=choice.message.content or "",
        model=response.model,
        usage=_usage(response),
        stop_reason=choice.finish_reason,
    )
    logger.debug("Completion finished (%s, %s)", result.stop_reason, result.usage)
    return result
