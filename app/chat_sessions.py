"""In-memory chat sessions for the guided-entry assistant.

A session owns its message log and conversation state for as long as the chat
window is open. Nothing here is written to disk: only the mutation requested
by a completed flow reaches the workspace store. Discarding a session cancels
any assistant call still in flight and drops its result. Sessions left idle
for CHAT_SESSION_IDLE_SECONDS are discarded the next time a session is opened.

Turns are processed one at a time per session; a second turn submitted while
the first is still awaiting the assistant is rejected with SessionBusyError.
"""

import asyncio
import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from app.chat_engine import (
    FREE_CHAT,
    AddTaskDefinition,
    ChatState,
    CreateProject,
    MutationRequest,
    RecordTask,
    Transition,
    available_actions,
    get_buffer,
    handle_user_input,
    initial_state,
    start_flow,
)
from config.settings import CHAT_SESSION_IDLE_SECONDS, LLM_TIMEOUT_SECONDS
from execution import assistant
from execution.workspace_store import (
    add_task_definition,
    create_project,
    get_or_create_workspace,
    list_projects,
    list_tasks,
    project_snapshot,
    record_task,
    save_workspace,
)

logger = logging.getLogger(__name__)

MSG_SAVE_FAILED = "Sorry, I couldn't save that. Please try again."


class SessionBusyError(Exception):
    """Raised when a turn arrives while the previous one is still pending."""


class SessionClosedError(Exception):
    """Raised when a session is discarded while its turn is in flight."""


@dataclass
class ChatSession:
    """One open chat window: message log plus conversation state."""

    session_id: str
    user_id: str
    state: ChatState = field(default_factory=initial_state)
    messages: list[dict] = field(default_factory=list)
    awaiting_response: bool = False
    closed: bool = False
    pending: asyncio.Future | None = None
    created_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    last_active: float = field(default_factory=time.monotonic)

    def append(self, role: str, text: str) -> None:
        self.messages.append({"role": role, "text": text})

    def touch(self) -> None:
        self.last_active = time.monotonic()

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "mode": self.state.mode,
            "buffer": get_buffer(self.state),
            "messages": list(self.messages),
            "awaiting_response": self.awaiting_response,
            "quick_actions": available_actions(self.state),
        }


# In-memory session registry (process-level singleton, thread-safe)
_sessions: dict[str, ChatSession] = {}
_sessions_lock = threading.Lock()


def create_session(user_id: str) -> ChatSession:
    expire_idle_sessions()
    session = ChatSession(session_id=uuid.uuid4().hex, user_id=user_id)
    with _sessions_lock:
        _sessions[session.session_id] = session
    logger.info("Opened chat session %s for %s", session.session_id, user_id)
    return session


def get_session(session_id: str) -> ChatSession:
    """Return an open session.

    Raises:
        KeyError: If the session does not exist or was discarded.
    """
    with _sessions_lock:
        return _sessions[session_id]


def discard_session(session_id: str) -> bool:
    """Close a session, cancelling any in-flight assistant call.

    Returns:
        True if the session existed.
    """
    with _sessions_lock:
        session = _sessions.pop(session_id, None)
    if session is None:
        return False
    session.closed = True
    if session.pending is not None and not session.pending.done():
        session.pending.cancel()
    logger.info("Discarded chat session %s in mode %s", session_id, session.state.mode)
    return True


def expire_idle_sessions(now: float | None = None) -> int:
    """Discard sessions with no activity for CHAT_SESSION_IDLE_SECONDS.

    Sessions with a turn still in flight are kept.

    Returns:
        How many sessions were discarded.
    """
    now = time.monotonic() if now is None else now
    with _sessions_lock:
        idle = [
            s.session_id for s in _sessions.values()
            if not s.awaiting_response and now - s.last_active > CHAT_SESSION_IDLE_SECONDS
        ]
    expired = sum(discard_session(session_id) for session_id in idle)
    if expired:
        logger.info("Expired %d idle chat session(s)", expired)
    return expired


def clear_sessions() -> None:
    """Discard every open session."""
    with _sessions_lock:
        session_ids = list(_sessions)
    for session_id in session_ids:
        discard_session(session_id)


# ---------------------------------------------------------------------------
# Turns
# ---------------------------------------------------------------------------


def select_action(session: ChatSession, action: str) -> Transition:
    """Apply a quick action to the session.

    Raises:
        SessionBusyError: If a turn is still pending.
        ValueError: If the action name is unknown.
    """
    if session.awaiting_response:
        raise SessionBusyError("Still waiting for the previous response")

    session.touch()
    workspace = get_or_create_workspace(session.user_id)
    transition = start_flow(session.state, action, project_snapshot(workspace))
    if transition.ignored:
        logger.info("Ignored quick action %s in mode %s", action, session.state.mode)
        return transition

    session.state = transition.state
    for text in transition.messages:
        session.append("assistant", text)
    if session.state.mode != FREE_CHAT:
        logger.info("Session %s started flow %s", session.session_id, action)
    return transition


async def send_message(session: ChatSession, utterance: str) -> list[str]:
    """Process one user message and return the assistant replies it produced.

    Raises:
        ValueError: If the message is empty.
        SessionBusyError: If a turn is still pending.
        SessionClosedError: If the session was discarded mid-turn.
    """
    text = utterance.strip()
    if not text:
        raise ValueError("Message cannot be empty")
    if session.awaiting_response:
        raise SessionBusyError("Still waiting for the previous response")

    session.awaiting_response = True
    try:
        session.touch()
        workspace = get_or_create_workspace(session.user_id)
        history = list(session.messages)
        session.append("user", text)

        transition = handle_user_input(session.state, text, project_snapshot(workspace))
        session.state = transition.state
        replies = list(transition.messages)

        if transition.forward_to_chat:
            context = assistant.build_context(list_tasks(workspace), list_projects(workspace))
            reply = await _ask_assistant(session, history, text, context)
            replies.append(reply)
        elif transition.mutation is not None:
            replies.append(apply_mutation(session.user_id, transition.mutation))

        for reply in replies:
            session.append("assistant", reply)
        return replies
    finally:
        session.awaiting_response = False
        session.touch()


async def _ask_assistant(session: ChatSession, history: list[dict], text: str, context: str) -> str:
    """Run the blocking assistant call in the executor with a bounded wait."""
    loop = asyncio.get_running_loop()
    future = loop.run_in_executor(None, assistant.chat, history, text, context)
    session.pending = future
    try:
        return await asyncio.wait_for(future, timeout=LLM_TIMEOUT_SECONDS)
    except asyncio.TimeoutError:
        logger.warning("Assistant reply timed out after %ss", LLM_TIMEOUT_SECONDS)
        return assistant.APOLOGY_REPLY
    except asyncio.CancelledError:
        if not session.closed:
            raise
        raise SessionClosedError(f"Chat session {session.session_id} was closed")
    finally:
        session.pending = None


def apply_mutation(user_id: str, mutation: MutationRequest) -> str:
    """Write a completed flow's mutation to the workspace.

    Returns:
        The confirmation text on success, or a user-safe error message. The
        session is already back in free chat either way.
    """
    try:
        workspace = get_or_create_workspace(user_id)
        if isinstance(mutation, CreateProject):
            create_project(workspace, mutation.name, list(mutation.initial_task_names))
        elif isinstance(mutation, AddTaskDefinition):
            add_task_definition(workspace, mutation.project_id, mutation.task_name)
        elif isinstance(mutation, RecordTask):
            record_task(
                workspace,
                mutation.project_id,
                mutation.task_name,
                mutation.human_time,
                mutation.ai_time,
            )
        save_workspace(workspace)
    except (KeyError, ValueError, OSError):
        logger.exception("Failed to apply %s for %s", type(mutation).__name__, user_id)
        return MSG_SAVE_FAILED

    logger.info("Applied %s for %s", type(mutation).__name__, user_id)
    return mutation.confirmation
