"""Chat session routes for the guided-entry assistant.

Endpoints:
    POST   /api/chat/sessions                 - Open a session
    GET    /api/chat/sessions/{id}            - Session snapshot
    POST   /api/chat/sessions/{id}/messages   - Send one user message
    POST   /api/chat/sessions/{id}/actions    - Select a quick action
    DELETE /api/chat/sessions/{id}            - Close the session
"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from app.chat_sessions import (
    SessionBusyError,
    SessionClosedError,
    create_session,
    discard_session,
    select_action,
    send_message,
)
from app.dependencies import get_user_id, require_chat_session
from app.models.chat import ChatMessageRequest, QuickActionRequest

router = APIRouter(prefix="/api/chat", tags=["chat"])


@router.post("/sessions", status_code=201)
async def open_session(user_id: str = Depends(get_user_id)):
    """Open a new chat session in free chat mode."""
    session = create_session(user_id)
    return JSONResponse(content=session.to_dict(), status_code=201)


@router.get("/sessions/{session_id}")
async def get_session_snapshot(session_id: str, user_id: str = Depends(get_user_id)):
    """Return the message log, mode, and available quick actions."""
    session = require_chat_session(session_id, user_id)
    return JSONResponse(content=session.to_dict())


@router.post("/sessions/{session_id}/messages")
async def post_message(
    session_id: str,
    body: ChatMessageRequest,
    user_id: str = Depends(get_user_id),
):
    """Process one user message and return the assistant replies."""
    session = require_chat_session(session_id, user_id)
    try:
        replies = await send_message(session, body.message)
    except SessionBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except SessionClosedError as e:
        raise HTTPException(status_code=410, detail=str(e))

    content = session.to_dict()
    content["assistant_messages"] = replies
    return JSONResponse(content=content)


@router.post("/sessions/{session_id}/actions")
async def post_action(
    session_id: str,
    body: QuickActionRequest,
    user_id: str = Depends(get_user_id),
):
    """Start a guided flow. Only allowed while the session is in free chat."""
    session = require_chat_session(session_id, user_id)
    try:
        transition = select_action(session, body.action)
    except SessionBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if transition.ignored:
        raise HTTPException(
            status_code=409,
            detail=f"Finish the current step first (mode '{session.state.mode}')",
        )

    content = session.to_dict()
    content["assistant_messages"] = list(transition.messages)
    return JSONResponse(content=content)


@router.delete("/sessions/{session_id}")
async def close_session(session_id: str, user_id: str = Depends(get_user_id)):
    """Close a session, discarding any unfinished flow."""
    require_chat_session(session_id, user_id)
    discard_session(session_id)
    return JSONResponse(content={"session_id": session_id, "closed": True})
