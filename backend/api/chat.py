import logging
from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from config import get_settings
from dialogs.detail_collection import DetailCollectionDialog
from dialogs.main_dialog import MainDialog
from models.conversation import DialogState
from models.immigration import UserInfo
from services.recognizer import Recognizer, build_recognizer
from services.session_store import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/chat",
    tags=["chat"],
)


# -------------------------------------------------------
# Shared objects
#
# One recognizer, one dialog and one session store per process.
# Tests swap them out with app.dependency_overrides.
# -------------------------------------------------------

@lru_cache
def get_recognizer() -> Recognizer:
    return build_recognizer(get_settings())


@lru_cache
def get_session_store() -> SessionStore:
    return SessionStore()


def get_main_dialog(recognizer: Recognizer = Depends(get_recognizer)) -> MainDialog:
    settings = get_settings()
    return MainDialog(
        recognizer,
        DetailCollectionDialog(prompt_for_missing=settings.PROMPT_FOR_MISSING_DETAILS),
    )


# -------------------------------------------------------
# Request/Response Models
# -------------------------------------------------------
class ChatMessageRequest(BaseModel):
    session_id: str = Field(min_length=1)  # Client generates one per conversation and reuses it
    message: str = Field(min_length=1)


class ChatMessageResponse(BaseModel):
    session_id: str
    replies: list[str]
    state: DialogState


class SessionResponse(BaseModel):
    session_id: str
    state: DialogState
    user_info: Optional[UserInfo] = None
    turns: int


# -------------------------------------------------------
# Endpoints
# -------------------------------------------------------

@router.post("/{session_id}/start", response_model=ChatMessageResponse)
async def start_conversation(
    session_id: str,
    dialog: MainDialog = Depends(get_main_dialog),
    store: SessionStore = Depends(get_session_store),
):
    """Conversation-start event: greets the user before they type anything."""
    state = store.get_or_create(session_id)
    result = await dialog.start(state)
    store.save(state)
    return ChatMessageResponse(session_id=session_id, replies=result.replies, state=result.state)


@router.post("/messages", response_model=ChatMessageResponse)
async def post_message(
    request: ChatMessageRequest,
    dialog: MainDialog = Depends(get_main_dialog),
    store: SessionStore = Depends(get_session_store),
):
    """
    Send one user message and get the bot's replies.

    The frontend must send the SAME session_id on every message of a
    conversation, and a new one to start over.
    """
    state = store.get_or_create(request.session_id)
    result = await dialog.on_message(state, request.message)
    store.save(state)
    logger.debug("Session %s is now %s", request.session_id, result.state.value)
    return ChatMessageResponse(session_id=request.session_id, replies=result.replies, state=result.state)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    state = store.get(session_id)
    if state is None:
        raise HTTPException(status_code=404, detail=f"Unknown session {session_id}")
    return SessionResponse(
        session_id=session_id,
        state=state.state,
        user_info=state.user_info,
        turns=state.turns,
    )


@router.delete("/{session_id}")
async def clear_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    """Forget a session, for the 'New Conversation' button"""
    return {"session_id": session_id, "cleared": store.delete(session_id)}
