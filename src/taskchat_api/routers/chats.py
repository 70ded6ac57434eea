from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from ..dependencies import get_chat_store
from ..errors import NotFoundError
from ..schemas import ChatListResponse, ChatMessageCreate, ChatMessageOut, CreatedResponse, ErrorResponse, parse_records
from ..stores import ChatStore
from ..utils import epoch_millis

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chats"])


# PUBLIC_INTERFACE
@router.post(
    "/chat",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post Chat Message",
    responses={
        400: {"model": ErrorResponse, "description": "Username and message are required"},
        500: {"model": ErrorResponse, "description": "Store error"},
    },
)
def post_message(payload: ChatMessageCreate, store: ChatStore = Depends(get_chat_store)) -> CreatedResponse:
    """
    Append a message under a new push key and return the key.
    """
    payload.require_fields()
    key = store.push(
        {
            "username": payload.username,
            "message": payload.message,
            "timestamp": epoch_millis(),
        }
    )
    logger.info("Chat message %s from %s stored", key, payload.username)
    return CreatedResponse(message="Message sent successfully", id=key)


# PUBLIC_INTERFACE
@router.get(
    "/chats",
    response_model=ChatListResponse,
    summary="List Chat Messages",
    description="Return every chat message ordered by timestamp, oldest first. One-shot read.",
    responses={
        404: {"model": ErrorResponse, "description": "No chat messages found"},
        500: {"model": ErrorResponse, "description": "Store error"},
    },
)
def list_messages(store: ChatStore = Depends(get_chat_store)) -> ChatListResponse:
    messages = store.list_ordered()
    if not messages:
        raise NotFoundError("No chat messages found")
    return ChatListResponse(messages=parse_records(ChatMessageOut, messages))
