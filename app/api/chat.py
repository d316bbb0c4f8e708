"""Chat endpoints for matched pairs."""
import uuid
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from app.config.constants import DEFAULT_MESSAGE_PAGE_SIZE, MAX_MESSAGE_PAGE_SIZE
from app.core.security import CurrentUser
from app.models.chat_message import ChatMessage
from app.services.chat_service import ChatService
from app.api.deps import get_chat_service, require_user

router = APIRouter(prefix="/api/chat", tags=["chat"])


class MessageRequest(BaseModel):
    message: str


def _message_out(message: ChatMessage) -> dict:
    return {
        "id": message.id,
        "match_id": message.match_id,
        "sender_id": message.sender_id,
        "message": message.message,
        "read": message.read,
        "created_at": message.created_at,
    }


@router.get("/unread/count")
async def unread_count(
    user: CurrentUser = Depends(require_user),
    chat: ChatService = Depends(get_chat_service),
):
    return {"unread_count": await chat.unread_total(user.user_id, user.role)}


@router.post("/{match_id}/messages", status_code=201)
async def send_message(
    match_id: uuid.UUID,
    body: MessageRequest,
    user: CurrentUser = Depends(require_user),
    chat: ChatService = Depends(get_chat_service),
):
    message = await chat.send_message(match_id, user.user_id, body.message)
    return {"message": "Message sent", "data": _message_out(message)}


@router.get("/{match_id}/messages")
async def list_messages(
    match_id: uuid.UUID,
    limit: int = Query(DEFAULT_MESSAGE_PAGE_SIZE, ge=1, le=MAX_MESSAGE_PAGE_SIZE),
    before: Optional[datetime] = Query(None),
    user: CurrentUser = Depends(require_user),
    chat: ChatService = Depends(get_chat_service),
):
    """Oldest-first page of the thread; reading it marks the counterpart's messages read."""
    messages = await chat.list_messages(match_id, user.user_id, limit=limit, before=before)
    return {"messages": [_message_out(m) for m in messages]}


@router.post("/{match_id}/read")
async def mark_read(
    match_id: uuid.UUID,
    user: CurrentUser = Depends(require_user),
    chat: ChatService = Depends(get_chat_service),
):
    return {"marked_read": await chat.mark_read(match_id, user.user_id)}
