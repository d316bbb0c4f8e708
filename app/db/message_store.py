"""Persistence for chat messages of matched pairs."""
import abc
import uuid
from datetime import datetime
from typing import Iterable, List, Optional
from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.errors import translate_db_errors
from app.models.chat_message import ChatMessage


class MessageStore(abc.ABC):
    @abc.abstractmethod
    async def add(self, message: ChatMessage) -> ChatMessage:
        ...

    @abc.abstractmethod
    async def list_recent(self, match_id: uuid.UUID, limit: int, before: Optional[datetime] = None) -> List[ChatMessage]:
        """Newest `limit` messages older than `before`, newest first."""

    @abc.abstractmethod
    async def mark_read(self, match_id: uuid.UUID, reader_id: uuid.UUID) -> int:
        """Mark every unread message not sent by `reader_id` as read. Returns rows changed."""

    @abc.abstractmethod
    async def unread_count(self, match_id: uuid.UUID, reader_id: uuid.UUID) -> int:
        ...

    @abc.abstractmethod
    async def unread_total(self, match_ids: Iterable[uuid.UUID], reader_id: uuid.UUID) -> int:
        ...


class SqlMessageStore(MessageStore):
    def __init__(self, session: AsyncSession):
        self.session = session

    @translate_db_errors
    async def add(self, message: ChatMessage) -> ChatMessage:
        self.session.add(message)
        await self.session.commit()
        await self.session.refresh(message)
        return message

    @translate_db_errors
    async def list_recent(self, match_id: uuid.UUID, limit: int, before: Optional[datetime] = None) -> List[ChatMessage]:
        stmt = select(ChatMessage).where(ChatMessage.match_id == match_id)
        if before is not None:
            stmt = stmt.where(ChatMessage.created_at < before)
        stmt = stmt.order_by(ChatMessage.created_at.desc()).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    @translate_db_errors
    async def mark_read(self, match_id: uuid.UUID, reader_id: uuid.UUID) -> int:
        stmt = (
            update(ChatMessage)
            .where(
                ChatMessage.match_id == match_id,
                ChatMessage.sender_id != reader_id,
                ChatMessage.read == False,  # noqa: E712
            )
            .values(read=True)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount

    @translate_db_errors
    async def unread_count(self, match_id: uuid.UUID, reader_id: uuid.UUID) -> int:
        stmt = select(func.count(ChatMessage.id)).where(
            ChatMessage.match_id == match_id,
            ChatMessage.sender_id != reader_id,
            ChatMessage.read == False,  # noqa: E712
        )
        return (await self.session.execute(stmt)).scalar() or 0

    @translate_db_errors
    async def unread_total(self, match_ids: Iterable[uuid.UUID], reader_id: uuid.UUID) -> int:
        ids = list(match_ids)
        if not ids:
            return 0
        stmt = select(func.count(ChatMessage.id)).where(
            ChatMessage.match_id.in_(ids),
            ChatMessage.sender_id != reader_id,
            ChatMessage.read == False,  # noqa: E712
        )
        return (await self.session.execute(stmt)).scalar() or 0
