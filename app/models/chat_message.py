import uuid
from sqlalchemy import Column, Text, Boolean, ForeignKey, TIMESTAMP, func, Index
from sqlalchemy.dialects.postgresql import UUID
from app.db.base import Base

class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    match_id = Column(UUID(as_uuid=True), ForeignKey("match_requests.id"), nullable=False)
    sender_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    message = Column(Text, nullable=False)
    read = Column(Boolean, nullable=False, default=False, server_default="false")
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    __table_args__ = (
        Index('ix_chat_messages_match_created', 'match_id', 'created_at'),
        Index('ix_chat_messages_match_unread', 'match_id', 'sender_id', 'read'),
    )
