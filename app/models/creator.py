import uuid
from sqlalchemy import Column, String, Text, ForeignKey, TIMESTAMP, func, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship, backref
from app.db.base import Base

class CreatorProfile(Base):
    """Streamer looking for an editor. One per creator-role user."""
    __tablename__ = "creators"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, unique=True, index=True)
    display_name = Column(String(255), nullable=False)
    bio = Column(Text)
    what_stream = Column(Text)
    want_editor = Column(Text)
    content_type = Column(String(100), nullable=False, index=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), onupdate=func.now(), server_default=func.now())

    user = relationship("User", backref=backref("creator_profile", uselist=False))


class CreatorPreferredStyle(Base):
    __tablename__ = "creator_preferred_styles"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    creator_id = Column(UUID(as_uuid=True), ForeignKey("creators.id", ondelete="CASCADE"), nullable=False, index=True)
    style_name = Column(String(100), nullable=False)

    __table_args__ = (
        UniqueConstraint('creator_id', 'style_name', name='uq_creator_style'),
    )
