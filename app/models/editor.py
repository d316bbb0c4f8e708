import uuid
import enum
from sqlalchemy import Column, String, Text, Integer, ForeignKey, TIMESTAMP, func, Index, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship, backref
from app.db.base import Base

class TagType(str, enum.Enum):
    CONTENT_TYPE = "content_type"
    STYLE = "style"

class EditorProfile(Base):
    """Video editor offering their work. `real_name` stays hidden until a match."""
    __tablename__ = "editors"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, unique=True, index=True)
    anonymous_name = Column(String(255), nullable=False)
    real_name = Column(String(255))
    bio = Column(Text)
    availability = Column(String(255))
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), onupdate=func.now(), server_default=func.now())

    user = relationship("User", backref=backref("editor_profile", uselist=False))


class EditorTag(Base):
    __tablename__ = "editor_tags"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    editor_id = Column(UUID(as_uuid=True), ForeignKey("editors.id", ondelete="CASCADE"), nullable=False, index=True)
    tag_name = Column(String(100), nullable=False)
    tag_type = Column(String(20), nullable=False)  # TagType

    __table_args__ = (
        Index('ix_editor_tags_type_name', 'tag_type', 'tag_name'),
        UniqueConstraint('editor_id', 'tag_type', 'tag_name', name='uq_editor_tag'),
    )


class Clip(Base):
    """Sample of an editor's work. Append-only; lowest order_index represents the editor in the feed."""
    __tablename__ = "editor_clips"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    editor_id = Column(UUID(as_uuid=True), ForeignKey("editors.id", ondelete="CASCADE"), nullable=False, index=True)
    file_path = Column(String(500), nullable=False)
    title = Column(String(255))
    description = Column(Text)
    order_index = Column(Integer, nullable=False, default=0)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    editor = relationship("EditorProfile", backref=backref("clips", order_by="Clip.order_index"))
