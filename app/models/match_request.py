import uuid
import enum
from sqlalchemy import Column, String, ForeignKey, TIMESTAMP, func, Index, text
from sqlalchemy.dialects.postgresql import UUID
from app.db.base import Base

class MatchStatus(str, enum.Enum):
    PENDING = "pending"      # creator liked, waiting for the editor
    ACCEPTED = "accepted"    # editor accepted, waiting for final confirmation
    MATCHED = "matched"      # both sides confirmed; chat and identity unlocked
    PASSED = "passed"        # rejected by either side

# Statuses that block a second request for the same pair
LIVE_STATUSES = (MatchStatus.PENDING.value, MatchStatus.ACCEPTED.value, MatchStatus.MATCHED.value)

class FeedAction(str, enum.Enum):
    LIKED = "liked"
    PASSED = "passed"

class MatchRequest(Base):
    __tablename__ = "match_requests"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    creator_id = Column(UUID(as_uuid=True), ForeignKey("creators.id"), nullable=False, index=True)
    editor_id = Column(UUID(as_uuid=True), ForeignKey("editors.id"), nullable=False, index=True)
    clip_id = Column(UUID(as_uuid=True), ForeignKey("editor_clips.id"), nullable=True)
    status = Column(String(20), nullable=False, default=MatchStatus.PENDING.value)

    creator_liked_at = Column(TIMESTAMP(timezone=True))
    editor_accepted_at = Column(TIMESTAMP(timezone=True))
    final_matched_at = Column(TIMESTAMP(timezone=True))

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), onupdate=func.now(), server_default=func.now())

    __table_args__ = (
        # One live request per pair; passed requests do not count
        Index(
            'uq_match_requests_live_pair', 'creator_id', 'editor_id',
            unique=True,
            postgresql_where=text("status IN ('pending', 'accepted', 'matched')"),
        ),
        Index('ix_match_requests_editor_status', 'editor_id', 'status'),
        Index('ix_match_requests_creator_status', 'creator_id', 'status'),
    )


class FeedHistory(Base):
    """Append-only log of what a creator did in the feed."""
    __tablename__ = "feed_history"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    creator_id = Column(UUID(as_uuid=True), ForeignKey("creators.id"), nullable=False, index=True)
    editor_id = Column(UUID(as_uuid=True), ForeignKey("editors.id"), nullable=False)
    clip_id = Column(UUID(as_uuid=True), ForeignKey("editor_clips.id"), nullable=True)
    action = Column(String(20), nullable=False)  # FeedAction
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
