"""Persistence for match requests and the feed history log."""
import abc
import logging
import uuid
from typing import Dict, Iterable, List, Optional, Set
from sqlalchemy import select, update, union, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.exceptions import ConflictError
from app.db.errors import translate_db_errors
from app.models.match_request import MatchRequest, FeedHistory, LIVE_STATUSES

logger = logging.getLogger(__name__)


class MatchStore(abc.ABC):
    """
    Transactional store for MatchRequest rows.

    Implementations must make `put` reject a second live request for the same
    (creator_id, editor_id) pair, and make `compare_and_swap` atomic per request
    id so that two concurrent transitions cannot both succeed.
    """

    @abc.abstractmethod
    async def get(self, request_id: uuid.UUID) -> Optional[MatchRequest]:
        ...

    @abc.abstractmethod
    async def find_live(self, creator_id: uuid.UUID, editor_id: uuid.UUID) -> Optional[MatchRequest]:
        """Return the pending/accepted/matched request for the pair, if any."""

    @abc.abstractmethod
    async def put(self, request: MatchRequest, history: Optional[FeedHistory] = None) -> MatchRequest:
        """Insert a new request (and its history row) in one transaction. Raises ConflictError."""

    @abc.abstractmethod
    async def compare_and_swap(
        self,
        request_id: uuid.UUID,
        expected: Iterable[str],
        new_status: str,
        **stamps,
    ) -> bool:
        """Set `new_status` (plus timestamp columns) only if the current status is in `expected`."""

    @abc.abstractmethod
    async def append_history(self, entry: FeedHistory) -> FeedHistory:
        ...

    @abc.abstractmethod
    async def touched_editor_ids(self, creator_id: uuid.UUID) -> Set[uuid.UUID]:
        """Editors the creator has a request with (any status) or a feed history row for."""

    @abc.abstractmethod
    async def list_for_creator(self, creator_id: uuid.UUID, statuses: Optional[Iterable[str]] = None) -> List[MatchRequest]:
        ...

    @abc.abstractmethod
    async def list_for_editor(self, editor_id: uuid.UUID, statuses: Optional[Iterable[str]] = None) -> List[MatchRequest]:
        ...

    @abc.abstractmethod
    async def count_by_status(
        self,
        creator_id: Optional[uuid.UUID] = None,
        editor_id: Optional[uuid.UUID] = None,
    ) -> Dict[str, int]:
        ...


class SqlMatchStore(MatchStore):
    def __init__(self, session: AsyncSession):
        self.session = session

    @translate_db_errors
    async def get(self, request_id: uuid.UUID) -> Optional[MatchRequest]:
        # populate_existing: a CAS update bypasses the identity map
        stmt = (
            select(MatchRequest)
            .where(MatchRequest.id == request_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    @translate_db_errors
    async def find_live(self, creator_id: uuid.UUID, editor_id: uuid.UUID) -> Optional[MatchRequest]:
        stmt = select(MatchRequest).where(
            MatchRequest.creator_id == creator_id,
            MatchRequest.editor_id == editor_id,
            MatchRequest.status.in_(LIVE_STATUSES),
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    @translate_db_errors
    async def put(self, request: MatchRequest, history: Optional[FeedHistory] = None) -> MatchRequest:
        self.session.add(request)
        if history is not None:
            self.session.add(history)
        try:
            await self.session.commit()
        except IntegrityError as e:
            # uq_match_requests_live_pair lost a race with a concurrent like
            await self.session.rollback()
            logger.warning(f"Duplicate live request for creator {request.creator_id} / editor {request.editor_id}")
            raise ConflictError("Request already exists") from e
        await self.session.refresh(request)
        return request

    @translate_db_errors
    async def compare_and_swap(
        self,
        request_id: uuid.UUID,
        expected: Iterable[str],
        new_status: str,
        **stamps,
    ) -> bool:
        stmt = (
            update(MatchRequest)
            .where(
                MatchRequest.id == request_id,
                MatchRequest.status.in_(list(expected)),
            )
            .values(status=new_status, updated_at=func.now(), **stamps)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount == 1

    @translate_db_errors
    async def append_history(self, entry: FeedHistory) -> FeedHistory:
        self.session.add(entry)
        await self.session.commit()
        return entry

    @translate_db_errors
    async def touched_editor_ids(self, creator_id: uuid.UUID) -> Set[uuid.UUID]:
        requested = select(MatchRequest.editor_id).where(MatchRequest.creator_id == creator_id)
        seen = select(FeedHistory.editor_id).where(FeedHistory.creator_id == creator_id)
        result = await self.session.execute(union(requested, seen))
        return set(result.scalars().all())

    @translate_db_errors
    async def list_for_creator(self, creator_id: uuid.UUID, statuses: Optional[Iterable[str]] = None) -> List[MatchRequest]:
        stmt = select(MatchRequest).where(MatchRequest.creator_id == creator_id)
        if statuses is not None:
            stmt = stmt.where(MatchRequest.status.in_(list(statuses)))
        stmt = stmt.order_by(MatchRequest.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    @translate_db_errors
    async def list_for_editor(self, editor_id: uuid.UUID, statuses: Optional[Iterable[str]] = None) -> List[MatchRequest]:
        stmt = select(MatchRequest).where(MatchRequest.editor_id == editor_id)
        if statuses is not None:
            stmt = stmt.where(MatchRequest.status.in_(list(statuses)))
        stmt = stmt.order_by(MatchRequest.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    @translate_db_errors
    async def count_by_status(
        self,
        creator_id: Optional[uuid.UUID] = None,
        editor_id: Optional[uuid.UUID] = None,
    ) -> Dict[str, int]:
        stmt = select(MatchRequest.status, func.count(MatchRequest.id)).group_by(MatchRequest.status)
        if creator_id is not None:
            stmt = stmt.where(MatchRequest.creator_id == creator_id)
        if editor_id is not None:
            stmt = stmt.where(MatchRequest.editor_id == editor_id)
        result = await self.session.execute(stmt)
        return {status: count for status, count in result.all()}
