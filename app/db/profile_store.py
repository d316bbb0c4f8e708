"""Read-only view of creator/editor profiles, tags and clips used by the matching core."""
import abc
import uuid
from collections import defaultdict
from typing import Dict, Iterable, List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.errors import translate_db_errors
from app.models.creator import CreatorProfile, CreatorPreferredStyle
from app.models.editor import EditorProfile, EditorTag, Clip, TagType


class ProfileStore(abc.ABC):
    @abc.abstractmethod
    async def get_creator(self, creator_id: uuid.UUID) -> Optional[CreatorProfile]:
        ...

    @abc.abstractmethod
    async def get_creator_by_user(self, user_id: uuid.UUID) -> Optional[CreatorProfile]:
        ...

    @abc.abstractmethod
    async def get_editor(self, editor_id: uuid.UUID) -> Optional[EditorProfile]:
        ...

    @abc.abstractmethod
    async def get_editor_by_user(self, user_id: uuid.UUID) -> Optional[EditorProfile]:
        ...

    @abc.abstractmethod
    async def get_preferred_styles(self, creator_id: uuid.UUID) -> List[str]:
        ...

    @abc.abstractmethod
    async def get_tags(self, editor_id: uuid.UUID) -> List[EditorTag]:
        ...

    @abc.abstractmethod
    async def get_tags_for(self, editor_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, List[EditorTag]]:
        ...

    @abc.abstractmethod
    async def get_clips(self, editor_id: uuid.UUID) -> List[Clip]:
        """Clips ordered by order_index."""

    @abc.abstractmethod
    async def get_clips_for(self, editor_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, List[Clip]]:
        ...

    @abc.abstractmethod
    async def get_clip(self, clip_id: uuid.UUID) -> Optional[Clip]:
        ...

    @abc.abstractmethod
    async def find_editors_by_content_type(self, content_type: str) -> List[EditorProfile]:
        """Editors carrying a content_type tag equal to `content_type`."""


class SqlProfileStore(ProfileStore):
    def __init__(self, session: AsyncSession):
        self.session = session

    @translate_db_errors
    async def get_creator(self, creator_id: uuid.UUID) -> Optional[CreatorProfile]:
        return await self.session.get(CreatorProfile, creator_id)

    @translate_db_errors
    async def get_creator_by_user(self, user_id: uuid.UUID) -> Optional[CreatorProfile]:
        result = await self.session.execute(
            select(CreatorProfile).where(CreatorProfile.user_id == user_id)
        )
        return result.scalar_one_or_none()

    @translate_db_errors
    async def get_editor(self, editor_id: uuid.UUID) -> Optional[EditorProfile]:
        return await self.session.get(EditorProfile, editor_id)

    @translate_db_errors
    async def get_editor_by_user(self, user_id: uuid.UUID) -> Optional[EditorProfile]:
        result = await self.session.execute(
            select(EditorProfile).where(EditorProfile.user_id == user_id)
        )
        return result.scalar_one_or_none()

    @translate_db_errors
    async def get_preferred_styles(self, creator_id: uuid.UUID) -> List[str]:
        result = await self.session.execute(
            select(CreatorPreferredStyle.style_name).where(CreatorPreferredStyle.creator_id == creator_id)
        )
        return list(result.scalars().all())

    @translate_db_errors
    async def get_tags(self, editor_id: uuid.UUID) -> List[EditorTag]:
        result = await self.session.execute(
            select(EditorTag).where(EditorTag.editor_id == editor_id)
        )
        return list(result.scalars().all())

    @translate_db_errors
    async def get_tags_for(self, editor_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, List[EditorTag]]:
        ids = list(editor_ids)
        grouped: Dict[uuid.UUID, List[EditorTag]] = defaultdict(list)
        if not ids:
            return grouped
        result = await self.session.execute(
            select(EditorTag).where(EditorTag.editor_id.in_(ids))
        )
        for tag in result.scalars().all():
            grouped[tag.editor_id].append(tag)
        return grouped

    @translate_db_errors
    async def get_clips(self, editor_id: uuid.UUID) -> List[Clip]:
        result = await self.session.execute(
            select(Clip).where(Clip.editor_id == editor_id).order_by(Clip.order_index)
        )
        return list(result.scalars().all())

    @translate_db_errors
    async def get_clips_for(self, editor_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, List[Clip]]:
        ids = list(editor_ids)
        grouped: Dict[uuid.UUID, List[Clip]] = defaultdict(list)
        if not ids:
            return grouped
        result = await self.session.execute(
            select(Clip).where(Clip.editor_id.in_(ids)).order_by(Clip.editor_id, Clip.order_index)
        )
        for clip in result.scalars().all():
            grouped[clip.editor_id].append(clip)
        return grouped

    @translate_db_errors
    async def get_clip(self, clip_id: uuid.UUID) -> Optional[Clip]:
        return await self.session.get(Clip, clip_id)

    @translate_db_errors
    async def find_editors_by_content_type(self, content_type: str) -> List[EditorProfile]:
        stmt = (
            select(EditorProfile)
            .join(EditorTag, EditorTag.editor_id == EditorProfile.id)
            .where(
                EditorTag.tag_type == TagType.CONTENT_TYPE.value,
                EditorTag.tag_name == content_type,
            )
            .distinct()
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
