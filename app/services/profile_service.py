import logging
import os
import uuid
from typing import Any, Dict, Iterable, List, Optional
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.config.constants import (
    ROLE_CREATOR,
    ROLE_EDITOR,
    MAX_CLIPS_PER_UPLOAD,
    ALLOWED_CLIP_EXTENSIONS,
    MAX_TAG_LENGTH,
)
from app.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.db.profile_store import SqlProfileStore
from app.models.creator import CreatorProfile, CreatorPreferredStyle
from app.models.editor import EditorProfile, EditorTag, Clip, TagType

logger = logging.getLogger(__name__)

CREATOR_FIELDS = ("display_name", "bio", "what_stream", "want_editor", "content_type")
EDITOR_FIELDS = ("bio", "real_name", "availability")


def clean_tags(values: Optional[Iterable[str]]) -> List[str]:
    """Strip, drop blanks and duplicates, keep first-seen order."""
    seen = []
    for value in values or []:
        tag = (value or "").strip()[:MAX_TAG_LENGTH]
        if tag and tag not in seen:
            seen.append(tag)
    return seen


class ProfileService:
    """
    Write side of creator and editor profiles.

    The matching core reads profiles through ProfileStore; this service is
    what the profile endpoints use to create and edit them.
    """

    def __init__(self, session: AsyncSession):
        """
        Args:
            session: SQLAlchemy AsyncSession for database operations.
        """
        self.session = session
        self.profiles = SqlProfileStore(session)

    # ========================
    # Creators
    # ========================

    async def create_creator_profile(
        self,
        user_id: uuid.UUID,
        role: str,
        display_name: str,
        content_type: str,
        bio: str = None,
        what_stream: str = None,
        want_editor: str = None,
        preferred_styles: List[str] = None,
    ) -> CreatorProfile:
        if role != ROLE_CREATOR:
            raise ForbiddenError("Only creators can create creator profiles")
        if await self.profiles.get_creator_by_user(user_id):
            raise ConflictError("Profile already exists")

        creator = CreatorProfile(
            id=uuid.uuid4(),
            user_id=user_id,
            display_name=display_name,
            bio=bio,
            what_stream=what_stream,
            want_editor=want_editor,
            content_type=content_type.strip(),
        )
        try:
            self.session.add(creator)
            await self.session.flush()
            for style in clean_tags(preferred_styles):
                self.session.add(CreatorPreferredStyle(creator_id=creator.id, style_name=style))
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError("Profile already exists") from e
        await self.session.refresh(creator)
        logger.info(f"Creator profile {creator.id} created for user {user_id}")
        return creator

    async def update_creator_profile(self, user_id: uuid.UUID, role: str, **fields) -> CreatorProfile:
        """Update provided fields. `preferred_styles`, when given, replaces the whole set."""
        if role != ROLE_CREATOR:
            raise ForbiddenError("Access denied")
        creator = await self.profiles.get_creator_by_user(user_id)
        if not creator:
            raise NotFoundError("Profile not found")

        for field in CREATOR_FIELDS:
            value = fields.get(field)
            if value is not None:
                setattr(creator, field, value)

        preferred_styles = fields.get("preferred_styles")
        if preferred_styles is not None:
            await self.session.execute(
                delete(CreatorPreferredStyle).where(CreatorPreferredStyle.creator_id == creator.id)
            )
            for style in clean_tags(preferred_styles):
                self.session.add(CreatorPreferredStyle(creator_id=creator.id, style_name=style))

        await self.session.commit()
        await self.session.refresh(creator)
        return creator

    # ========================
    # Editors
    # ========================

    async def create_editor_profile(
        self,
        user_id: uuid.UUID,
        role: str,
        anonymous_name: str,
        bio: str = None,
        real_name: str = None,
        availability: str = None,
        content_types: List[str] = None,
        styles: List[str] = None,
    ) -> EditorProfile:
        if role != ROLE_EDITOR:
            raise ForbiddenError("Only editors can create editor profiles")
        if not (anonymous_name or "").strip():
            raise ValidationError("Anonymous name is required")
        if await self.profiles.get_editor_by_user(user_id):
            raise ConflictError("Profile already exists")

        editor = EditorProfile(
            id=uuid.uuid4(),
            user_id=user_id,
            anonymous_name=anonymous_name.strip(),
            bio=bio,
            real_name=real_name,
            availability=availability,
        )
        try:
            self.session.add(editor)
            await self.session.flush()
            self._add_tags(editor.id, TagType.CONTENT_TYPE, content_types)
            self._add_tags(editor.id, TagType.STYLE, styles)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError("Profile already exists") from e
        await self.session.refresh(editor)
        logger.info(f"Editor profile {editor.id} created for user {user_id}")
        return editor

    async def update_editor_profile(self, user_id: uuid.UUID, role: str, **fields) -> EditorProfile:
        """Update provided fields. Content type and style tags are replaced independently."""
        if role != ROLE_EDITOR:
            raise ForbiddenError("Access denied")
        editor = await self.profiles.get_editor_by_user(user_id)
        if not editor:
            raise NotFoundError("Profile not found")

        for field in EDITOR_FIELDS:
            value = fields.get(field)
            if value is not None:
                setattr(editor, field, value)

        for tag_type, key in ((TagType.CONTENT_TYPE, "content_types"), (TagType.STYLE, "styles")):
            values = fields.get(key)
            if values is None:
                continue
            await self.session.execute(
                delete(EditorTag).where(
                    EditorTag.editor_id == editor.id,
                    EditorTag.tag_type == tag_type.value,
                )
            )
            self._add_tags(editor.id, tag_type, values)

        await self.session.commit()
        await self.session.refresh(editor)
        return editor

    def _add_tags(self, editor_id: uuid.UUID, tag_type: TagType, values: Optional[Iterable[str]]) -> None:
        for name in clean_tags(values):
            self.session.add(EditorTag(editor_id=editor_id, tag_name=name, tag_type=tag_type.value))

    # ========================
    # Clips
    # ========================

    async def add_clips(self, user_id: uuid.UUID, role: str, clips: List[Dict[str, Any]]) -> List[Clip]:
        """
        Register clip metadata for the caller's editor profile.

        Files are stored elsewhere; only the path is recorded. New clips are
        appended after the editor's existing ones.
        """
        if role != ROLE_EDITOR:
            raise ForbiddenError("Access denied")
        editor = await self.profiles.get_editor_by_user(user_id)
        if not editor:
            raise NotFoundError("Editor profile not found")
        if not clips:
            raise ValidationError("No clips provided")
        if len(clips) > MAX_CLIPS_PER_UPLOAD:
            raise ValidationError(f"At most {MAX_CLIPS_PER_UPLOAD} clips per upload")

        for clip in clips:
            extension = os.path.splitext(clip.get("file_path") or "")[1].lower()
            if extension not in ALLOWED_CLIP_EXTENSIONS:
                raise ValidationError("Only video files are allowed")

        result = await self.session.execute(
            select(func.max(Clip.order_index)).where(Clip.editor_id == editor.id)
        )
        current_max = result.scalar()
        next_index = 0 if current_max is None else current_max + 1

        created = []
        for offset, clip in enumerate(clips):
            record = Clip(
                id=uuid.uuid4(),
                editor_id=editor.id,
                file_path=clip["file_path"],
                title=clip.get("title"),
                description=clip.get("description"),
                order_index=next_index + offset,
            )
            self.session.add(record)
            created.append(record)

        await self.session.commit()
        logger.info(f"Editor {editor.id} added {len(created)} clips")
        return created

    async def list_clips(self, user_id: uuid.UUID, role: str) -> List[Clip]:
        if role != ROLE_EDITOR:
            raise ForbiddenError("Access denied")
        editor = await self.profiles.get_editor_by_user(user_id)
        if not editor:
            raise NotFoundError("Editor profile not found")
        return await self.profiles.get_clips(editor.id)

    # ========================
    # Own profile
    # ========================

    async def get_own_profile(self, user_id: uuid.UUID, role: str) -> Optional[Dict[str, Any]]:
        if role == ROLE_CREATOR:
            creator = await self.profiles.get_creator_by_user(user_id)
            if not creator:
                return None
            data = {c: getattr(creator, c) for c in CREATOR_FIELDS}
            data["id"] = creator.id
            data["preferred_styles"] = await self.profiles.get_preferred_styles(creator.id)
            return data

        editor = await self.profiles.get_editor_by_user(user_id)
        if not editor:
            return None
        tags = await self.profiles.get_tags(editor.id)
        return {
            "id": editor.id,
            "anonymous_name": editor.anonymous_name,
            "real_name": editor.real_name,
            "bio": editor.bio,
            "availability": editor.availability,
            "content_types": [t.tag_name for t in tags if t.tag_type == TagType.CONTENT_TYPE.value],
            "styles": [t.tag_name for t in tags if t.tag_type == TagType.STYLE.value],
        }
