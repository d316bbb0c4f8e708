import logging
import random
import uuid
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
from app.core.config import settings
from app.core.exceptions import NotFoundError
from app.db.match_store import MatchStore
from app.db.profile_store import ProfileStore
from app.models.editor import EditorProfile, TagType
from app.services.match_service import clip_summary, split_tags

logger = logging.getLogger(__name__)


def style_match_score(editor_styles: Iterable[str], preferred_styles: Iterable[str]) -> int:
    """Number of the editor's style tags the creator asked for."""
    return len(set(editor_styles) & set(preferred_styles))


def rank_candidates(
    scored: Sequence[Tuple[int, EditorProfile]],
    rng: random.Random,
) -> List[Tuple[int, EditorProfile]]:
    """
    Order by score descending with ties in uniformly random order.

    Shuffling first and then sorting stably keeps equal scores in their
    shuffled order.
    """
    shuffled = list(scored)
    rng.shuffle(shuffled)
    return sorted(shuffled, key=lambda item: item[0], reverse=True)


class FeedService:
    """
    Curated editor feed for a creator.

    Candidates share the creator's content type, have at least one clip, and
    have never been liked, passed or requested by this creator.
    """

    def __init__(
        self,
        store: MatchStore,
        profiles: ProfileStore,
        rng: Optional[random.Random] = None,
        limit: Optional[int] = None,
    ):
        self.store = store
        self.profiles = profiles
        self.rng = rng or random.Random()
        self.limit = limit if limit is not None else settings.FEED_SIZE

    async def get_feed(self, creator_id: uuid.UUID) -> List[Dict[str, Any]]:
        creator = await self.profiles.get_creator(creator_id)
        if not creator:
            raise NotFoundError("Creator profile not found")

        preferred_styles = set(await self.profiles.get_preferred_styles(creator.id))
        candidates = await self.profiles.find_editors_by_content_type(creator.content_type)
        touched = await self.store.touched_editor_ids(creator.id)
        candidates = [e for e in candidates if e.id not in touched]
        if not candidates:
            logger.info(f"Feed for creator {creator.id} is empty")
            return []

        editor_ids = [e.id for e in candidates]
        tags_by_editor = await self.profiles.get_tags_for(editor_ids)
        clips_by_editor = await self.profiles.get_clips_for(editor_ids)

        scored = []
        for editor in candidates:
            # Editors without clips have nothing to show
            if not clips_by_editor.get(editor.id):
                continue
            styles = [
                t.tag_name for t in tags_by_editor.get(editor.id, [])
                if t.tag_type == TagType.STYLE.value
            ]
            scored.append((style_match_score(styles, preferred_styles), editor))

        feed = []
        for score, editor in rank_candidates(scored, self.rng)[:self.limit]:
            clips = clips_by_editor[editor.id]
            representative = min(clips, key=lambda c: c.order_index)
            split = split_tags(tags_by_editor.get(editor.id, []))
            feed.append({
                "editor_id": editor.id,
                "anonymous_name": editor.anonymous_name,
                "bio": editor.bio,
                "tags": split["tags"],
                "content_type_tags": split["content_types"],
                "style_tags": split["styles"],
                "clip": clip_summary(representative),
                "all_clips": len(clips),
                "style_match_score": score,
            })

        logger.info(f"Feed for creator {creator.id}: {len(feed)} editors from {len(candidates)} candidates")
        return feed
