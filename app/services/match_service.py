"""
Match request lifecycle.

    pending --accept--> accepted --confirm--> matched
       |                   |
       +------pass---------+------pass------> passed

`matched` and `passed` are terminal. Editors and creators enter the same
table through their own actions; every transition is applied with a
compare-and-swap on the stored status so concurrent callers cannot both win.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, NamedTuple, Optional, Type
from app.config.constants import ROLE_CREATOR, ROLE_EDITOR
from app.core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    MatchmakingError,
    NotFoundError,
    ValidationError,
)
from app.db.match_store import MatchStore
from app.db.message_store import MessageStore
from app.db.profile_store import ProfileStore
from app.models.creator import CreatorProfile
from app.models.editor import EditorProfile, EditorTag, Clip, TagType
from app.models.match_request import MatchRequest, MatchStatus, FeedHistory, FeedAction

logger = logging.getLogger(__name__)

PENDING = MatchStatus.PENDING.value
ACCEPTED = MatchStatus.ACCEPTED.value
MATCHED = MatchStatus.MATCHED.value
PASSED = MatchStatus.PASSED.value


class Transition(NamedTuple):
    sources: frozenset
    target: str
    stamp: Optional[str]
    # Raised when the request is not in one of `sources`
    stale_error: Type[MatchmakingError]


TRANSITIONS: Dict[tuple, Transition] = {
    (ROLE_EDITOR, "accept"): Transition(frozenset({PENDING}), ACCEPTED, "editor_accepted_at", NotFoundError),
    (ROLE_EDITOR, "pass"): Transition(frozenset({PENDING}), PASSED, None, NotFoundError),
    (ROLE_EDITOR, "confirm"): Transition(frozenset({ACCEPTED}), MATCHED, "final_matched_at", InvalidStateError),
    (ROLE_CREATOR, "confirm"): Transition(frozenset({ACCEPTED}), MATCHED, "final_matched_at", InvalidStateError),
    (ROLE_CREATOR, "pass"): Transition(frozenset({PENDING, ACCEPTED}), PASSED, None, InvalidStateError),
}

EDITOR_RESPONSES = ("accept", "pass")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _stale_error(transition: Transition, current: Optional[str]) -> MatchmakingError:
    if transition.stale_error is NotFoundError:
        return NotFoundError("Request not found or not in correct state")
    expected = "/".join(sorted(transition.sources))
    return InvalidStateError(f"Request is {current}, expected {expected}", current=current)


def split_tags(tags: List[EditorTag]) -> Dict[str, List[str]]:
    return {
        "tags": [t.tag_name for t in tags],
        "content_types": [t.tag_name for t in tags if t.tag_type == TagType.CONTENT_TYPE.value],
        "styles": [t.tag_name for t in tags if t.tag_type == TagType.STYLE.value],
    }


def clip_summary(clip: Clip) -> Dict[str, Any]:
    return {
        "id": clip.id,
        "file_path": clip.file_path,
        "title": clip.title,
        "description": clip.description,
    }


def editor_summary(editor: EditorProfile, tags: List[EditorTag], reveal_identity: bool = False) -> Dict[str, Any]:
    data = {
        "editor_id": editor.id,
        "anonymous_name": editor.anonymous_name,
        "bio": editor.bio,
        "tags": [t.tag_name for t in tags],
    }
    if reveal_identity:
        data["real_name"] = editor.real_name
        data["availability"] = editor.availability
    return data


def creator_summary(creator: CreatorProfile, preferred_styles: List[str]) -> Dict[str, Any]:
    return {
        "creator_id": creator.id,
        "display_name": creator.display_name,
        "bio": creator.bio,
        "what_stream": creator.what_stream,
        "want_editor": creator.want_editor,
        "content_type": creator.content_type,
        "preferred_styles": preferred_styles,
    }


class MatchService:
    def __init__(self, store: MatchStore, profiles: ProfileStore, messages: Optional[MessageStore] = None):
        self.store = store
        self.profiles = profiles
        self.messages = messages

    # ========================
    # Creation
    # ========================

    async def create_request(
        self,
        creator_id: uuid.UUID,
        editor_id: uuid.UUID,
        clip_id: Optional[uuid.UUID] = None,
    ) -> MatchRequest:
        """
        Creator likes an editor. Opens a `pending` request and logs a `liked` feed entry.

        Raises:
            NotFoundError: creator, editor or clip does not resolve.
            ConflictError: a live request already exists for the pair.
        """
        if not await self.profiles.get_creator(creator_id):
            raise NotFoundError("Creator profile not found")
        if not await self.profiles.get_editor(editor_id):
            raise NotFoundError("Editor not found")
        if clip_id is not None:
            clip = await self.profiles.get_clip(clip_id)
            if not clip or clip.editor_id != editor_id:
                raise NotFoundError("Clip not found")

        if await self.store.find_live(creator_id, editor_id):
            raise ConflictError("Request already exists")

        now = _now()
        request = MatchRequest(
            id=uuid.uuid4(),
            creator_id=creator_id,
            editor_id=editor_id,
            clip_id=clip_id,
            status=PENDING,
            creator_liked_at=now,
            created_at=now,
            updated_at=now,
        )
        history = FeedHistory(
            id=uuid.uuid4(),
            creator_id=creator_id,
            editor_id=editor_id,
            clip_id=clip_id,
            action=FeedAction.LIKED.value,
            created_at=now,
        )
        request = await self.store.put(request, history)
        logger.info(f"Creator {creator_id} liked editor {editor_id}: request {request.id} pending")
        return request

    async def pass_editor(
        self,
        creator_id: uuid.UUID,
        editor_id: uuid.UUID,
        clip_id: Optional[uuid.UUID] = None,
    ) -> FeedHistory:
        """Creator skips an editor in the feed. No request is created."""
        if not await self.profiles.get_editor(editor_id):
            raise NotFoundError("Editor not found")
        entry = FeedHistory(
            id=uuid.uuid4(),
            creator_id=creator_id,
            editor_id=editor_id,
            clip_id=clip_id,
            action=FeedAction.PASSED.value,
            created_at=_now(),
        )
        await self.store.append_history(entry)
        logger.info(f"Creator {creator_id} passed editor {editor_id} in feed")
        return entry

    # ========================
    # Transitions
    # ========================

    async def _apply(self, request_id: uuid.UUID, role: str, profile_id: uuid.UUID, action: str) -> MatchRequest:
        transition = TRANSITIONS.get((role, action))
        if transition is None:
            raise ValidationError(f"Unsupported action: {action}")

        request = await self.store.get(request_id)
        if not request:
            raise NotFoundError("Request not found")

        owner_id = request.editor_id if role == ROLE_EDITOR else request.creator_id
        if owner_id != profile_id:
            logger.warning(f"{role} {profile_id} tried to {action} request {request_id} owned by {owner_id}")
            raise ForbiddenError("Access denied")

        previous = request.status
        if previous not in transition.sources:
            raise _stale_error(transition, previous)

        stamps = {transition.stamp: _now()} if transition.stamp else {}
        if not await self.store.compare_and_swap(request_id, transition.sources, transition.target, **stamps):
            current = await self.store.get(request_id)
            current_status = current.status if current else None
            logger.warning(
                f"Lost race on request {request_id}: {role} {action} expected {previous}, found {current_status}"
            )
            raise _stale_error(transition, current_status)

        logger.info(f"Request {request_id}: {previous} -> {transition.target} ({role} {action})")
        return await self.store.get(request_id)

    async def editor_accept(self, request_id: uuid.UUID, editor_id: uuid.UUID) -> MatchRequest:
        return await self._apply(request_id, ROLE_EDITOR, editor_id, "accept")

    async def editor_pass(self, request_id: uuid.UUID, editor_id: uuid.UUID) -> MatchRequest:
        return await self._apply(request_id, ROLE_EDITOR, editor_id, "pass")

    async def respond(self, request_id: uuid.UUID, editor_id: uuid.UUID, action: str) -> MatchRequest:
        if action not in EDITOR_RESPONSES:
            raise ValidationError('Action must be "accept" or "pass"')
        return await self._apply(request_id, ROLE_EDITOR, editor_id, action)

    async def final_accept(self, request_id: uuid.UUID, editor_id: uuid.UUID) -> MatchRequest:
        """Editor confirms an accepted request. The request id doubles as the match id."""
        return await self._apply(request_id, ROLE_EDITOR, editor_id, "confirm")

    async def creator_confirm(self, request_id: uuid.UUID, creator_id: uuid.UUID) -> MatchRequest:
        return await self._apply(request_id, ROLE_CREATOR, creator_id, "confirm")

    async def creator_pass(self, request_id: uuid.UUID, creator_id: uuid.UUID) -> MatchRequest:
        return await self._apply(request_id, ROLE_CREATOR, creator_id, "pass")

    # ========================
    # Listings
    # ========================

    async def list_sent_requests(self, creator_id: uuid.UUID) -> List[Dict[str, Any]]:
        requests = await self.store.list_for_creator(creator_id)
        tags_by_editor = await self.profiles.get_tags_for({r.editor_id for r in requests})

        result = []
        for request in requests:
            editor = await self.profiles.get_editor(request.editor_id)
            if not editor:
                continue
            result.append({
                "request_id": request.id,
                "status": request.status,
                "creator_liked_at": request.creator_liked_at,
                "editor_accepted_at": request.editor_accepted_at,
                "final_matched_at": request.final_matched_at,
                "created_at": request.created_at,
                **editor_summary(editor, tags_by_editor.get(editor.id, [])),
            })
        return result

    async def list_incoming_requests(self, editor_id: uuid.UUID) -> List[Dict[str, Any]]:
        requests = await self.store.list_for_editor(editor_id, statuses=(PENDING, ACCEPTED))

        result = []
        for request in requests:
            creator = await self.profiles.get_creator(request.creator_id)
            if not creator:
                continue
            styles = await self.profiles.get_preferred_styles(creator.id)
            result.append({
                "request_id": request.id,
                "status": request.status,
                "clip_id": request.clip_id,
                "creator_liked_at": request.creator_liked_at,
                "created_at": request.created_at,
                **creator_summary(creator, styles),
            })
        return result

    async def get_matches(self, user_id: uuid.UUID, role: str) -> List[Dict[str, Any]]:
        """Matched requests of the user with a counterpart summary and unread message count."""
        if role == ROLE_CREATOR:
            creator = await self.profiles.get_creator_by_user(user_id)
            if not creator:
                raise NotFoundError("Profile not found")
            requests = await self.store.list_for_creator(creator.id, statuses=(MATCHED,))
        elif role == ROLE_EDITOR:
            editor = await self.profiles.get_editor_by_user(user_id)
            if not editor:
                raise NotFoundError("Profile not found")
            requests = await self.store.list_for_editor(editor.id, statuses=(MATCHED,))
        else:
            raise ForbiddenError("Access denied")

        epoch = datetime.min.replace(tzinfo=timezone.utc)
        requests = sorted(requests, key=lambda r: r.final_matched_at or epoch, reverse=True)

        matches = []
        for request in requests:
            if role == ROLE_CREATOR:
                counterpart = await self._editor_detail(request.editor_id, reveal_identity=True)
            else:
                counterpart = await self._creator_detail(request.creator_id)
            if counterpart is None:
                continue

            unread = 0
            if self.messages is not None:
                unread = await self.messages.unread_count(request.id, user_id)

            matches.append({
                "match_id": request.id,
                "status": request.status,
                "final_matched_at": request.final_matched_at,
                "counterpart": counterpart,
                "unread_count": unread,
            })
        return matches

    async def get_match_details(self, request_id: uuid.UUID, user_id: uuid.UUID, role: str) -> Dict[str, Any]:
        """Full identity reveal for the two participants of a matched request."""
        request = await self.store.get(request_id)
        if not request:
            raise NotFoundError("Match not found")
        if request.status != MATCHED:
            raise ForbiddenError("Match not yet confirmed")

        if role == ROLE_CREATOR:
            profile = await self.profiles.get_creator_by_user(user_id)
            authorized = profile is not None and profile.id == request.creator_id
        elif role == ROLE_EDITOR:
            profile = await self.profiles.get_editor_by_user(user_id)
            authorized = profile is not None and profile.id == request.editor_id
        else:
            authorized = False
        if not authorized:
            raise ForbiddenError("Access denied")

        return {
            "match": {
                "id": request.id,
                "status": request.status,
                "matched_at": request.final_matched_at,
            },
            "creator": await self._creator_detail(request.creator_id),
            "editor": await self._editor_detail(request.editor_id, reveal_identity=True),
        }

    async def get_stats(self, role: str, profile_id: uuid.UUID) -> Dict[str, int]:
        if role == ROLE_CREATOR:
            counts = await self.store.count_by_status(creator_id=profile_id)
            pending_key = "pending"
        else:
            counts = await self.store.count_by_status(editor_id=profile_id)
            pending_key = "incoming_pending"
        return {
            pending_key: counts.get(PENDING, 0),
            "accepted": counts.get(ACCEPTED, 0),
            "matched": counts.get(MATCHED, 0),
            "passed": counts.get(PASSED, 0),
        }

    async def _creator_detail(self, creator_id: uuid.UUID) -> Optional[Dict[str, Any]]:
        creator = await self.profiles.get_creator(creator_id)
        if not creator:
            return None
        return creator_summary(creator, await self.profiles.get_preferred_styles(creator.id))

    async def _editor_detail(self, editor_id: uuid.UUID, reveal_identity: bool = False) -> Optional[Dict[str, Any]]:
        editor = await self.profiles.get_editor(editor_id)
        if not editor:
            return None
        tags = await self.profiles.get_tags(editor.id)
        clips = await self.profiles.get_clips(editor.id)
        detail = editor_summary(editor, tags, reveal_identity=reveal_identity)
        split = split_tags(tags)
        detail["content_types"] = split["content_types"]
        detail["styles"] = split["styles"]
        detail["clips"] = [clip_summary(c) for c in clips]
        return detail
