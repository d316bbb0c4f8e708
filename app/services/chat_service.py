import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional
from app.config.constants import (
    ROLE_CREATOR,
    ROLE_EDITOR,
    DEFAULT_MESSAGE_PAGE_SIZE,
    MAX_MESSAGE_PAGE_SIZE,
    MAX_MESSAGE_LENGTH,
)
from app.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from app.db.match_store import MatchStore
from app.db.message_store import MessageStore
from app.db.profile_store import ProfileStore
from app.models.chat_message import ChatMessage
from app.models.match_request import MatchRequest, MatchStatus

logger = logging.getLogger(__name__)


class ChatService:
    """
    Private chat between the two sides of a matched request.

    Every operation passes the gate in `_authorize` before touching message
    storage: the request must be `matched` and the caller must own one side.
    """

    def __init__(self, store: MatchStore, profiles: ProfileStore, messages: MessageStore):
        self.store = store
        self.profiles = profiles
        self.messages = messages

    async def _participant_user_ids(self, request: MatchRequest) -> set:
        user_ids = set()
        creator = await self.profiles.get_creator(request.creator_id)
        if creator:
            user_ids.add(creator.user_id)
        editor = await self.profiles.get_editor(request.editor_id)
        if editor:
            user_ids.add(editor.user_id)
        return user_ids

    async def _authorize(self, request_id: uuid.UUID, user_id: uuid.UUID) -> MatchRequest:
        request = await self.store.get(request_id)
        if not request:
            raise NotFoundError("Match not found")
        if request.status != MatchStatus.MATCHED.value:
            raise ForbiddenError("Chat only available for confirmed matches")
        if user_id not in await self._participant_user_ids(request):
            logger.warning(f"User {user_id} denied access to chat {request_id}")
            raise ForbiddenError("Access denied")
        return request

    async def can_chat(self, request_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        try:
            await self._authorize(request_id, user_id)
        except (NotFoundError, ForbiddenError):
            return False
        return True

    async def send_message(self, request_id: uuid.UUID, user_id: uuid.UUID, text: str) -> ChatMessage:
        text = (text or "").strip()
        if not text:
            raise ValidationError("Message cannot be empty")
        if len(text) > MAX_MESSAGE_LENGTH:
            raise ValidationError(f"Message is longer than {MAX_MESSAGE_LENGTH} characters")

        await self._authorize(request_id, user_id)
        message = ChatMessage(
            id=uuid.uuid4(),
            match_id=request_id,
            sender_id=user_id,
            message=text,
            read=False,
            created_at=datetime.now(timezone.utc),
        )
        message = await self.messages.add(message)
        logger.info(f"Message {message.id} sent in match {request_id}")
        return message

    async def list_messages(
        self,
        request_id: uuid.UUID,
        user_id: uuid.UUID,
        limit: int = DEFAULT_MESSAGE_PAGE_SIZE,
        before: Optional[datetime] = None,
    ) -> List[ChatMessage]:
        """
        Newest `limit` messages (older than `before` when given) in chronological order.

        Fetching a thread marks the counterpart's messages as read.
        """
        if limit < 1 or limit > MAX_MESSAGE_PAGE_SIZE:
            raise ValidationError(f"limit must be between 1 and {MAX_MESSAGE_PAGE_SIZE}")

        await self._authorize(request_id, user_id)
        await self.messages.mark_read(request_id, user_id)
        recent = await self.messages.list_recent(request_id, limit, before)
        return list(reversed(recent))

    async def mark_read(self, request_id: uuid.UUID, user_id: uuid.UUID) -> int:
        await self._authorize(request_id, user_id)
        count = await self.messages.mark_read(request_id, user_id)
        if count:
            logger.info(f"Marked {count} messages read in match {request_id}")
        return count

    async def unread_total(self, user_id: uuid.UUID, role: str) -> int:
        """Unread messages across all of the user's matches."""
        if role == ROLE_CREATOR:
            creator = await self.profiles.get_creator_by_user(user_id)
            if not creator:
                return 0
            requests = await self.store.list_for_creator(creator.id, statuses=(MatchStatus.MATCHED.value,))
        elif role == ROLE_EDITOR:
            editor = await self.profiles.get_editor_by_user(user_id)
            if not editor:
                return 0
            requests = await self.store.list_for_editor(editor.id, statuses=(MatchStatus.MATCHED.value,))
        else:
            return 0
        return await self.messages.unread_total([r.id for r in requests], user_id)
