"""Request-scoped dependencies: session, stores, services and the authenticated caller."""
from typing import Optional
from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from app.config.constants import ROLE_CREATOR, ROLE_EDITOR
from app.core.exceptions import ForbiddenError, NotFoundError
from app.core.security import CurrentUser, authenticate
from app.db.session import get_db
from app.db.match_store import MatchStore, SqlMatchStore
from app.db.message_store import MessageStore, SqlMessageStore
from app.db.profile_store import ProfileStore, SqlProfileStore
from app.models.creator import CreatorProfile
from app.models.editor import EditorProfile
from app.services.chat_service import ChatService
from app.services.feed_service import FeedService
from app.services.match_service import MatchService
from app.services.profile_service import ProfileService
from app.services.user_service import UserService


# ========================
# Auth
# ========================

async def get_current_user(authorization: Optional[str] = Header(None)) -> Optional[CurrentUser]:
    """Resolve `Authorization: Bearer <token>` to the caller's identity."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return authenticate(token.strip())


def require_user(user: Optional[CurrentUser] = Depends(get_current_user)) -> CurrentUser:
    if not user:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user


# ========================
# Stores & services
# ========================

def get_match_store(session: AsyncSession = Depends(get_db)) -> MatchStore:
    return SqlMatchStore(session)


def get_profile_store(session: AsyncSession = Depends(get_db)) -> ProfileStore:
    return SqlProfileStore(session)


def get_message_store(session: AsyncSession = Depends(get_db)) -> MessageStore:
    return SqlMessageStore(session)


def get_match_service(
    store: MatchStore = Depends(get_match_store),
    profiles: ProfileStore = Depends(get_profile_store),
    messages: MessageStore = Depends(get_message_store),
) -> MatchService:
    return MatchService(store, profiles, messages)


def get_feed_service(
    store: MatchStore = Depends(get_match_store),
    profiles: ProfileStore = Depends(get_profile_store),
) -> FeedService:
    return FeedService(store, profiles)


def get_chat_service(
    store: MatchStore = Depends(get_match_store),
    profiles: ProfileStore = Depends(get_profile_store),
    messages: MessageStore = Depends(get_message_store),
) -> ChatService:
    return ChatService(store, profiles, messages)


def get_user_service(session: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(session)


def get_profile_service(session: AsyncSession = Depends(get_db)) -> ProfileService:
    return ProfileService(session)


# ========================
# Role-specific profiles
# ========================

async def require_creator(
    user: CurrentUser = Depends(require_user),
    profiles: ProfileStore = Depends(get_profile_store),
) -> CreatorProfile:
    if user.role != ROLE_CREATOR:
        raise ForbiddenError("Access denied")
    creator = await profiles.get_creator_by_user(user.user_id)
    if not creator:
        raise NotFoundError("Creator profile not found")
    return creator


async def require_editor(
    user: CurrentUser = Depends(require_user),
    profiles: ProfileStore = Depends(get_profile_store),
) -> EditorProfile:
    if user.role != ROLE_EDITOR:
        raise ForbiddenError("Access denied")
    editor = await profiles.get_editor_by_user(user.user_id)
    if not editor:
        raise NotFoundError("Editor profile not found")
    return editor
