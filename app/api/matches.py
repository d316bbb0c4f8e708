"""Confirmed matches and per-role request statistics."""
import uuid
from fastapi import APIRouter, Depends
from app.config.constants import ROLE_CREATOR
from app.core.exceptions import NotFoundError
from app.core.security import CurrentUser
from app.db.profile_store import ProfileStore
from app.services.match_service import MatchService
from app.api.deps import get_match_service, get_profile_store, require_user

router = APIRouter(prefix="/api/matches", tags=["matches"])


@router.get("")
async def list_matches(
    user: CurrentUser = Depends(require_user),
    matches: MatchService = Depends(get_match_service),
):
    return {"matches": await matches.get_matches(user.user_id, user.role)}


@router.get("/stats/overview")
async def stats_overview(
    user: CurrentUser = Depends(require_user),
    matches: MatchService = Depends(get_match_service),
    profiles: ProfileStore = Depends(get_profile_store),
):
    if user.role == ROLE_CREATOR:
        profile = await profiles.get_creator_by_user(user.user_id)
    else:
        profile = await profiles.get_editor_by_user(user.user_id)
    if not profile:
        raise NotFoundError("Profile not found")
    return {"stats": await matches.get_stats(user.role, profile.id)}


@router.get("/{match_id}")
async def match_details(
    match_id: uuid.UUID,
    user: CurrentUser = Depends(require_user),
    matches: MatchService = Depends(get_match_service),
):
    return await matches.get_match_details(match_id, user.user_id, user.role)
