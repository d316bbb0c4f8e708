"""Creator endpoints: profile, feed, likes and the creator side of requests."""
import uuid
from typing import List, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator
from app.config.constants import MAX_BIO_LENGTH, MAX_NAME_LENGTH
from app.core.security import CurrentUser
from app.models.creator import CreatorProfile
from app.services.feed_service import FeedService
from app.services.match_service import MatchService
from app.services.profile_service import ProfileService
from app.api.deps import (
    get_feed_service,
    get_match_service,
    get_profile_service,
    require_creator,
    require_user,
)

router = APIRouter(prefix="/api/creators", tags=["creators"])


def _required_text(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Field is required")
    if len(v) > MAX_NAME_LENGTH:
        raise ValueError("Value too long")
    return v


class CreatorProfileRequest(BaseModel):
    display_name: str
    content_type: str
    bio: Optional[str] = None
    what_stream: Optional[str] = None
    want_editor: Optional[str] = None
    preferred_styles: List[str] = []

    @field_validator("display_name", "content_type")
    @classmethod
    def validate_required(cls, v):
        return _required_text(v)

    @field_validator("bio")
    @classmethod
    def validate_bio(cls, v):
        if v is not None and len(v) > MAX_BIO_LENGTH:
            raise ValueError("Bio too long")
        return v


class CreatorProfileUpdate(BaseModel):
    display_name: Optional[str] = None
    content_type: Optional[str] = None
    bio: Optional[str] = None
    what_stream: Optional[str] = None
    want_editor: Optional[str] = None
    preferred_styles: Optional[List[str]] = None

    @field_validator("display_name", "content_type")
    @classmethod
    def validate_required(cls, v):
        if v is None:
            return v
        return _required_text(v)

    @field_validator("bio")
    @classmethod
    def validate_bio(cls, v):
        if v is not None and len(v) > MAX_BIO_LENGTH:
            raise ValueError("Bio too long")
        return v


class LikeRequest(BaseModel):
    clip_id: Optional[uuid.UUID] = None


# ========================
# Profile
# ========================

@router.post("/profile", status_code=201)
async def create_profile(
    body: CreatorProfileRequest,
    user: CurrentUser = Depends(require_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    creator = await profiles.create_creator_profile(user.user_id, user.role, **body.model_dump())
    return {"message": "Profile created successfully", "id": creator.id}


@router.put("/profile")
async def update_profile(
    body: CreatorProfileUpdate,
    user: CurrentUser = Depends(require_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    await profiles.update_creator_profile(user.user_id, user.role, **body.model_dump(exclude_unset=True))
    return {"message": "Profile updated successfully"}


# ========================
# Feed
# ========================

@router.get("/feed")
async def get_feed(
    creator: CreatorProfile = Depends(require_creator),
    feed: FeedService = Depends(get_feed_service),
):
    """Curated editors for this creator, best style match first."""
    return {"editors": await feed.get_feed(creator.id)}


@router.post("/like/{editor_id}", status_code=201)
async def like_editor(
    editor_id: uuid.UUID,
    body: Optional[LikeRequest] = None,
    creator: CreatorProfile = Depends(require_creator),
    matches: MatchService = Depends(get_match_service),
):
    clip_id = body.clip_id if body else None
    request = await matches.create_request(creator.id, editor_id, clip_id)
    return {"message": "Request sent", "request_id": request.id, "status": request.status}


@router.post("/pass/{editor_id}")
async def pass_editor(
    editor_id: uuid.UUID,
    body: Optional[LikeRequest] = None,
    creator: CreatorProfile = Depends(require_creator),
    matches: MatchService = Depends(get_match_service),
):
    clip_id = body.clip_id if body else None
    await matches.pass_editor(creator.id, editor_id, clip_id)
    return {"message": "Passed"}


# ========================
# Requests
# ========================

@router.get("/requests")
async def sent_requests(
    creator: CreatorProfile = Depends(require_creator),
    matches: MatchService = Depends(get_match_service),
):
    return {"requests": await matches.list_sent_requests(creator.id)}


@router.post("/requests/{request_id}/confirm")
async def confirm_request(
    request_id: uuid.UUID,
    creator: CreatorProfile = Depends(require_creator),
    matches: MatchService = Depends(get_match_service),
):
    request = await matches.creator_confirm(request_id, creator.id)
    return {"message": "Match confirmed", "match_id": request.id, "status": request.status}


@router.post("/requests/{request_id}/pass")
async def pass_request(
    request_id: uuid.UUID,
    creator: CreatorProfile = Depends(require_creator),
    matches: MatchService = Depends(get_match_service),
):
    request = await matches.creator_pass(request_id, creator.id)
    return {"message": "Request passed", "request_id": request.id, "status": request.status}
