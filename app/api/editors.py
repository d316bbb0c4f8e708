"""Editor endpoints: profile, clips and the editor side of requests."""
import uuid
from typing import List, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator
from app.config.constants import MAX_BIO_LENGTH, MAX_NAME_LENGTH
from app.core.security import CurrentUser
from app.models.editor import EditorProfile
from app.services.match_service import MatchService, clip_summary
from app.services.profile_service import ProfileService
from app.api.deps import (
    get_match_service,
    get_profile_service,
    require_editor,
    require_user,
)

router = APIRouter(prefix="/api/editors", tags=["editors"])


class EditorProfileRequest(BaseModel):
    anonymous_name: str
    bio: Optional[str] = None
    real_name: Optional[str] = None
    availability: Optional[str] = None
    content_types: List[str] = []
    styles: List[str] = []

    @field_validator("anonymous_name")
    @classmethod
    def validate_anonymous_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Anonymous name is required")
        if len(v) > MAX_NAME_LENGTH:
            raise ValueError("Anonymous name too long")
        return v

    @field_validator("bio")
    @classmethod
    def validate_bio(cls, v):
        if v is not None and len(v) > MAX_BIO_LENGTH:
            raise ValueError("Bio too long")
        return v


class EditorProfileUpdate(BaseModel):
    bio: Optional[str] = None
    real_name: Optional[str] = None
    availability: Optional[str] = None
    content_types: Optional[List[str]] = None
    styles: Optional[List[str]] = None


class ClipIn(BaseModel):
    file_path: str
    title: Optional[str] = None
    description: Optional[str] = None


class ClipsRequest(BaseModel):
    clips: List[ClipIn]


class RespondRequest(BaseModel):
    action: str


# ========================
# Profile
# ========================

@router.post("/profile", status_code=201)
async def create_profile(
    body: EditorProfileRequest,
    user: CurrentUser = Depends(require_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    editor = await profiles.create_editor_profile(user.user_id, user.role, **body.model_dump())
    return {"message": "Profile created successfully", "id": editor.id}


@router.put("/profile")
async def update_profile(
    body: EditorProfileUpdate,
    user: CurrentUser = Depends(require_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    await profiles.update_editor_profile(user.user_id, user.role, **body.model_dump(exclude_unset=True))
    return {"message": "Profile updated successfully"}


# ========================
# Clips
# ========================

@router.post("/clips", status_code=201)
async def add_clips(
    body: ClipsRequest,
    user: CurrentUser = Depends(require_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    clips = await profiles.add_clips(user.user_id, user.role, [c.model_dump() for c in body.clips])
    return {"message": "Clips uploaded successfully", "clips": [clip_summary(c) for c in clips]}


@router.get("/clips")
async def list_clips(
    user: CurrentUser = Depends(require_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    clips = await profiles.list_clips(user.user_id, user.role)
    return {"clips": [clip_summary(c) for c in clips]}


# ========================
# Requests
# ========================

@router.get("/requests")
async def incoming_requests(
    editor: EditorProfile = Depends(require_editor),
    matches: MatchService = Depends(get_match_service),
):
    """Pending and accepted requests addressed to this editor."""
    return {"requests": await matches.list_incoming_requests(editor.id)}


@router.post("/requests/{request_id}/respond")
async def respond(
    request_id: uuid.UUID,
    body: RespondRequest,
    editor: EditorProfile = Depends(require_editor),
    matches: MatchService = Depends(get_match_service),
):
    request = await matches.respond(request_id, editor.id, body.action)
    return {"message": f"Request {request.status}", "request_id": request.id, "status": request.status}


@router.post("/requests/{request_id}/final-accept")
async def final_accept(
    request_id: uuid.UUID,
    editor: EditorProfile = Depends(require_editor),
    matches: MatchService = Depends(get_match_service),
):
    request = await matches.final_accept(request_id, editor.id)
    return {"message": "Match confirmed", "match_id": request.id, "status": request.status}
