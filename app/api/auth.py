"""Account endpoints: register, login and the current caller."""
import logging
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator
from app.config.constants import VALID_ROLES
from app.core.security import CurrentUser, create_access_token
from app.services.profile_service import ProfileService
from app.services.user_service import UserService
from app.api.deps import get_profile_service, get_user_service, require_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class RegisterRequest(BaseModel):
    email: str
    password: str
    role: str

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        if v not in VALID_ROLES:
            raise ValueError('Role must be either "editor" or "creator"')
        return v


class LoginRequest(BaseModel):
    email: str
    password: str


@router.post("/register", status_code=201)
async def register(body: RegisterRequest, users: UserService = Depends(get_user_service)):
    user = await users.register(body.email, body.password, body.role)
    token = create_access_token(user.id, user.role)
    return {
        "message": "User created successfully",
        "token": token,
        "user": {"id": user.id, "email": user.email, "role": user.role},
    }


@router.post("/login")
async def login(body: LoginRequest, users: UserService = Depends(get_user_service)):
    user = await users.authenticate_credentials(body.email, body.password)
    if not user:
        logger.warning("Failed login attempt")
        raise HTTPException(status_code=401, detail="Invalid credentials")
    token = create_access_token(user.id, user.role)
    return {
        "message": "Login successful",
        "token": token,
        "user": {"id": user.id, "email": user.email, "role": user.role},
    }


@router.get("/me")
async def me(
    user: CurrentUser = Depends(require_user),
    users: UserService = Depends(get_user_service),
    profiles: ProfileService = Depends(get_profile_service),
):
    """Current account with its role profile, if one exists yet."""
    account = await users.get_user(user.user_id)
    if not account:
        raise HTTPException(status_code=404, detail="User not found")
    return {
        "user": {"id": account.id, "email": account.email, "role": account.role},
        "profile": await profiles.get_own_profile(account.id, account.role),
    }
