from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from app.config.constants import VALID_ROLES, MIN_PASSWORD_LENGTH, MAX_EMAIL_LENGTH
from app.core.exceptions import ConflictError, ValidationError
from app.core.security import hash_password, verify_password
from app.models.user import User
from typing import Optional
import logging
import uuid

logger = logging.getLogger(__name__)

class UserService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def register(self, email: str, password: str, role: str) -> User:
        email = (email or "").strip().lower()
        if not email or "@" not in email or len(email) > MAX_EMAIL_LENGTH:
            raise ValidationError("A valid email is required")
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if role not in VALID_ROLES:
            raise ValidationError('Role must be either "editor" or "creator"')

        if await self.get_by_email(email):
            raise ConflictError("Email already registered")

        user = User(
            id=uuid.uuid4(),
            email=email,
            password_hash=hash_password(password),
            role=role,
        )
        self.session.add(user)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError("Email already registered") from e
        await self.session.refresh(user)
        logger.info(f"Registered {role} user {user.id}")
        return user

    async def authenticate_credentials(self, email: str, password: str) -> Optional[User]:
        user = await self.get_by_email((email or "").strip().lower())
        if not user or not verify_password(password or "", user.password_hash):
            return None
        return user

    async def get_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == email)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_user(self, user_id: uuid.UUID) -> Optional[User]:
        stmt = select(User).where(User.id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
