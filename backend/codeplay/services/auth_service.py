import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from codeplay.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    get_password_hash,
    verify_password,
)
from codeplay.db.postgres.models.identity import Account, User
from codeplay.services.oauth_providers import OAuthProfile

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class AuthError(Exception):
    pass


class AuthConflictError(AuthError):
    pass


@dataclass
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass
class AuthResult:
    tokens: TokenPair
    user: User


def issue_tokens(user: User) -> TokenPair:
    return TokenPair(
        access_token=create_access_token(subject=str(user.id), email=user.email),
        refresh_token=create_refresh_token(subject=str(user.id), email=user.email),
    )


class AuthService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email).limit(1))
        return result.scalar_one_or_none()

    async def get_user(self, user_id: UUID) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id).limit(1))
        return result.scalar_one_or_none()

    async def register(self, email: str, password: str, name: Optional[str] = None) -> AuthResult:
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        user = User(
            email=email.strip().lower(),
            hashed_password=get_password_hash(password),
            name=(name or "").strip() or None,
            email_verified=True,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.info("Registration rejected for existing email")
            raise AuthConflictError("User with this email already exists")
        await self.db.refresh(user)
        return AuthResult(tokens=issue_tokens(user), user=user)

    async def login(self, email: str, password: str) -> AuthResult:
        user = await self.get_user_by_email(email.strip().lower())
        # Same message for every failure so callers cannot enumerate accounts.
        if user is None or not user.hashed_password or not verify_password(password, user.hashed_password):
            raise AuthError("Invalid email or password")
        return AuthResult(tokens=issue_tokens(user), user=user)

    async def refresh(self, refresh_token: str) -> AuthResult:
        payload = decode_refresh_token(refresh_token)
        if payload is None:
            raise AuthError("Invalid or expired refresh token")
        try:
            user_id = UUID(payload["sub"])
        except ValueError:
            raise AuthError("Invalid or expired refresh token")
        user = await self.get_user(user_id)
        if user is None:
            raise AuthError("Invalid or expired refresh token")
        return AuthResult(tokens=issue_tokens(user), user=user)

    async def get_or_create_oauth_user(self, profile: OAuthProfile) -> User:
        user = await self.get_user_by_email(profile.email)
        if user is None:
            user = User(
                email=profile.email,
                name=profile.name,
                image=profile.image,
                email_verified=True,
            )
            self.db.add(user)
            await self.db.flush()
        else:
            if profile.name and not user.name:
                user.name = profile.name
            if profile.image and not user.image:
                user.image = profile.image

        await self._link_account(user, profile)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def _link_account(self, user: User, profile: OAuthProfile) -> Account:
        result = await self.db.execute(
            select(Account).where(
                Account.provider == profile.provider,
                Account.provider_account_id == profile.provider_account_id,
            ).limit(1)
        )
        account = result.scalar_one_or_none()
        if account is not None:
            return account
        account = Account(
            user_id=user.id,
            type="oauth",
            provider=profile.provider,
            provider_account_id=profile.provider_account_id,
        )
        self.db.add(account)
        await self.db.flush()
        return account

    async def login_with_oauth(self, profile: OAuthProfile) -> AuthResult:
        user = await self.get_or_create_oauth_user(profile)
        return AuthResult(tokens=issue_tokens(user), user=user)
