import json
import logging
import os
from typing import Any, Dict
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from codeplay.api.dependencies import get_current_principal, get_current_user
from codeplay.api.schemas import (
    AuthResponse,
    LoginRequest,
    OAuthCodeRequest,
    OAuthUrlsResponse,
    RefreshTokenRequest,
    RegisterRequest,
    TokenPairResponse,
    UserProfileResponse,
    UserResponse,
    VerifyResponse,
)
from codeplay.db.postgres.models.identity import User
from codeplay.db.postgres.session import get_db
from codeplay.services.auth_service import AuthConflictError, AuthError, AuthResult, AuthService
from codeplay.services.oauth_providers import OAuthError, build_oauth_urls, fetch_oauth_profile

logger = logging.getLogger(__name__)

router = APIRouter()

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")


def _user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=str(user.id),
        email=user.email,
        name=user.name,
        image=user.image,
        role=user.role.value if hasattr(user.role, "value") else str(user.role),
    )


def _auth_to_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        access_token=result.tokens.access_token,
        refresh_token=result.tokens.refresh_token,
        user=_user_to_response(result.user),
    )


async def _oauth_login(provider: str, code: str, db: AsyncSession) -> AuthResult:
    profile = await run_in_threadpool(fetch_oauth_profile, provider, code)
    return await AuthService(db).login_with_oauth(profile)


def _oauth_error_redirect(message: str) -> RedirectResponse:
    query = urlencode({"message": message})
    return RedirectResponse(url=f"{FRONTEND_URL}/auth/error?{query}", status_code=status.HTTP_302_FOUND)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, db: AsyncSession = Depends(get_db)):
    service = AuthService(db)
    try:
        result = await service.register(request.email, request.password, request.name)
    except AuthConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return _auth_to_response(result)


@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest, db: AsyncSession = Depends(get_db)):
    try:
        result = await AuthService(db).login(request.email, request.password)
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))
    return _auth_to_response(result)


@router.post("/refresh", response_model=TokenPairResponse)
async def refresh(request: RefreshTokenRequest, db: AsyncSession = Depends(get_db)):
    try:
        result = await AuthService(db).refresh(request.refresh_token)
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))
    return TokenPairResponse(
        access_token=result.tokens.access_token,
        refresh_token=result.tokens.refresh_token,
    )


@router.get("/verify", response_model=VerifyResponse)
async def verify(principal: Dict[str, Any] = Depends(get_current_principal)):
    return VerifyResponse(
        valid=True,
        user={"id": str(principal["user_id"]), "email": principal.get("email")},
    )


@router.get("/me", response_model=UserProfileResponse)
async def me(user: User = Depends(get_current_user)):
    base = _user_to_response(user)
    return UserProfileResponse(
        **base.model_dump(),
        email_verified=bool(user.email_verified),
        created_at=user.created_at,
    )


@router.get("/oauth-urls", response_model=OAuthUrlsResponse)
async def oauth_urls():
    return OAuthUrlsResponse(**build_oauth_urls())


@router.get("/callback/{provider}")
async def oauth_callback(provider: str, code: str = "", db: AsyncSession = Depends(get_db)):
    try:
        result = await _oauth_login(provider, code, db)
    except OAuthError as exc:
        logger.warning("OAuth callback failed for provider=%s: %s", provider, exc)
        return _oauth_error_redirect(str(exc))
    except Exception:
        # The browser is mid-redirect; every failure goes back to the frontend.
        logger.exception("Unexpected OAuth callback failure for provider=%s", provider)
        return _oauth_error_redirect("Authentication failed")

    user_payload = _user_to_response(result.user).model_dump(by_alias=True)
    query = urlencode(
        {
            "token": result.tokens.access_token,
            "refreshToken": result.tokens.refresh_token,
            "user": json.dumps(user_payload),
        }
    )
    return RedirectResponse(url=f"{FRONTEND_URL}/auth/callback?{query}", status_code=status.HTTP_302_FOUND)


@router.post("/oauth/{provider}", response_model=AuthResponse)
async def oauth_exchange(provider: str, request: OAuthCodeRequest, db: AsyncSession = Depends(get_db)):
    try:
        result = await _oauth_login(provider, request.code, db)
    except OAuthError as exc:
        logger.warning("OAuth exchange failed for provider=%s: %s", provider, exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return _auth_to_response(result)
