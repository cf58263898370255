from datetime import datetime
from typing import Optional

from pydantic import EmailStr

from .common import CamelModel


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str
    name: Optional[str] = None


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class RefreshTokenRequest(CamelModel):
    refresh_token: str


class OAuthCodeRequest(CamelModel):
    code: str


class UserResponse(CamelModel):
    id: str
    email: str
    name: Optional[str] = None
    image: Optional[str] = None
    role: str = "user"


class UserProfileResponse(UserResponse):
    email_verified: bool = False
    created_at: Optional[datetime] = None


class AuthResponse(CamelModel):
    access_token: str
    refresh_token: str
    user: UserResponse


class TokenPairResponse(CamelModel):
    access_token: str
    refresh_token: str


class VerifiedIdentity(CamelModel):
    id: str
    email: Optional[str] = None


class VerifyResponse(CamelModel):
    valid: bool
    user: VerifiedIdentity


class OAuthUrlsResponse(CamelModel):
    google: Optional[str] = None
    github: Optional[str] = None
