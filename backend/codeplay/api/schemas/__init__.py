from .auth import (
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
from .common import CamelModel, MessageResponse, PaginationResponse
from .playgrounds import (
    ClonePlaygroundRequest,
    CreatePlaygroundRequest,
    PlaygroundListResponse,
    PlaygroundResponse,
    PlaygroundSummaryResponse,
    SavePlaygroundFilesRequest,
    StarResponse,
    TemplateResponse,
    UpdatePlaygroundRequest,
)

__all__ = [
    "AuthResponse",
    "CamelModel",
    "ClonePlaygroundRequest",
    "CreatePlaygroundRequest",
    "LoginRequest",
    "MessageResponse",
    "OAuthCodeRequest",
    "OAuthUrlsResponse",
    "PaginationResponse",
    "PlaygroundListResponse",
    "PlaygroundResponse",
    "PlaygroundSummaryResponse",
    "RefreshTokenRequest",
    "RegisterRequest",
    "SavePlaygroundFilesRequest",
    "StarResponse",
    "TemplateResponse",
    "TokenPairResponse",
    "UpdatePlaygroundRequest",
    "UserProfileResponse",
    "UserResponse",
    "VerifyResponse",
]
