from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import requests
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_SCOPES = "openid email profile"

GITHUB_AUTH_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_API_URL = "https://api.github.com"
GITHUB_SCOPES = "user:email"

HTTP_TIMEOUT_SECONDS = 10


class OAuthError(Exception):
    pass


def _json_payload(response: requests.Response, message: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        logger.warning("%s: response was not JSON (status %s)", message, response.status_code)
        raise OAuthError(message) from exc


@dataclass(frozen=True)
class OAuthClientConfig:
    client_id: str
    client_secret: str
    redirect_uri: str

    @classmethod
    def from_env(cls, provider: str) -> Optional["OAuthClientConfig"]:
        prefix = provider.upper()
        client_id = (os.getenv(f"{prefix}_CLIENT_ID") or "").strip()
        client_secret = (os.getenv(f"{prefix}_CLIENT_SECRET") or "").strip()
        redirect_uri = (os.getenv(f"{prefix}_REDIRECT_URI") or "").strip()
        if not client_id or not client_secret or not redirect_uri:
            return None
        return cls(client_id=client_id, client_secret=client_secret, redirect_uri=redirect_uri)


@dataclass
class OAuthProfile:
    provider: str
    provider_account_id: str
    email: str
    name: Optional[str] = None
    image: Optional[str] = None


def build_google_auth_url(config: OAuthClientConfig, state: Optional[str] = None) -> str:
    params = {
        "client_id": config.client_id,
        "redirect_uri": config.redirect_uri,
        "response_type": "code",
        "scope": GOOGLE_SCOPES,
    }
    if state:
        params["state"] = state
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


def build_github_auth_url(config: OAuthClientConfig, state: Optional[str] = None) -> str:
    params = {
        "client_id": config.client_id,
        "redirect_uri": config.redirect_uri,
        "scope": GITHUB_SCOPES,
    }
    if state:
        params["state"] = state
    return f"{GITHUB_AUTH_URL}?{urlencode(params)}"


def exchange_google_code(config: OAuthClientConfig, code: str) -> Dict[str, Any]:
    try:
        response = requests.post(
            GOOGLE_TOKEN_URL,
            data={
                "code": code,
                "client_id": config.client_id,
                "client_secret": config.client_secret,
                "redirect_uri": config.redirect_uri,
                "grant_type": "authorization_code",
            },
            timeout=HTTP_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        raise OAuthError("Failed to exchange Google code") from exc
    if response.status_code >= 400:
        logger.warning("Google token exchange failed with status %s", response.status_code)
        raise OAuthError("Failed to exchange Google code")
    payload = _json_payload(response, "Failed to exchange Google code")
    if not isinstance(payload, dict) or "id_token" not in payload:
        raise OAuthError("Google response did not include id_token")
    return payload


def verify_google_id_token(config: OAuthClientConfig, token_value: str) -> Dict[str, Any]:
    try:
        return id_token.verify_oauth2_token(
            token_value,
            google_requests.Request(),
            config.client_id,
        )
    except Exception as exc:
        raise OAuthError(f"Invalid Google ID token: {exc}") from exc


def fetch_google_profile(config: OAuthClientConfig, code: str) -> OAuthProfile:
    token_response = exchange_google_code(config, code)
    claims = verify_google_id_token(config, token_response["id_token"])
    email = str(claims.get("email") or "").strip().lower()
    if not email:
        raise OAuthError("Google account has no email address")
    return OAuthProfile(
        provider="google",
        provider_account_id=str(claims.get("sub")),
        email=email,
        name=claims.get("name"),
        image=claims.get("picture"),
    )


def _github_headers(access_token: str) -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {access_token}",
        "Accept": "application/vnd.github.v3+json",
    }


def exchange_github_code(config: OAuthClientConfig, code: str) -> str:
    try:
        response = requests.post(
            GITHUB_TOKEN_URL,
            data={
                "client_id": config.client_id,
                "client_secret": config.client_secret,
                "code": code,
                "redirect_uri": config.redirect_uri,
            },
            headers={"Accept": "application/json"},
            timeout=HTTP_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        raise OAuthError("Failed to exchange GitHub code") from exc
    payload = _json_payload(response, "Failed to exchange GitHub code") if response.status_code < 400 else {}
    access_token = payload.get("access_token") if isinstance(payload, dict) else None
    if not access_token:
        # GitHub answers 200 with an "error" field for bad codes.
        logger.warning("GitHub token exchange failed: %s", payload.get("error") or response.status_code)
        raise OAuthError("Failed to exchange GitHub code")
    return access_token


def get_github_user_profile(access_token: str) -> Dict[str, Any]:
    try:
        response = requests.get(
            f"{GITHUB_API_URL}/user",
            headers=_github_headers(access_token),
            timeout=HTTP_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        raise OAuthError("Failed to fetch GitHub user profile") from exc
    if response.status_code >= 400:
        raise OAuthError("Failed to fetch GitHub user profile")
    profile = _json_payload(response, "Failed to fetch GitHub user profile")
    if not isinstance(profile, dict):
        raise OAuthError("Failed to fetch GitHub user profile")
    return profile


def get_github_user_email(access_token: str) -> Optional[str]:
    """Primary address from /user/emails, else the first listed, else None."""
    try:
        response = requests.get(
            f"{GITHUB_API_URL}/user/emails",
            headers=_github_headers(access_token),
            timeout=HTTP_TIMEOUT_SECONDS,
        )
    except requests.RequestException:
        logger.warning("GitHub email lookup failed", exc_info=True)
        return None
    if response.status_code >= 400:
        return None
    try:
        emails: List[Dict[str, Any]] = response.json() or []
    except ValueError:
        logger.warning("GitHub email lookup returned a non-JSON body")
        return None
    if not isinstance(emails, list):
        return None
    for entry in emails:
        if entry.get("primary"):
            return entry.get("email")
    return emails[0].get("email") if emails else None


def fetch_github_profile(config: OAuthClientConfig, code: str) -> OAuthProfile:
    access_token = exchange_github_code(config, code)
    profile = get_github_user_profile(access_token)
    email = profile.get("email") or get_github_user_email(access_token)
    if not email:
        raise OAuthError("GitHub account has no accessible email address")
    return OAuthProfile(
        provider="github",
        provider_account_id=str(profile.get("id")),
        email=str(email).strip().lower(),
        name=profile.get("name") or profile.get("login"),
        image=profile.get("avatar_url"),
    )


PROFILE_FETCHERS = {
    "google": fetch_google_profile,
    "github": fetch_github_profile,
}


def fetch_oauth_profile(provider: str, code: str) -> OAuthProfile:
    fetcher = PROFILE_FETCHERS.get(provider)
    if fetcher is None:
        raise OAuthError(f"Unsupported OAuth provider: {provider}")
    config = OAuthClientConfig.from_env(provider)
    if config is None:
        raise OAuthError(f"{provider.capitalize()} OAuth is not configured")
    if not code:
        raise OAuthError("Authorization code is required")
    return fetcher(config, code)


def build_oauth_urls() -> Dict[str, Optional[str]]:
    google = OAuthClientConfig.from_env("google")
    github = OAuthClientConfig.from_env("github")
    return {
        "google": build_google_auth_url(google) if google else None,
        "github": build_github_auth_url(github) if github else None,
    }
