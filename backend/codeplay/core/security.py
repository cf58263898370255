from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Union
import os

import jwt
from pwdlib import PasswordHash
from pwdlib.hashers.argon2 import Argon2Hasher

SECRET_KEY = os.getenv("JWT_SECRET", "YOUR_SECRET_KEY_HERE_CHANGE_IN_PRODUCTION")
REFRESH_SECRET_KEY = os.getenv("JWT_REFRESH_SECRET", "YOUR_REFRESH_SECRET_KEY_HERE_CHANGE_IN_PRODUCTION")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 15
REFRESH_TOKEN_EXPIRE_DAYS = 7

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

password_hash = PasswordHash((
    Argon2Hasher(),
))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return password_hash.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return password_hash.hash(password)


def _encode(
    subject: Union[str, Any],
    email: str,
    token_type: str,
    secret: str,
    expires_delta: timedelta,
) -> str:
    now = datetime.now(timezone.utc)
    to_encode = {
        "sub": str(subject),
        "email": email,
        "type": token_type,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(to_encode, secret, algorithm=ALGORITHM)


def create_access_token(subject: Union[str, Any], email: str, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(
        subject,
        email,
        ACCESS_TOKEN_TYPE,
        SECRET_KEY,
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(subject: Union[str, Any], email: str, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(
        subject,
        email,
        REFRESH_TOKEN_TYPE,
        REFRESH_SECRET_KEY,
        expires_delta or timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS),
    )


def _decode(token: str, secret: str, token_type: str) -> Optional[Dict[str, Any]]:
    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except jwt.PyJWTError:
        return None
    if payload.get("type") != token_type or not payload.get("sub"):
        return None
    return payload


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Return the payload of a valid, unexpired access token, else None."""
    return _decode(token, SECRET_KEY, ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str) -> Optional[Dict[str, Any]]:
    return _decode(token, REFRESH_SECRET_KEY, REFRESH_TOKEN_TYPE)
