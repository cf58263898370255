from uuid import uuid4

from codeplay.core.security import create_access_token, get_password_hash
from codeplay.db.postgres.models.identity import User

DEFAULT_PASSWORD = "secret123"


async def seed_user(db_session, *, email=None, password=DEFAULT_PASSWORD, name="Test User"):
    user = User(
        email=email or f"user-{uuid4().hex[:8]}@example.com",
        hashed_password=get_password_hash(password) if password else None,
        name=name,
        email_verified=True,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


def auth_headers(user_id, email="user@example.com") -> dict[str, str]:
    token = create_access_token(subject=str(user_id), email=email)
    return {"Authorization": f"Bearer {token}"}


def configure_oauth_env(monkeypatch, provider: str) -> None:
    prefix = provider.upper()
    monkeypatch.setenv(f"{prefix}_CLIENT_ID", f"test-{provider}-client-id")
    monkeypatch.setenv(f"{prefix}_CLIENT_SECRET", f"test-{provider}-secret")
    monkeypatch.setenv(f"{prefix}_REDIRECT_URI", f"http://test/api/auth/callback/{provider}")


def clear_oauth_env(monkeypatch, provider: str) -> None:
    prefix = provider.upper()
    for suffix in ("CLIENT_ID", "CLIENT_SECRET", "REDIRECT_URI"):
        monkeypatch.delenv(f"{prefix}_{suffix}", raising=False)
