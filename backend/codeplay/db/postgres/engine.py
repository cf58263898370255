import logging
import os
import urllib.parse

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from sqlalchemy.ext.asyncio import create_async_engine as _create_async_engine
from sqlalchemy.pool import NullPool

logger = logging.getLogger(__name__)

ASYNC_DRIVER = "postgresql+psycopg"


def _normalize_database_url(raw_url: str) -> str:
    """Switch the URL to the psycopg driver and URL-encode the password.

    Hosted Postgres providers hand out URLs with plain-text passwords, which
    break as soon as the password contains ``@``, ``:`` or ``#``.
    """
    if "://" not in raw_url:
        return raw_url

    scheme, rest = raw_url.split("://", 1)
    if scheme in ("postgres", "postgresql", "postgresql+asyncpg"):
        scheme = ASYNC_DRIVER

    if "@" not in rest:
        return f"{scheme}://{rest}"

    # Split on the last '@' so passwords containing '@' survive.
    creds, location = rest.rsplit("@", 1)
    if ":" not in creds:
        return f"{scheme}://{creds}@{location}"

    user, password = creds.split(":", 1)
    if urllib.parse.unquote(password) != password:
        # Already percent-encoded; "+" is a literal character here, not a space.
        return f"{scheme}://{user}:{password}@{location}"
    return f"{scheme}://{user}:{urllib.parse.quote(password, safe='')}@{location}"


def _build_database_url() -> str:
    raw_url = os.getenv("DATABASE_URL")
    if raw_url:
        return _normalize_database_url(raw_url)

    user = os.getenv("POSTGRES_USER", "postgres")
    password = urllib.parse.quote(os.getenv("POSTGRES_PASSWORD", ""), safe="")
    host = os.getenv("POSTGRES_HOST", "localhost")
    port = os.getenv("POSTGRES_PORT", "5432")
    db = os.getenv("POSTGRES_DB", "codeplay")
    return f"{ASYNC_DRIVER}://{user}:{password}@{host}:{port}/{db}"


DATABASE_URL = _build_database_url()


def create_async_engine(url: str = DATABASE_URL) -> AsyncEngine:
    """
    Creates and returns a new SQLAlchemy AsyncEngine instance.
    """
    location = url.split("@")[-1] if "@" in url else "local"
    logger.debug("Creating async engine for %s", location)
    return _create_async_engine(
        url,
        echo=False,
        pool_pre_ping=False,
        # Connection pooling is left to the external pooler (PgBouncer).
        poolclass=NullPool,
        # Prepared statements break behind transaction poolers.
        connect_args={"prepare_threshold": None},
    )


engine = create_async_engine()

# async with sessionmaker() as session:
sessionmaker = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
    autoflush=False,
)
