from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from .engine import sessionmaker


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; uncommitted work is rolled back when the handler fails."""
    async with sessionmaker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
