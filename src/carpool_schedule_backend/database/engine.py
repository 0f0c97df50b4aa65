'''
Async engine and session factory.

Both are module globals populated by the app's lifespan, so importing this
module never opens a connection.
'''
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from ..common.config import settings
from ..common.logger import log

engine: AsyncEngine | None = None
AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None

# Only server databases get a sized pool; SQLite keeps its own.
SERVER_POOL_OPTIONS = {
    "pool_size": 5,
    "max_overflow": 10,
    "pool_timeout": 30,
    "pool_pre_ping": True,
}


def _engine_options(url: str) -> dict:
    return {} if url.startswith("sqlite") else dict(SERVER_POOL_OPTIONS)


def create_db_engine_and_session_factory() -> async_sessionmaker[AsyncSession]:
    """Builds the engine for settings.database_url and the matching session factory."""
    global engine, AsyncSessionLocal

    url = settings.database_url
    log.info(f"Creating async engine ({url.split(':', 1)[0]} backend)...")
    try:
        engine = create_async_engine(url, echo=False, **_engine_options(url))
    except Exception as e:
        log.critical(f"Could not create the database engine: {e}", exc_info=True)
        raise

    AsyncSessionLocal = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    log.info("Database engine ready.")
    return AsyncSessionLocal


async def dispose_db_engine() -> None:
    global engine, AsyncSessionLocal
    if engine is not None:
        await engine.dispose()
        log.info("Database engine disposed.")
    engine, AsyncSessionLocal = None, None


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency: one session per request.
    Commits when the request succeeds, rolls back on any exception and
    always closes the session.
    """
    if AsyncSessionLocal is None:
        log.error("get_db_session called before the lifespan created the session factory.")
        raise RuntimeError("Database session factory is not available.")

    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            log.error(f"Rolled back database session: {e}")
            raise
