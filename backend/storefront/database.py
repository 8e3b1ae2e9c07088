"""
Storefront Backend — Database Session Management
==================================================

What:  Async SQLAlchemy engine construction, session factory, and the FastAPI
       session dependency.
How:   The lifespan in main.py loads DatabaseSettings once, calls
       init_database() with them, and stores the engine and session factory on
       `app.state`. Requests obtain a session through get_db_session().
When:  Engine is created at startup (not at import); sessions are per-request.

Nothing here reads the environment: credentials are injected.
"""

from typing import AsyncGenerator, Optional, Tuple

from fastapi import Request
from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from storefront.config import DatabaseSettings, Settings, settings as app_settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models share a single metadata object; tests use it to create the
    catalog tables in an in-memory SQLite database.
    """
    pass


def build_database_url(credentials: DatabaseSettings, driver: str) -> URL:
    """
    Assemble the SQLAlchemy URL from the loaded credential set.

    URL.create() handles quoting of the password, so special characters in
    DB_PASSWORD need no manual escaping.
    """
    return URL.create(
        drivername=driver,
        username=credentials.user,
        password=credentials.password or None,
        host=credentials.host,
        port=credentials.port,
        database=credentials.name,
    )


def init_database(
    credentials: DatabaseSettings,
    config: Optional[Settings] = None,
) -> Tuple[AsyncEngine, async_sessionmaker]:
    """
    Create the async engine and session factory.

    Pool Configuration:
        pool_size / max_overflow: persistent + burst connections (from settings)
        pool_pre_ping:            validates connections before use
        pool_recycle=3600:        recycles connections every hour

    Returns:
        (engine, session_factory)
    """
    config = config or app_settings
    engine = create_async_engine(
        build_database_url(credentials, config.database_driver),
        pool_size=config.db_pool_size,
        max_overflow=config.db_max_overflow,
        pool_pre_ping=config.db_pool_pre_ping,
        pool_recycle=3600,
        echo=config.log_level == "DEBUG",
    )
    # expire_on_commit=False: rows stay readable after the session commits,
    # which the response serializer relies on.
    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return engine, session_factory


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory stored on app.state
        2. Yields it to the route handler
        3. On success: commits; on error: rolls back and re-raises
        4. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/services")
        async def list_services(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    session_factory: async_sessionmaker = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def dispose_engine(engine: Optional[AsyncEngine]) -> None:
    """Close all pooled connections; called from the lifespan on shutdown."""
    if engine is not None:
        await engine.dispose()
