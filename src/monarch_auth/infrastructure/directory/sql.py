"""SQL user directory

Purpose: Resolve a login identifier to an active M_USER record

Reads one row per call; nothing is cached, so every login attempt sees the
failure counter as of that query.

Query:
    SELECT ... FROM M_USER WHERE USER_CODE = :identifier AND USE_FLAG = '1'
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from monarch_auth.config.settings import Settings, get_settings
from monarch_auth.core.auth.exceptions import DirectoryUnavailableError
from monarch_auth.domain.models import UserRecord
from monarch_auth.infrastructure.directory.schema import LOGIN_COLUMNS, m_user

logger = logging.getLogger(__name__)

ACTIVE_FLAG = "1"


def create_directory_engine(settings: Optional[Settings] = None) -> AsyncEngine:
    """Create the async engine for the user directory database.

    Args:
        settings: Settings to read DATABASE_URL from (defaults to global)

    Returns:
        AsyncEngine
    """
    settings = settings or get_settings()
    database_url = settings.database_url

    # Convert postgresql:// to postgresql+asyncpg:// if needed
    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

    return create_async_engine(
        database_url,
        echo=settings.sql_echo,
        pool_pre_ping=True,
        poolclass=NullPool if settings.environment == "test" else None,
    )


class SqlUserDirectory:
    """User directory backed by the M_USER table"""

    def __init__(self, engine: AsyncEngine):
        """Initialize directory

        Args:
            engine: Async SQLAlchemy engine for the back-office database
        """
        self.engine = engine

    async def find_user_by_identifier(self, identifier: str) -> Optional[UserRecord]:
        """Get the active user for a login identifier

        Args:
            identifier: USER_CODE to search for

        Returns:
            UserRecord if an active account exists, None otherwise

        Raises:
            DirectoryUnavailableError: If the database cannot be queried or
                the row holds a non-numeric counter
        """
        if not identifier:
            return None

        stmt = (
            select(*LOGIN_COLUMNS)
            .where(m_user.c.USER_CODE == identifier)
            .where(m_user.c.USE_FLAG == ACTIVE_FLAG)
            .order_by(m_user.c.M_USER_NO)
            .limit(1)
        )

        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(stmt)
                row = result.mappings().first()
        except SQLAlchemyError as e:
            logger.error(f"User directory query failed for {identifier}: {e}")
            raise DirectoryUnavailableError(f"User directory unavailable: {e}") from e

        if row is None:
            logger.info(f"User '{identifier}' not found (or USE_FLAG is not '1')")
            return None

        try:
            user = UserRecord.from_row(row)
        except ValueError as e:
            logger.error(f"Malformed M_USER row for {identifier}: {e}")
            raise DirectoryUnavailableError(f"Malformed user record: {e}") from e

        logger.debug(f"User '{identifier}' found (M_USER_NO: {user.user_no})")
        return user

    async def close(self) -> None:
        """Dispose of the engine and its connections"""
        await self.engine.dispose()
