"""Database connection utilities for the Contract Storage API."""

import logging
from typing import Optional

import asyncpg
from asyncpg import Pool
from fastapi import Request

from ..config import Settings
from ..errors.api_errors import ServiceUnavailableError


logger = logging.getLogger(__name__)


class DatabaseManager:
    """Manages the asyncpg connection pool for one application instance."""
    
    def __init__(self, settings: Settings):
        self.pool: Optional[Pool] = None
        self._database_url = settings.database_url
        self._min_size = settings.db_pool_min_size
        self._max_size = settings.db_pool_max_size
        self._command_timeout = settings.db_command_timeout
    
    async def initialize(self) -> None:
        """Initialize the database connection pool."""
        if self.pool is None:
            self.pool = await asyncpg.create_pool(
                self._database_url,
                min_size=self._min_size,
                max_size=self._max_size,
                command_timeout=self._command_timeout
            )
            logger.info("Database connection pool initialized")
    
    async def close(self) -> None:
        """Close the database connection pool."""
        if self.pool:
            await self.pool.close()
            self.pool = None
    
    async def ping(self) -> None:
        """Run a trivial query to verify connectivity."""
        async with self.pool.acquire() as conn:
            await conn.execute("SELECT 1")


def get_db_manager(request: Request) -> DatabaseManager:
    """FastAPI dependency returning the application's database manager."""
    return request.app.state.db_manager


def get_db_pool(request: Request) -> Pool:
    """FastAPI dependency returning the initialized connection pool."""
    db_manager = get_db_manager(request)
    if db_manager.pool is None:
        raise ServiceUnavailableError("Database connection pool is not initialized")
    return db_manager.pool
