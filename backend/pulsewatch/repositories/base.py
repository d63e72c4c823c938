"""Shared session handling for repositories."""
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..exceptions import PersistenceFailure
from ..utils.db_utils import retry_on_lock


class Repository:
    """Opens one short-lived session per operation.

    Concurrent check tasks never share a session; every write is committed
    before the operation returns.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self, action: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session:
                yield session
                await retry_on_lock(session.commit)
        except SQLAlchemyError as e:
            raise PersistenceFailure(f"{action} failed: {e}") from e
