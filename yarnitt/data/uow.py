"""Unit of Work pattern for atomic transactions."""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from yarnitt.application.interfaces import AbstractUnitOfWork
from yarnitt.domain.exceptions import ConflictError, PersistenceError

from .repositories import (
    DailyCounterSequence,
    SqlAlchemyOrderRepository,
    SqlAlchemyProductRepository,
)

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """
    Unit of Work over one SQLAlchemy session (one database transaction).

    Responsibilities:
    1. Manage SQLAlchemy session lifecycle
    2. Atomic commit/rollback of all repository operations
    3. Translate driver errors into domain errors
    4. Lazy initialization of repositories
    """

    def __init__(self, session_factory: async_sessionmaker) -> None:
        """Initialize Unit of Work.

        Args:
            session_factory: SQLAlchemy async session factory
        """
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None
        self._committed = False

        # Lazy-loaded repositories
        self._order_repository: Optional[SqlAlchemyOrderRepository] = None
        self._product_repository: Optional[SqlAlchemyProductRepository] = None
        self._counter_sequence: Optional[DailyCounterSequence] = None

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        """Start transaction scope."""
        self._session = self._session_factory()
        self._committed = False
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Rollback anything not committed, then release the session."""
        try:
            if exc_type is not None or not self._committed:
                await self._session.rollback()
        finally:
            await self._session.close()

        if isinstance(exc_val, SQLAlchemyError):
            logger.error(f"Database error, transaction rolled back: {exc_val}")
            raise PersistenceError(
                "Storage operation failed", details={"cause": type(exc_val).__name__}
            ) from exc_val

    def _require_session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("UnitOfWork not initialized. Use async context manager.")
        return self._session

    @property
    def orders(self) -> SqlAlchemyOrderRepository:
        session = self._require_session()
        if self._order_repository is None:
            self._order_repository = SqlAlchemyOrderRepository(session)
        return self._order_repository

    @property
    def products(self) -> SqlAlchemyProductRepository:
        session = self._require_session()
        if self._product_repository is None:
            self._product_repository = SqlAlchemyProductRepository(session)
        return self._product_repository

    @property
    def counters(self) -> DailyCounterSequence:
        session = self._require_session()
        if self._counter_sequence is None:
            self._counter_sequence = DailyCounterSequence(session)
        return self._counter_sequence

    async def commit(self) -> None:
        """Commit all pending changes."""
        session = self._require_session()
        try:
            await session.commit()
        except IntegrityError as exc:
            raise ConflictError(
                "Concurrent write conflict on commit", details={"cause": type(exc).__name__}
            ) from exc
        except SQLAlchemyError as exc:
            raise PersistenceError(
                "Failed to commit transaction", details={"cause": type(exc).__name__}
            ) from exc
        self._committed = True

    async def rollback(self) -> None:
        """Rollback all pending changes."""
        await self._require_session().rollback()


def create_uow(session_factory: async_sessionmaker) -> SqlAlchemyUnitOfWork:
    """Create a new Unit of Work instance.

    Args:
        session_factory: SQLAlchemy async session factory

    Returns:
        SqlAlchemyUnitOfWork instance
    """
    return SqlAlchemyUnitOfWork(session_factory)
