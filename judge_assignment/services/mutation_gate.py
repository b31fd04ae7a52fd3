"""
Mutation Gate: serializes every assignment-changing operation.

At most one mutation (bulk assign, reassign, auto-balance, status change)
runs at a time. A second request arriving while one is in flight is
rejected with MutationInProgressError instead of waiting.

The gate owns the transaction boundary: the wrapped block is committed
before the gate is released, and rolled back on any failure, so readers
never observe a half-applied mutation.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from judge_assignment.exceptions import (
    AssignmentEngineError, AssignmentStoreError, MutationInProgressError
)

logger = logging.getLogger(__name__)


class MutationGate:
    """Non-blocking mutex scoped to the assignment domain."""

    def __init__(self):
        self._lock = asyncio.Lock()
        self._running: Optional[str] = None

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @property
    def running(self) -> Optional[str]:
        return self._running

    @asynccontextmanager
    async def hold(self, operation: str) -> AsyncIterator[None]:
        """Acquire the gate without waiting, or fail with MutationInProgressError."""
        if self._lock.locked():
            logger.warning(f"[GATE BUSY] rejected={operation} running={self._running}")
            raise MutationInProgressError(operation, self._running)

        await self._lock.acquire()
        self._running = operation
        try:
            yield
        finally:
            self._running = None
            self._lock.release()

    @asynccontextmanager
    async def transaction(self, db: AsyncSession, operation: str) -> AsyncIterator[AsyncSession]:
        """
        Hold the gate for one atomic unit of work on `db`.

        Commits on success. On any failure the session is rolled back;
        raw database errors are re-raised as AssignmentStoreError.
        """
        async with self.hold(operation):
            try:
                yield db
                await db.commit()
            except AssignmentEngineError:
                await db.rollback()
                raise
            except SQLAlchemyError as e:
                await db.rollback()
                logger.error(f"[DB ERROR] operation={operation} error={e}")
                raise AssignmentStoreError(f"Database error during {operation}") from e
            except BaseException:
                await db.rollback()
                raise


# Process-wide gate shared by every mutating operation
mutation_gate = MutationGate()


def get_mutation_gate() -> MutationGate:
    """Dependency for the shared mutation gate."""
    return mutation_gate
