"""SQLAlchemy unit of work (implements IUnitOfWork)."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession


class SqlAlchemyUnitOfWork:
    """Runs a block in one database transaction on the request session.

    Commits when the block exits normally and rolls back every write when it
    raises. A transaction already opened by autobegin is adopted rather than
    nested.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        if not self.db.in_transaction():
            async with self.db.begin():
                yield
            return
        try:
            yield
        except BaseException:
            await self.db.rollback()
            raise
        await self.db.commit()
