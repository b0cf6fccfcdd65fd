"""Base repository: primary-key lookup, create, and guarded status updates."""

from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.database import Base


class BaseRepository[ModelType: Base]:
    """Base repository with get_orm_by_id, create, create_many and update_where.

    Subclasses map ORM rows to application DTOs; ORM instances do not leave
    the repository layer.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def get_orm_by_id(
        self, entity_id: str, *, fresh: bool = False
    ) -> ModelType | None:
        """Return a single record by primary key, or None.

        With fresh=True, attributes of an instance already in the identity map
        are overwritten with the row as currently visible to the transaction.
        """
        model: Any = self.model
        stmt = select(self.model).where(model.id == entity_id)
        if fresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, obj: ModelType) -> ModelType:
        """Persist a new record and load server defaults."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def create_many(self, objs: list[ModelType]) -> list[ModelType]:
        """Persist several new records in one flush."""
        self.db.add_all(objs)
        await self.db.flush()
        for obj in objs:
            await self.db.refresh(obj)
        return objs

    async def update_where(
        self, entity_id: str, conditions: list[Any], values: dict[str, Any]
    ) -> ModelType | None:
        """Update one row only if conditions still hold (optimistic guard).

        Returns the refreshed instance when exactly one row was updated;
        None if another transaction changed the row first.
        """
        model: Any = self.model
        stmt = (
            update(self.model)
            .where(model.id == entity_id, *conditions)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if result.rowcount != 1:
            return None
        return await self.get_orm_by_id(entity_id, fresh=True)
