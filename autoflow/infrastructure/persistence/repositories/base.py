"""Shared repository plumbing: primary-key lookup plus flush-and-refresh writes."""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autoflow.infrastructure.persistence.database import Base


ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Repository over one ORM model.

    Never commits: the caller (request dependency or Execution Store
    primitive) owns the transaction.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def get_by_id(self, entity_id: str) -> ModelType | None:
        model: Any = self.model
        result = await self.db.execute(select(model).where(model.id == entity_id))
        return result.scalar_one_or_none()

    async def create(self, obj: ModelType) -> ModelType:
        """Add and flush so server defaults (timestamps) are loaded."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def update(self, obj: ModelType) -> ModelType:
        """Flush pending attribute changes of obj and reload it."""
        await self.db.flush()
        await self.db.refresh(obj)
        return obj
