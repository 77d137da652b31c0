"""Base repository: generic CRUD and lifecycle hooks."""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with get_by_id, create, update, delete and hooks.

    Writes flush immediately so constraint violations surface to the caller
    inside the request, not at commit. Subclasses override _on_after_create,
    _on_after_update, _on_before_delete to observe lifecycle events.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def get_by_id(self, entity_id: str) -> ModelType | None:
        """Return a single record by primary key, or None."""
        model: Any = self.model
        result = await self.db.execute(select(self.model).where(model.id == entity_id))
        return result.scalar_one_or_none()

    async def create(self, obj: ModelType) -> ModelType:
        """Persist a new record and run _on_after_create hook."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        await self._on_after_create(obj)
        return obj

    async def update(self, obj: ModelType) -> ModelType:
        """Flush changes on an attached record and run _on_after_update hook."""
        await self.db.flush()
        await self.db.refresh(obj)
        await self._on_after_update(obj)
        return obj

    async def delete(self, obj: ModelType) -> None:
        """Run _on_before_delete hook then delete the record."""
        await self._on_before_delete(obj)
        await self.db.delete(obj)
        await self.db.flush()

    async def _on_after_create(self, obj: ModelType) -> None:
        """Override in subclasses to observe created records."""

    async def _on_after_update(self, obj: ModelType) -> None:
        """Override in subclasses to observe updated records."""

    async def _on_before_delete(self, obj: ModelType) -> None:
        """Override in subclasses to observe deletions."""
