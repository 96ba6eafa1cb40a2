"""Base repository: generic CRUD over master or tenant models."""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import DeclarativeBase

from app.domain.exceptions import ResourceNotFoundException

ModelType = TypeVar("ModelType", bound=DeclarativeBase)


class BaseRepository(Generic[ModelType]):
    """Base repository with get, list, create, apply_changes and delete.

    Works for both declarative bases (master Base, TenantBase); the session
    decides which database is hit. Subclasses expose DTOs, never models.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def _get(self, entity_id: str) -> ModelType | None:
        """Return a single record by primary key, or None."""
        model: Any = self.model
        result = await self.db.execute(select(self.model).where(model.id == entity_id))
        return result.scalar_one_or_none()

    async def _require(self, entity_id: str) -> ModelType:
        obj = await self._get(entity_id)
        if obj is None:
            raise ResourceNotFoundException(self.model.__name__, entity_id)
        return obj

    async def _get_all(self, skip: int = 0, limit: int = 100) -> list[ModelType]:
        result = await self.db.execute(select(self.model).offset(skip).limit(limit))
        return list(result.scalars().all())

    async def _add(self, obj: ModelType) -> ModelType:
        """Persist a new record (flush + refresh so defaults are loaded)."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def _apply_changes(
        self,
        obj: ModelType,
        changes: dict[str, Any],
        aliases: dict[str, str] | None = None,
    ) -> ModelType:
        """Set attributes from changes and flush.

        aliases maps DTO field names to model attribute names (for columns
        such as metadata whose attribute is renamed on the model).
        Unknown names raise ValueError.
        """
        aliases = aliases or {}
        for name, value in changes.items():
            attr = aliases.get(name, name)
            if not hasattr(obj, attr):
                raise ValueError(f"{self.model.__name__} has no field '{name}'")
            setattr(obj, attr, value)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def _delete(self, obj: ModelType) -> None:
        await self.db.delete(obj)
        await self.db.flush()
