"""Base repository: generic get/create/update, lifecycle hooks and driver error mapping."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.exceptions import TransientException
from app.infrastructure.persistence.database import Base
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

# Driver/pool failures where nothing was committed; safe to retry.
TRANSIENT_DB_ERRORS = (OperationalError, InterfaceError, PoolTimeoutError)


@contextmanager
def transient_db_errors(operation: str) -> Iterator[None]:
    """Re-raise driver and pool failures as TransientException."""
    try:
        yield
    except TRANSIENT_DB_ERRORS as exc:
        logger.warning("Database %s failed: %s", operation, type(exc).__name__)
        raise TransientException() from exc


ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with get_by_id, create, update and hooks.

    Subclasses override _on_after_create and _on_after_update to publish
    change events. LSP: subclasses are substitutable for BaseRepository.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def _get_orm_by_id(self, entity_id: str) -> ModelType | None:
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
        """Flush changes to an attached record and run _on_after_update hook."""
        await self.db.flush()
        await self.db.refresh(obj)
        await self._on_after_update(obj)
        return obj

    async def _on_after_create(self, obj: ModelType) -> None:
        """Override in subclasses to emit events."""

    async def _on_after_update(self, obj: ModelType) -> None:
        """Override in subclasses to emit events."""
