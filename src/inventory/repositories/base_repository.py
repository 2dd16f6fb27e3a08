"""
CRUD shared by the category and book repositories.

Contract:
  - Statements are SQLAlchemy expressions; user values only ever travel as
    bound parameters.
  - A missing row is reported with the `None` sentinel, never an exception.
  - Store failures (constraint violations, connectivity) propagate unchanged;
    classification happens once, in the workflow (see `exceptions.mapper`).
  - The repository flushes but never commits: the caller owns the unit of work.
"""
import logging
import time
from typing import Generic, Type, TypeVar

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from inventory.database.base import Base
from inventory.exceptions.base import InvalidFieldError
from inventory.validators.model_validators import find_unknown_model_kwargs

ModelType = TypeVar("ModelType", bound=Base)

logger = logging.getLogger(__name__)


class BaseRepository(Generic[ModelType]):
    """
    Async CRUD for one mapped model on a request-scoped session.

    Subclasses pin the model (`BookRepository(db)`) and may override
    `_select()` to add eager loads.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    def _log(self, level: int, event: str, operation: str, **extra) -> None:
        logger.log(level, event, extra={"model": self.model.__name__, "operation": operation, **extra})

    def _check_fields(self, operation: str, kwargs: dict) -> None:
        unknown = sorted(set(find_unknown_model_kwargs(self.model, kwargs)) | ({"id"} & kwargs.keys()))
        if not unknown:
            return
        # expected client mistake; no stack trace
        self._log(logging.INFO, f"repo.{operation}.invalid_fields", operation, invalid_fields=unknown)
        raise InvalidFieldError(
            f"Unknown field(s) for {self.model.__name__}: {', '.join(unknown)}",
            fields=unknown,
        )

    # ------------------------------------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------------------------------------

    def _select(self):
        # populate_existing: always reflect the store, never a stale identity-map copy
        return select(self.model).execution_options(populate_existing=True)

    async def list_all(self) -> list[ModelType]:
        """Every entity, ordered by id."""
        result = await self.db.execute(self._select().order_by(self.model.id))
        entities = list(result.scalars().unique().all())
        self._log(logging.DEBUG, "repo.list.success", "list", count=len(entities))
        return entities

    async def get_by_id(self, entity_id: int) -> ModelType | None:
        result = await self.db.execute(self._select().where(self.model.id == entity_id))
        entity = result.unique().scalar_one_or_none()
        self._log(logging.DEBUG, "repo.get.success", "get", id=entity_id, found=entity is not None)
        return entity

    # ------------------------------------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------------------------------------

    async def create(self, **kwargs) -> ModelType:
        """
        INSERT a new row and return it, reloaded, with its store-assigned id.

        Raises:
            InvalidFieldError: unknown field names (or an explicit id)
            sqlalchemy.exc.IntegrityError: constraint violations, left for the classifier
        """
        # keys only; values may be user data
        self._log(logging.DEBUG, "repo.create.start", "create", provided_keys=sorted(kwargs))
        self._check_fields("create", kwargs)

        started = time.perf_counter()
        pending = self.model(**kwargs)
        self.db.add(pending)
        await self.db.flush()
        created = await self.get_by_id(pending.id)

        self._log(
            logging.INFO,
            "repo.create.success",
            "create",
            id=pending.id,
            duration_ms=int((time.perf_counter() - started) * 1000),
        )
        return created

    async def update(self, entity_id: int, **kwargs) -> ModelType | None:
        """
        Replace the given fields in a single UPDATE.

        Returns the reloaded entity, or None when no row has this id.
        """
        self._check_fields("update", kwargs)
        if not kwargs:
            self._log(logging.WARNING, "repo.update.empty", "update", id=entity_id)
            return await self.get_by_id(entity_id)

        result = await self.db.execute(
            update(self.model)
            .where(self.model.id == entity_id)
            .values(**kwargs)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self._log(logging.INFO, "repo.update.not_found", "update", id=entity_id)
            return None

        self._log(logging.INFO, "repo.update.success", "update", id=entity_id)
        return await self.get_by_id(entity_id)

    async def delete(self, entity_id: int) -> ModelType | None:
        """
        DELETE one row.

        Returns the entity as it was before deletion, or None if there was no
        such row. Raises IntegrityError when other rows still reference it.
        """
        doomed = await self.get_by_id(entity_id)
        if doomed is None:
            self._log(logging.INFO, "repo.delete.not_found", "delete", id=entity_id)
            return None

        result = await self.db.execute(
            delete(self.model)
            .where(self.model.id == entity_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            # removed by someone else between the read and the DELETE
            return None

        self.db.expunge(doomed)
        self._log(logging.INFO, "repo.delete.success", "delete", id=entity_id)
        return doomed
