"""
Base repository class providing common database operations.

Every method issues exactly one SQL statement on the injected AsyncSession and
never commits: transaction boundaries belong to the service layer
(`services/user_service.py`), which decides when work becomes permanent.

Error policy:
    - create(): storage errors are re-raised unchanged (after rollback) so the
      caller can classify them (unique violation vs anything else).
    - reads / delete: any storage error becomes a sanitized StorageError.
    - "no such row" is never an error: get_by_id() returns None and delete()
      returns False.
"""
import logging
import time
from typing import Any, Generic, Type, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from user_service.database.base import Base
from user_service.exceptions.mapper import db_error_handler, rollback_on_error

# Type variable for the model class
ModelType = TypeVar("ModelType", bound=Base)

logger = logging.getLogger(__name__)


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository providing the CRUD primitives.

    Type Parameters:
        ModelType: The SQLAlchemy model class this repository manages. It must
        have an integer `id` primary key.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Args:
            model: The SQLAlchemy model class (not an instance), used to build queries.
            db: The async database session, injected per request.
        """
        self.model = model
        self.db = db

    # =================================================================================================================
    # Create
    # =================================================================================================================

    async def create(self, **kwargs: Any) -> ModelType:
        """
        INSERT one row and return the entity with its generated id populated.

        flush() sends the INSERT (with RETURNING for the generated key) without
        committing. All other columns are client-supplied, so no refresh() round
        trip is needed.

        Raises:
            SQLAlchemy and OS errors (IntegrityError, OperationalError, ...) unchanged;
            StorageError wrapping any other exception raised while flushing.
        """
        model_name = self.model.__name__
        # keys only, never values (password is one of them)
        logger.debug(
            "repo.create.start",
            extra={"model": model_name, "provided_keys": sorted(kwargs.keys())},
        )

        start = time.perf_counter()
        # unknown keyword arguments raise TypeError here, before any SQL
        entity = self.model(**kwargs)
        self.db.add(entity)
        async with rollback_on_error(self.db, model_name):
            await self.db.flush()

        logger.info(
            "repo.create.success",
            extra={
                "model": model_name,
                "id": getattr(entity, "id", None),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return entity

    # =================================================================================================================
    # Read
    # =================================================================================================================

    async def get_by_id(self, entity_id: int) -> ModelType | None:
        """
        SELECT one row by primary key.

        Returns:
            The entity if found, otherwise None.

        Raises:
            StorageError: If the query itself fails.
        """
        async with db_error_handler(self.db, self.model.__name__, "retrieve"):
            result = await self.db.execute(
                select(self.model).where(self.model.id == entity_id)
            )
            # 0 or 1 rows: the filter is on the primary key
            entity = result.scalar_one_or_none()

        logger.debug(
            "repo.get_by_id",
            extra={"model": self.model.__name__, "id": entity_id, "found": entity is not None},
        )
        return entity

    async def get_all(self) -> list[ModelType]:
        """
        SELECT every row, in whatever order storage returns them.

        Returns:
            A list of model instances (empty if the table is empty).

        Raises:
            StorageError: If the query fails.
        """
        async with db_error_handler(self.db, self.model.__name__, "list"):
            result = await self.db.execute(select(self.model))
            entities = list(result.scalars().all())

        logger.debug(
            "repo.get_all",
            extra={"model": self.model.__name__, "count": len(entities)},
        )
        return entities

    # =================================================================================================================
    # Delete
    # =================================================================================================================

    async def delete(self, entity_id: int) -> bool:
        """
        DELETE by primary key.

        Returns:
            True only if exactly one row was removed. Deleting a missing id is
            not an error; it returns False.

        Raises:
            StorageError: For database errors.
        """
        async with db_error_handler(self.db, self.model.__name__, "delete"):
            result = await self.db.execute(
                delete(self.model).where(self.model.id == entity_id)
            )

        removed = result.rowcount == 1
        if removed:
            logger.debug("repo.delete.success", extra={"model": self.model.__name__, "id": entity_id})
        else:
            logger.info(
                "repo.delete.not_found",
                extra={"model": self.model.__name__, "id": entity_id, "rowcount": result.rowcount},
            )
        return removed
