from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .exceptions import (
    DoesNotExistError,
    IntegrityViolationError,
    MultipleObjectsReturnedError,
    UjalaDBError,
)
from .models import Model
from .queryset import QuerySet

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.sql import ColumnElement

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Model)


class ModelManager(Generic[T]):
    """
    Entry point for model-level database operations.

    Responsible for creating QuerySets and handling single-record actions.
    Writes commit immediately; a failed write is rolled back so no partial
    state survives.
    """

    def __init__(self, model: type[T]):
        self._model = model

    def _get_queryset(self) -> QuerySet[T]:
        return QuerySet(self._model, select(self._model))

    def all(self) -> QuerySet[T]:
        """
        Return a QuerySet containing all records.
        """
        return self._get_queryset()

    def filter(self, *conditions: ColumnElement[bool], **lookups: object) -> QuerySet[T]:
        """
        Return a filtered QuerySet.

        >>> NewsArticle.objects.filter(is_ujala=True, approved=False)
        """
        return self._get_queryset().filter(*conditions, **lookups)

    def exclude(self, *conditions: ColumnElement[bool], **lookups: object) -> QuerySet[T]:
        return self._get_queryset().exclude(*conditions, **lookups)

    async def get(
        self,
        db: AsyncSession,
        *conditions: ColumnElement[bool],
        **lookups: object,
    ) -> T:
        """
        Retrieve a single object matching the given conditions.

        Raises:
            DoesNotExistError: If no object matches.
            MultipleObjectsReturnedError: If more than one object matches.
        """
        objs = await self.filter(*conditions, **lookups).limit(2).fetch(db)

        if not objs:
            msg = f"{self._model.__name__} matching query does not exist"
            raise DoesNotExistError(msg)
        if len(objs) > 1:
            msg = (
                f"get() returned more than one {self._model.__name__} "
                f"-- it returned {len(objs)}!"
            )
            raise MultipleObjectsReturnedError(msg)

        return objs[0]

    async def get_or_none(
        self,
        db: AsyncSession,
        *conditions: ColumnElement[bool],
        **lookups: object,
    ) -> T | None:
        return await self.filter(*conditions, **lookups).first(db)

    async def get_by_pk(self, db: AsyncSession, pk: int) -> T:
        """
        Retrieve a single object by its primary key.
        """
        instance = await db.get(self._model, pk)
        if instance is None:
            msg = f"{self._model.__name__} with id {pk} not found"
            raise DoesNotExistError(msg)
        return instance

    async def save(self, db: AsyncSession, instance: T) -> T:
        """
        Persist a new or modified instance and return it refreshed.

        Raises:
            IntegrityViolationError: If a unique or not-null constraint fails.
        """
        try:
            db.add(instance)
            await db.commit()
            await db.refresh(instance)
        except IntegrityError as e:
            await db.rollback()
            msg = f"{self._model.__name__} violates a uniqueness constraint"
            logger.info("%s: %s", msg, e.orig)
            raise IntegrityViolationError(msg) from e
        except SQLAlchemyError as e:
            await db.rollback()
            msg = f"Database error while saving {self._model.__name__}: {e}"
            raise UjalaDBError(msg) from e
        return instance

    async def create(self, db: AsyncSession, **fields: Any) -> T:
        """
        Create and persist a new model instance.
        """
        instance: T = self._model(**fields)
        return await self.save(db, instance)

    async def delete(self, db: AsyncSession, instance: T) -> None:
        try:
            await db.delete(instance)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            msg = f"Database error while deleting {self._model.__name__}"
            raise UjalaDBError(msg) from e

    async def delete_by_pk(self, db: AsyncSession, pk: int) -> T | None:
        """
        Delete a single object by primary key and return the removed row.

        Returns None when nothing matched; the caller decides whether that is
        an error.
        """
        removed = await db.get(self._model, pk)
        if removed is None:
            return None
        await self.delete(db, removed)
        return removed
