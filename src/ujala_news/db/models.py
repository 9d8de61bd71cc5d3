from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, ClassVar, Self

from sqlalchemy import DateTime
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from .exceptions import DoesNotExistError, MultipleObjectsReturnedError

if TYPE_CHECKING:
    from .manager import ModelManager


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Model(AsyncAttrs, DeclarativeBase):
    """
    Base class for all database models.
    Provides an automatic `objects` manager and an `id` primary key.

    Example:
        >>> class Tag(Model):
        ...     __tablename__ = "tags"
        ...     name: Mapped[str] = mapped_column()
    """

    __abstract__ = True
    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    objects: ClassVar[ModelManager[Self]]  # type: ignore[invalid-type-arguments]

    # Model-specific exception aliases
    DoesNotExist = DoesNotExistError
    MultipleObjectsReturned = MultipleObjectsReturnedError

    def __init_subclass__(cls, **kwargs: Any):
        super().__init_subclass__(**kwargs)
        from .manager import ModelManager

        if not cls.__dict__.get("__abstract__"):
            cls.objects = ModelManager(cls)


class TimestampMixin:
    """
    Mixin that adds `created_at` and `updated_at` fields to a model.

    Timestamps are produced in Python with microsecond precision; SQLite's
    CURRENT_TIMESTAMP only has second resolution, which breaks newest-first
    ordering of rows written in the same second.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=True,
    )
