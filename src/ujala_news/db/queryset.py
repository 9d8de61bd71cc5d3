from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, Sequence, Type, TypeVar

from sqlalchemy import func, not_, select

from .expressions import apply_lookup, parse_lookup, parse_ordering
from .models import Model

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.sql import ColumnElement, Select


T = TypeVar("T", bound=Model)


class QuerySet(Generic[T]):
    """
    Represents a lazy database query for a specific model type.

    A QuerySet stores a SQLAlchemy `Select` statement and allows query
    conditions to be composed without executing the query immediately.
    Queries are executed only when calling an execution method like `fetch()`,
    `first()`, or `count()`.

    Examples:
        >>> qs = NewsArticle.objects.filter(is_ujala=True, approved=True)

        >>> qs = qs.order_by("-is_breaking", "-created_at").limit(20)
        >>> items = await qs.fetch(db)
    """

    def __init__(self, model: Type[T], stmt: Select):
        self.model: Type[T] = model
        self._stmt: Select = stmt

    def _clone(self, stmt: Select | None = None) -> QuerySet[T]:
        # Each modification returns a new instance to ensure immutability.
        return QuerySet(self.model, stmt if stmt is not None else self._stmt)

    # --- Chainable methods ---

    def filter(self, *conditions: ColumnElement[bool], **lookups: object) -> QuerySet[T]:
        """
        Add WHERE criteria to the query.

        Example:
            >>> NewsArticle.objects.filter(is_ujala=True, views__gt=10)
            # SELECT * FROM news_articles WHERE is_ujala = 1 AND views > 10;
        """
        if not conditions and not lookups:
            return self

        stmt = self._stmt.where(*conditions) if conditions else self._stmt
        for key, value in lookups.items():
            stmt = stmt.where(self._resolve_lookup(key, value))
        return self._clone(stmt)

    def exclude(self, *conditions: ColumnElement[bool], **lookups: object) -> QuerySet[T]:
        """
        Add negative WHERE criteria to the query.

        Example:
            >>> Account.objects.exclude(role=Role.REPORTER)
            # SELECT * FROM accounts WHERE NOT (role = 'reporter');
        """
        if not conditions and not lookups:
            return self

        stmt = self._stmt
        for cond in conditions:
            stmt = stmt.where(not_(cond))
        for key, value in lookups.items():
            stmt = stmt.where(not_(self._resolve_lookup(key, value)))
        return self._clone(stmt)

    def order_by(self, *criterion: str | ColumnElement[Any]) -> QuerySet[T]:
        """
        Add ORDER BY criteria to the query.

        Example:
            >>> NewsArticle.objects.order_by("-featured_at", "-created_at")
            # SELECT * FROM news_articles ORDER BY featured_at DESC, created_at DESC;
        """
        clauses = [
            parse_ordering(self.model, c) if isinstance(c, str) else c
            for c in criterion
        ]
        return self._clone(self._stmt.order_by(*clauses))

    def limit(self, count: int) -> QuerySet[T]:
        return self._clone(self._stmt.limit(count))

    def offset(self, count: int) -> QuerySet[T]:
        return self._clone(self._stmt.offset(count))

    # --- Execution methods ---

    async def fetch(self, db: AsyncSession) -> Sequence[T]:
        """
        Execute query and return results as model instances.

        Example:
            >>> articles = await NewsArticle.objects.all().fetch(db)
            # SELECT * FROM news_articles;
        """
        result = await db.execute(self._stmt)
        return result.scalars().unique().all()

    async def first(self, db: AsyncSession) -> T | None:
        """
        Execute query and return the first result or None.
        """
        result = await db.execute(self._stmt.limit(1))
        return result.scalars().unique().one_or_none()

    async def count(self, db: AsyncSession) -> int:
        """
        Return total record count for the QuerySet, ignoring ordering and limits.

        Example:
            >>> total = await NewsArticle.objects.filter(approved=False).count(db)
            # SELECT count(*) FROM (SELECT * FROM news_articles WHERE ...) AS anon;
        """
        base = self._stmt.order_by(None).limit(None).offset(None)
        count_stmt = select(func.count()).select_from(base.subquery())
        return await db.scalar(count_stmt) or 0

    async def exists(self, db: AsyncSession) -> bool:
        return await self.count(db) > 0

    def _resolve_lookup(self, key: str, value: Any) -> ColumnElement[bool]:
        col, lookup, field_name = parse_lookup(self.model, key)
        if col is None:
            msg = f"Field '{field_name}' not found on model {self.model.__name__}"
            raise ValueError(msg)
        return apply_lookup(col, lookup, value)
