from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from sqlalchemy import func

if TYPE_CHECKING:
    from sqlalchemy.sql import ColumnElement

    from .models import Model


def parse_lookup(model: type[Model], key: str) -> tuple[Any, str, str]:
    """
    Parse a lookup key into (column, operator, field_name).

    Supported format: 'field' or 'field__lookup' (e.g., 'views' or 'views__gt').
    Lookups across relationships are not supported.
    """
    parts = key.split("__")
    if len(parts) > 2:
        msg = (
            f"Unsupported lookup '{key}'. Nested lookups across relationships "
            f"are not supported."
        )
        raise ValueError(msg)

    field_name = parts[0]
    lookup = parts[1] if len(parts) > 1 else "exact"

    col = getattr(model, field_name, None)
    return col, lookup, field_name


def apply_lookup(col: Any, lookup: str, value: Any) -> ColumnElement[bool]:
    """Apply a lookup operator to a SQLAlchemy column."""
    operators: dict[str, Callable[[Any, Any], ColumnElement[bool]]] = {
        "exact": lambda c, v: c.is_(None) if v is None else c == v,
        "iexact": lambda c, v: func.lower(c) == func.lower(v),
        "contains": lambda c, v: c.contains(v),
        "icontains": lambda c, v: func.lower(c).contains(func.lower(v)),
        "gt": lambda c, v: c > v,
        "gte": lambda c, v: c >= v,
        "lt": lambda c, v: c < v,
        "lte": lambda c, v: c <= v,
        "in": lambda c, v: c.in_(v),
        "ne": lambda c, v: c.isnot(None) if v is None else c != v,
        "isnull": lambda c, v: c.is_(None) if v else c.isnot(None),
    }

    if lookup not in operators:
        supported = ", ".join(operators.keys())
        msg = f"Unsupported lookup '{lookup}'. Supported: {supported}"
        raise ValueError(msg)

    return operators[lookup](col, value)


def parse_ordering(model: type[Model], field: str) -> ColumnElement[Any]:
    """
    Turn a '-field' / 'field' string into an ORDER BY clause.

    >>> parse_ordering(NewsArticle, "-created_at")
    """
    descending = field.startswith("-")
    name = field.lstrip("-")
    col = getattr(model, name, None)
    if col is None:
        msg = f"Cannot order by '{name}': not a field of {model.__name__}"
        raise ValueError(msg)
    return col.desc() if descending else col.asc()
