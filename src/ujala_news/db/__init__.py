from .db import (
    close_db,
    create_tables,
    get_db,
    get_engine,
    get_session_factory,
    init_db,
)
from .exceptions import (
    DoesNotExistError,
    IntegrityViolationError,
    MultipleObjectsReturnedError,
    UjalaDBError,
)
from .models import Model, TimestampMixin, utcnow

__all__ = [
    "DoesNotExistError",
    "IntegrityViolationError",
    "Model",
    "MultipleObjectsReturnedError",
    "TimestampMixin",
    "UjalaDBError",
    "close_db",
    "create_tables",
    "get_db",
    "get_engine",
    "get_session_factory",
    "init_db",
    "utcnow",
]
