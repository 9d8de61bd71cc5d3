from ujala_news.core.exceptions import DuplicateError, NotFoundError, UjalaError


class UjalaDBError(UjalaError):
    """Base class for storage-layer failures."""


class DoesNotExistError(UjalaDBError, NotFoundError):
    """Raised when a single object was expected but none was found."""


class MultipleObjectsReturnedError(UjalaDBError, ValueError):
    """Raised when a single object was expected but multiple were found."""


class IntegrityViolationError(UjalaDBError, DuplicateError):
    """Raised when a write breaks a unique constraint; the session is rolled back."""
