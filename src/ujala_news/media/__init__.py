from .cleanup import CleanupResult, MediaCleanupQueue
from .storage import FileStore, LocalFileStore

__all__ = ["CleanupResult", "FileStore", "LocalFileStore", "MediaCleanupQueue"]
