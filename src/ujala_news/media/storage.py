"""File storage for uploaded article media."""

from __future__ import annotations

import asyncio
import logging
import random
import time
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath

logger = logging.getLogger(__name__)


class FileStore(ABC):
    """
    Interface for stores that hold uploaded media addressed by URL path.

    Examples:
        >>> class MemoryStore(FileStore):
        ...     async def put(self, filename, data): return "/uploads/x.jpg"
        ...     def delete(self, url_path): return True
    """

    @abstractmethod
    async def put(self, filename: str, data: bytes) -> str:
        """Store `data` and return the public URL path for it."""
        ...

    @abstractmethod
    def delete(self, url_path: str) -> bool:
        """
        Remove the file behind `url_path`.

        Returns False when nothing was there. Any other failure is raised.
        Blocking; callers run it off the event loop.
        """
        ...


class LocalFileStore(FileStore):
    """
    Stores uploads on the local disk under ``<root>/<url_prefix>``.

    Example:
        >>> store = LocalFileStore("public", "/uploads")
        >>> await store.put("photo.jpg", b"...")
        '/uploads/1718000000000-123456789.jpg'
    """

    def __init__(self, root: str | Path, url_prefix: str = "/uploads"):
        self.root = Path(root).resolve()
        self.url_prefix = "/" + url_prefix.strip("/")
        self.upload_dir = self.root / self.url_prefix.lstrip("/")

    def _unique_name(self, filename: str) -> str:
        ext = PurePosixPath(filename or "").suffix.lower()
        return f"{time.time_ns() // 1_000_000}-{random.randint(0, 10**9)}{ext}"

    def resolve(self, url_path: str) -> Path:
        """Map a URL path such as ``/uploads/a.jpg`` to a file under the root."""
        target = (self.root / url_path.lstrip("/")).resolve()
        if not target.is_relative_to(self.root):
            msg = f"Path {url_path!r} escapes the media root"
            raise ValueError(msg)
        return target

    async def put(self, filename: str, data: bytes) -> str:
        name = self._unique_name(filename)
        target = self.upload_dir / name

        def _write() -> None:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)

        await asyncio.to_thread(_write)
        logger.debug("Stored upload %s (%d bytes)", target, len(data))
        return f"{self.url_prefix}/{name}"

    def delete(self, url_path: str) -> bool:
        try:
            self.resolve(url_path).unlink()
        except FileNotFoundError:
            return False
        return True
