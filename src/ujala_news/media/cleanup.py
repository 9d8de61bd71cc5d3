"""Asynchronous queue for best-effort removal of media files."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, Field

from .storage import FileStore

logger = logging.getLogger(__name__)


class CleanupResult(BaseModel):
    """Outcome of one cleanup task."""

    paths: list[str]
    removed: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    errors: dict[str, str] = Field(default_factory=dict)
    started_at: datetime
    finished_at: datetime

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def duration(self) -> timedelta:
        return self.finished_at - self.started_at


class MediaCleanupQueue:
    """
    Runs file deletions in the background of the current event loop.

    Callers get the task back and may ignore it; failures are logged and kept
    on the result, never raised to the submitter.

    Examples:
        >>> queue = MediaCleanupQueue(store)
        >>> await queue.start()
        >>> task = queue.submit(["/uploads/a.jpg"])
        >>> result = await task
        >>> await queue.shutdown()
    """

    def __init__(self, store: FileStore, *, history_size: int = 100) -> None:
        self.store = store
        self._tasks: set[asyncio.Task[CleanupResult]] = set()
        self._results: deque[CleanupResult] = deque(maxlen=history_size)
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def results(self) -> list[CleanupResult]:
        """Most recent results, oldest first."""
        return list(self._results)

    async def start(self) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError as r:
            msg = "MediaCleanupQueue must be started inside a running event loop."
            raise RuntimeError(msg) from r
        self._running = True

    async def shutdown(self, *, wait: bool = True) -> None:
        self._running = False
        if wait and self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        else:
            for task in self._tasks:
                task.cancel()

    async def drain(self) -> None:
        """Wait until every task submitted so far has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def submit(self, paths: Iterable[str | None]) -> asyncio.Task[CleanupResult]:
        """
        Schedule removal of `paths` and return immediately.

        Empty entries are skipped.
        """
        if not self._running:
            msg = "Cleanup queue is not running."
            raise RuntimeError(msg)

        wanted = [p for p in paths if p]
        task = asyncio.create_task(self._cleanup(wanted))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _cleanup(self, paths: list[str]) -> CleanupResult:
        started_at = datetime.now(timezone.utc)
        removed: list[str] = []
        missing: list[str] = []
        errors: dict[str, str] = {}

        for path in paths:
            try:
                if await asyncio.to_thread(self.store.delete, path):
                    removed.append(path)
                else:
                    missing.append(path)
            except (OSError, ValueError) as e:
                errors[path] = str(e)
                logger.warning("Failed to remove media file %s: %s", path, e)

        result = CleanupResult(
            paths=paths,
            removed=removed,
            missing=missing,
            errors=errors,
            started_at=started_at,
            finished_at=datetime.now(timezone.utc),
        )
        self._results.append(result)
        if paths:
            logger.debug(
                "Media cleanup finished: %d removed, %d missing, %d failed",
                len(removed),
                len(missing),
                len(errors),
            )
        return result
