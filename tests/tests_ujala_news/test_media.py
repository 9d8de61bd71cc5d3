import asyncio

import pytest

from ujala_news.media.cleanup import MediaCleanupQueue
from ujala_news.media.storage import LocalFileStore

pytestmark = pytest.mark.asyncio


@pytest.fixture
def store(tmp_path):
    return LocalFileStore(tmp_path / "public", "/uploads")


class TestLocalFileStore:
    async def test_put_returns_url_path(self, store):
        url = await store.put("Photo.PNG", b"png-bytes")

        assert url.startswith("/uploads/")
        assert url.endswith(".png")
        assert store.resolve(url).read_bytes() == b"png-bytes"

    async def test_names_are_unique(self, store):
        first = await store.put("a.jpg", b"1")
        second = await store.put("a.jpg", b"2")
        assert first != second

    async def test_delete(self, store):
        url = await store.put("a.jpg", b"1")
        assert store.delete(url) is True
        assert store.delete(url) is False

    async def test_traversal_rejected(self, store):
        with pytest.raises(ValueError, match="escapes the media root"):
            store.resolve("/../outside.txt")


class TestMediaCleanupQueue:
    async def test_lifecycle(self, store):
        queue = MediaCleanupQueue(store)
        assert queue.running is False

        await queue.start()
        assert queue.running is True

        await queue.shutdown()
        assert queue.running is False

    async def test_submit_without_start_raises_error(self, store):
        queue = MediaCleanupQueue(store)
        with pytest.raises(RuntimeError, match="not running"):
            queue.submit(["/uploads/a.jpg"])

    async def test_removes_files(self, store):
        queue = MediaCleanupQueue(store)
        await queue.start()
        url = await store.put("a.jpg", b"1")

        result = await queue.submit([url, None, ""])

        assert result.paths == [url]
        assert result.removed == [url]
        assert result.success is True
        assert result.duration.total_seconds() >= 0
        assert not store.resolve(url).exists()
        await queue.shutdown()

    async def test_failures_recorded_not_raised(self, store):
        queue = MediaCleanupQueue(store)
        await queue.start()

        result = await queue.submit(["/../../escape.jpg", "/uploads/missing.jpg"])

        assert result.success is False
        assert "/../../escape.jpg" in result.errors
        assert result.missing == ["/uploads/missing.jpg"]
        await queue.shutdown()

    async def test_drain_and_history(self, store):
        queue = MediaCleanupQueue(store, history_size=2)
        await queue.start()
        for i in range(3):
            queue.submit([f"/uploads/{i}.jpg"])

        await queue.drain()

        assert len(queue.results) == 2
        await queue.shutdown()

    async def test_shutdown_without_wait_cancels(self, store, monkeypatch):
        queue = MediaCleanupQueue(store)
        await queue.start()
        gate = asyncio.Event()

        async def blocked(paths):
            await gate.wait()

        monkeypatch.setattr(queue, "_cleanup", blocked)
        task = queue.submit(["/uploads/a.jpg"])

        await queue.shutdown(wait=False)
        with pytest.raises(asyncio.CancelledError):
            await task
