import logging
import time
import uuid
from typing import Any, Awaitable, Callable, Final

from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message

from .logging import bind_request_id, unbind_request_id

logger = logging.getLogger("ujala_news.request")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware:
    """
    Tags every HTTP request with a request id and logs its outcome.

    An incoming ``X-Request-ID`` is reused, otherwise one is generated; the
    id is echoed on the response.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        request_id: bool = True,
        timing: bool = True,
    ):
        self.app: Final[ASGIApp] = app
        self.request_id = request_id
        self.timing = timing

    async def __call__(
        self,
        scope: dict[str, Any],
        receive: Callable[[], Awaitable[Any]],
        send,
    ) -> Any:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return None

        headers = dict(scope.get("headers") or [])
        incoming = headers.get(REQUEST_ID_HEADER.lower().encode("latin-1"), b"")
        cid = incoming.decode("latin-1") or uuid.uuid4().hex[:16]
        token = bind_request_id(cid) if self.request_id else None
        status_code = 500
        started = time.perf_counter()

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                if self.request_id:
                    MutableHeaders(scope=message)[REQUEST_ID_HEADER] = cid
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            if self.timing:
                logger.info(
                    "%s %s -> %s (%.1f ms)",
                    scope["method"],
                    scope["path"],
                    status_code,
                    (time.perf_counter() - started) * 1000,
                )
            if token is not None:
                unbind_request_id(token)
        return None
