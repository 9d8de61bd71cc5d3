import logging
from typing import Any, Awaitable, Callable, Final

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.types import ASGIApp

from ujala_news.core.config import UjalaSettings
from ujala_news.db.db import get_session_factory

from .backend import TokenAuthenticationBackend
from .schemas import AnonymousUser

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


def bearer_token(request: Request) -> str:
    header = request.headers.get("Authorization", "")
    if header[: len(BEARER_PREFIX)].lower() != BEARER_PREFIX:
        return ""
    return header[len(BEARER_PREFIX) :].strip()


class BearerAuthenticationMiddleware:
    """
    Resolves the ``Authorization: Bearer`` header into ``request.state.user``.

    Never rejects a request itself; permission dependencies decide what an
    anonymous caller may do.
    """

    def __init__(
        self,
        app: ASGIApp,
        settings: UjalaSettings,
        session_maker: async_sessionmaker[AsyncSession] | None = None,
    ):
        self.app: Final[ASGIApp] = app
        self.backend: Final[TokenAuthenticationBackend] = TokenAuthenticationBackend(
            settings
        )
        self._session_maker = session_maker

    @property
    def session_maker(self) -> async_sessionmaker[AsyncSession]:
        # Resolved lazily: the engine is created in the lifespan, after the
        # middleware stack is built.
        return self._session_maker or get_session_factory()

    async def __call__(
        self,
        scope: dict[str, Any],
        receive: Callable[[], Awaitable[Any]],
        send,
    ) -> Any:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return None
        request = Request(scope)

        request.state.user = AnonymousUser()
        request.state.auth = None

        token = bearer_token(request)
        if token:
            try:
                async with self.session_maker() as db:
                    result = await self.backend.authenticate(db, token)

                if result.success:
                    request.state.user = result.user
                    request.state.auth = result.extra.get("claims")
                elif result.message:
                    logger.debug(
                        "Authentication failed for token ending in ...%s: %s",
                        token[-4:],
                        result.message,
                    )
            except Exception:
                logger.exception(
                    "Authentication middleware encountered an unexpected error"
                )

        return await self.app(scope, receive, send)
