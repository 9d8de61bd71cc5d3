"""
Logging for the Ujala news API.

Every record carries the id of the HTTP request it was emitted under, so a
single submission or moderation call can be followed across the workflow,
the media cleanup queue and the feed client.
"""

import logging
import sys
import time
from contextvars import ContextVar, Token
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .config import UjalaSettings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(request_tag)s%(name)s: %(message)s"
CONSOLE_HANDLER = "ujala-console"
FILE_HANDLER = "ujala-file"

# Libraries that log every request or statement at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "aiosqlite", "multipart", "python_multipart")

request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


class RequestIdFormatter(logging.Formatter):
    """Prefixes records with ``[<request id>]`` and stamps them in UTC."""

    converter = time.gmtime

    def formatTime(self, record, datefmt=None):
        stamp = self.converter(record.created)
        if datefmt:
            return time.strftime(datefmt, stamp)
        return "%s.%03dZ" % (time.strftime("%Y-%m-%dT%H:%M:%S", stamp), record.msecs)

    def format(self, record: logging.LogRecord) -> str:
        rid = request_id.get()
        record.request_tag = f"[{rid}] " if rid else ""
        return super().format(record)


def _replace_handler(target: logging.Logger, handler: logging.Handler) -> None:
    for existing in [h for h in target.handlers if h.name == handler.name]:
        target.removeHandler(existing)
        existing.close()
    target.addHandler(handler)


def configure_logging(settings: "UjalaSettings") -> None:
    """
    Install the console (and optional rotating file) handler on the root logger.

    Safe to call once per app instance: handlers installed by an earlier call
    are swapped out, handlers owned by anyone else are left alone.
    """
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)
    formatter = RequestIdFormatter(LOG_FORMAT)

    console = logging.StreamHandler(sys.stdout)
    console.set_name(CONSOLE_HANDLER)
    console.setFormatter(formatter)
    _replace_handler(root, console)

    if settings.LOG_FILE:
        path = Path(settings.LOG_FILE).resolve()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                path, maxBytes=10_485_760, backupCount=10, encoding="utf-8"
            )
        except OSError as e:
            sys.stderr.write(f"Cannot log to {path}: {e}\n")
        else:
            file_handler.set_name(FILE_HANDLER)
            file_handler.setFormatter(formatter)
            _replace_handler(root, file_handler)

    quiet = logging.DEBUG if settings.DEBUG and level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet)


def bind_request_id(value: str) -> Token:
    return request_id.set(value)


def unbind_request_id(token: Token) -> None:
    request_id.reset(token)
