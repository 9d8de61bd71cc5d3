"""
Share-preview page for social platforms.

Crawlers read the Open Graph and Twitter tags; browsers are redirected to the
article on the frontend.
"""

import re
from pathlib import Path
from typing import Any

from fastapi import Request
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from ujala_news.core.config import UjalaSettings

from .models import NewsArticle

TEMPLATE_NAME = "share.html"
_ABSOLUTE_URL_RE = re.compile(r"^https?://", re.IGNORECASE)

templates = Jinja2Templates(directory=Path(__file__).parent / "templates")


def absolute_url(origin: str, path: str | None) -> str:
    """
    Resolve an upload path against `origin`; absolute URLs pass through.

    >>> absolute_url("https://api.example.in", "/uploads/a.jpg")
    'https://api.example.in/uploads/a.jpg'
    """
    if not path:
        return ""
    if _ABSOLUTE_URL_RE.match(path):
        return path
    return origin + (path if path.startswith("/") else "/" + path)


def share_context(
    article: NewsArticle, settings: UjalaSettings, request_origin: str
) -> dict[str, Any]:
    origin = (settings.SERVER_URL or request_origin).rstrip("/")
    frontend = (settings.FRONTEND_URL or origin).rstrip("/")
    video_path = article.video_url or article.video_path
    return {
        "title": article.title or "",
        "description": article.description or article.content or "",
        "page_url": f"{frontend}/news/{article.slug}",
        "image": absolute_url(origin, article.image_url or article.image_path),
        "video": absolute_url(origin, video_path),
        "is_video": bool(video_path),
    }


def render_share_page(
    request: Request, article: NewsArticle, settings: UjalaSettings
) -> Response:
    origin = f"{request.url.scheme}://{request.url.netloc}"
    return templates.TemplateResponse(
        request,
        TEMPLATE_NAME,
        share_context(article, settings, origin),
    )
