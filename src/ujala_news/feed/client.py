"""
Live news from the GNews v4 API.

Responses are cached in memory for ``NEWS_CACHE_TTL`` seconds, and every
article seen is indexed by slug so detail pages can be served from cache.
Both maps are pruned on every store and capped by size, oldest first.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import time
from datetime import datetime
from typing import Any

import httpx
from pydantic import Field

from ujala_news.core.config import UjalaSettings
from ujala_news.core.exceptions import FeedError, FeedNotConfiguredError
from ujala_news.core.schemas.base import CamelModel
from ujala_news.news.identifiers import generate_slug

logger = logging.getLogger(__name__)

GNEWS_CATEGORIES = frozenset(
    {
        "general",
        "world",
        "nation",
        "business",
        "technology",
        "entertainment",
        "sports",
        "science",
        "health",
    }
)
FEATURED_CATEGORIES = ("nation", "world", "business", "technology", "sports")
TRENDING_MIX = (("sports", 4), ("entertainment", 3), ("business", 3))
BREAKING_CATEGORY = "general"
LIVE_SOURCE = "live-api"
CONFIGURE_HINT = (
    "Add your GNews API key as NEWS_API_KEY in the environment or .env file"
)


class FeedArticle(CamelModel):
    """An article from the live feed, shaped like a stored article on the wire."""

    title: str
    slug: str
    description: str = ""
    content: str = ""
    url: str | None = None
    image_url: str | None = None
    source: str | None = None
    author: str | None = None
    category: str | None = None
    published_at: datetime | None = None
    tags: list[str] = Field(default_factory=list)
    is_live: bool = True


class NewsFeedService:
    """
    Thin async client over GNews with a TTL cache.

    Examples:
        >>> feed = NewsFeedService(settings)
        >>> articles = await feed.fetch_top_headlines("sports", 5)
        >>> feed.get_article_by_slug(articles[0].slug)
        >>> await feed.aclose()
    """

    def __init__(
        self,
        settings: UjalaSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self.api_key = settings.NEWS_API_KEY
        self.cache_ttl = settings.NEWS_CACHE_TTL
        self.max_entries = settings.NEWS_CACHE_MAX_ENTRIES
        self.max_articles = settings.NEWS_CACHE_MAX_ARTICLES
        self._client = client or httpx.AsyncClient(
            base_url=settings.NEWS_API_BASE_URL,
            timeout=settings.NEWS_API_TIMEOUT,
        )
        self._cache: dict[tuple[Any, ...], tuple[float, list[FeedArticle]]] = {}
        self._by_slug: dict[str, tuple[float, FeedArticle]] = {}

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def aclose(self) -> None:
        await self._client.aclose()

    # --- Cache ---

    def _cached(self, key: tuple[Any, ...]) -> list[FeedArticle] | None:
        entry = self._cache.get(key)
        if entry is None:
            return None
        expires_at, articles = entry
        if time.monotonic() >= expires_at:
            del self._cache[key]
            return None
        return articles

    def _prune(self, now: float) -> None:
        """Drop expired entries, then the oldest ones beyond the size caps."""
        for cache in (self._cache, self._by_slug):
            for key in [k for k, (expires_at, _) in cache.items() if now >= expires_at]:
                del cache[key]
        # Dicts keep insertion order, so the first keys are the oldest.
        while len(self._cache) > self.max_entries:
            del self._cache[next(iter(self._cache))]
        while len(self._by_slug) > self.max_articles:
            del self._by_slug[next(iter(self._by_slug))]

    def _store(self, key: tuple[Any, ...], articles: list[FeedArticle]) -> None:
        now = time.monotonic()
        expires_at = now + self.cache_ttl
        self._cache.pop(key, None)
        self._cache[key] = (expires_at, articles)
        for article in articles:
            self._by_slug.pop(article.slug, None)
            self._by_slug[article.slug] = (expires_at, article)
        self._prune(now)

    def clear_cache(self) -> None:
        self._cache.clear()
        self._by_slug.clear()
        logger.info("Live news cache cleared")

    def get_article_by_slug(self, slug: str) -> FeedArticle | None:
        entry = self._by_slug.get(slug)
        if entry is None:
            return None
        expires_at, article = entry
        if time.monotonic() >= expires_at:
            del self._by_slug[slug]
            return None
        return article

    # --- Upstream ---

    def _normalize(self, raw: dict[str, Any], category: str | None) -> FeedArticle:
        source = raw.get("source") or {}
        title = (raw.get("title") or "").strip()
        return FeedArticle(
            title=title,
            slug=generate_slug(title),
            description=raw.get("description") or "",
            content=raw.get("content") or raw.get("description") or "",
            url=raw.get("url"),
            image_url=raw.get("image") or self.settings.DEFAULT_IMAGE_URL,
            source=source.get("name"),
            author=source.get("name"),
            category=category,
            published_at=raw.get("publishedAt"),
        )

    async def _get(
        self, endpoint: str, params: dict[str, Any], category: str | None
    ) -> list[FeedArticle]:
        if not self.configured:
            raise FeedNotConfiguredError(hint=CONFIGURE_HINT)

        key = (endpoint, tuple(sorted(params.items())))
        cached = self._cached(key)
        if cached is not None:
            return cached

        query = {
            "lang": self.settings.NEWS_API_LANG,
            "country": self.settings.NEWS_API_COUNTRY,
            **params,
            "apikey": self.api_key,
        }
        try:
            response = await self._client.get(f"/{endpoint}", params=query)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning("GNews %s returned %s", endpoint, e.response.status_code)
            msg = f"Live news provider returned {e.response.status_code}"
            raise FeedError(msg) from e
        except httpx.HTTPError as e:
            logger.warning("GNews %s request failed: %s", endpoint, e)
            raise FeedError(f"Live news provider unreachable: {e}") from e
        except ValueError as e:
            raise FeedError("Live news provider returned invalid JSON") from e

        articles = [
            self._normalize(raw, category)
            for raw in payload.get("articles") or []
            if raw.get("title")
        ]
        self._store(key, articles)
        return articles

    async def fetch_top_headlines(
        self, category: str = BREAKING_CATEGORY, limit: int = 10
    ) -> list[FeedArticle]:
        """
        Top headlines for a GNews category.

        Anything that is not a GNews category (``"india"``, a city) is
        searched for as a keyword instead.
        """
        category = (category or BREAKING_CATEGORY).lower()
        if category not in GNEWS_CATEGORIES:
            return await self.search_news(category, limit, category=category)
        return await self._get(
            "top-headlines", {"category": category, "max": limit}, category
        )

    async def search_news(
        self, term: str, limit: int = 10, *, category: str | None = None
    ) -> list[FeedArticle]:
        return await self._get("search", {"q": term, "max": limit}, category)

    async def fetch_breaking_news(self, limit: int = 10) -> list[FeedArticle]:
        return await self.fetch_top_headlines(BREAKING_CATEGORY, limit)

    async def fetch_featured_news(self, limit: int = 6) -> list[FeedArticle]:
        """One article per category in turn until `limit` is reached."""
        batches = await asyncio.gather(
            *(self.fetch_top_headlines(c, limit) for c in FEATURED_CATEGORIES)
        )
        featured: list[FeedArticle] = []
        seen: set[str] = set()
        for article in itertools.chain.from_iterable(
            itertools.zip_longest(*batches)
        ):
            if article is None or article.slug in seen:
                continue
            seen.add(article.slug)
            featured.append(article)
            if len(featured) >= limit:
                break
        return featured

    async def fetch_trending(self) -> list[FeedArticle]:
        batches = await asyncio.gather(
            *(self.fetch_top_headlines(c, n) for c, n in TRENDING_MIX)
        )
        return list(itertools.chain.from_iterable(batches))
