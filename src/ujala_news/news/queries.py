"""
Read-side queries over articles. None of these change state.

Unapproved Ujala items never leave this module through a public query.
"""

from collections.abc import Sequence

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession

from ujala_news.core.schemas.parameter import PaginationParams

from .models import NewsArticle

DEFAULT_FEATURED_LIMIT = 6


def _published():
    return NewsArticle.objects.filter(is_ujala=True, approved=True)


def _publicly_visible():
    # Items outside the Ujala workflow are always visible.
    return or_(NewsArticle.is_ujala.is_(False), NewsArticle.approved.is_(True))


async def public_ujala(
    db: AsyncSession, pagination: PaginationParams
) -> tuple[Sequence[NewsArticle], int]:
    """
    Approved Ujala items, breaking first, then newest first.

    Returns the requested page and the total count.
    """
    qs = _published()
    total = await qs.count(db)
    items = await (
        qs.order_by("-is_breaking", "-created_at", "-id")
        .offset(pagination.get_offset())
        .limit(pagination.limit)
        .fetch(db)
    )
    return items, total


async def pending_approvals(db: AsyncSession) -> Sequence[NewsArticle]:
    return await (
        NewsArticle.objects.filter(is_ujala=True, approved=False)
        .order_by("-created_at", "-id")
        .fetch(db)
    )


async def approved_news(db: AsyncSession) -> Sequence[NewsArticle]:
    """Approved Ujala items for the management screen, newest first."""
    return await _published().order_by("-created_at", "-id").fetch(db)


async def featured(
    db: AsyncSession, limit: int = DEFAULT_FEATURED_LIMIT
) -> Sequence[NewsArticle]:
    """Featured items, most recently featured first."""
    return await (
        _published()
        .filter(is_featured=True)
        .order_by("-featured_at", "-created_at", "-id")
        .limit(limit)
        .fetch(db)
    )


async def get_public_by_slug(db: AsyncSession, slug: str) -> NewsArticle | None:
    return await NewsArticle.objects.filter(
        _publicly_visible(), slug=slug
    ).first(db)


async def get_public_by_short_id(
    db: AsyncSession, short_id: str
) -> NewsArticle | None:
    return await NewsArticle.objects.filter(
        _publicly_visible(), short_id=short_id
    ).first(db)


async def slug_exists(db: AsyncSession, slug: str) -> bool:
    """True for any stored article with this slug, published or not."""
    return await NewsArticle.objects.filter(slug=slug).exists(db)
