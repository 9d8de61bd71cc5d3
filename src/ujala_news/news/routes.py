import logging
import re
from datetime import datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import HTMLResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ujala_news.accounts.schemas import Principal
from ujala_news.authorization.dependencies import require
from ujala_news.authorization.permissions import Capability
from ujala_news.core.config import UjalaSettings
from ujala_news.core.dependencies import get_settings
from ujala_news.core.exceptions import NotFoundError
from ujala_news.core.schemas.parameter import PaginationParams
from ujala_news.core.schemas.response import ApiResponse, PageInfo
from ujala_news.db.db import get_db
from ujala_news.feed.client import LIVE_SOURCE, FeedArticle, NewsFeedService

from . import queries
from .schemas import (
    ArticleOut,
    ArticleSubmission,
    ArticleUpdate,
    MediaFile,
    SubmissionMedia,
)
from .share import render_share_page
from .workflow import NewsWorkflow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/news", tags=["news"])

DB_SOURCE = "database"
CACHE_SOURCE = "live-cache"
SEARCH_TOKEN_RE = re.compile(r"[A-Za-z]{3,}|[\u0900-\u097F]{3,}")
MAX_SEARCH_TOKENS = 4


def get_workflow(request: Request) -> NewsWorkflow:
    return request.app.state.workflow


def get_feed(request: Request) -> NewsFeedService:
    return request.app.state.feed


def _out(article) -> ArticleOut:
    return ArticleOut.model_validate(article)


def slug_search_term(slug: str) -> str:
    """
    Search term built from a slug's wordy tokens.

    >>> slug_search_term("road-accident-in-moradabad-3-injured")
    'road accident moradabad injured'
    """
    tokens = [t.strip() for t in slug.split("-") if t.strip()]
    good = [t for t in tokens if SEARCH_TOKEN_RE.search(t)]
    return " ".join(good[:MAX_SEARCH_TOKENS]).strip()


class LiveNewsQuery(PaginationParams):
    search: str | None = None
    category: str | None = None


# --- Form parsing ---


async def submission_form(
    title: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    content: Annotated[str | None, Form()] = None,
    author: Annotated[str | None, Form()] = None,
    location: Annotated[str | None, Form()] = None,
    is_event: Annotated[bool, Form(alias="isEvent")] = False,
    event_date: Annotated[datetime | None, Form(alias="eventDate")] = None,
    event_venue: Annotated[str | None, Form(alias="eventVenue")] = None,
    tags: Annotated[list[str] | None, Form()] = None,
) -> ArticleSubmission:
    return ArticleSubmission(
        title=title,
        description=description,
        content=content,
        author=author,
        location=location,
        is_event=is_event,
        event_date=event_date,
        event_venue=event_venue,
        tags=tags or [],
    )


async def update_form(
    title: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    content: Annotated[str | None, Form()] = None,
    author: Annotated[str | None, Form()] = None,
    location: Annotated[str | None, Form()] = None,
    category: Annotated[str | None, Form()] = None,
) -> ArticleUpdate:
    return ArticleUpdate(
        title=title,
        description=description,
        content=content,
        author=author,
        location=location,
        category=category,
    )


async def _read(upload: UploadFile | None) -> MediaFile | None:
    if upload is None or not upload.filename:
        return None
    return MediaFile(filename=upload.filename, data=await upload.read())


async def media_form(
    image: Annotated[UploadFile | None, File()] = None,
    video: Annotated[UploadFile | None, File()] = None,
    gallery: Annotated[list[UploadFile] | None, File()] = None,
) -> SubmissionMedia:
    files = [await _read(f) for f in gallery or []]
    return SubmissionMedia(
        image=await _read(image),
        video=await _read(video),
        gallery=[f for f in files if f is not None],
    )


# --- Live feed ---


@router.get("", response_model_exclude_none=True)
async def live_news(
    query: Annotated[LiveNewsQuery, Query()],
    feed: NewsFeedService = Depends(get_feed),
) -> ApiResponse[list[FeedArticle]]:
    limit = query.limit
    if query.search:
        news = await feed.search_news(query.search, limit)
    elif query.category and query.category != "all":
        news = await feed.fetch_top_headlines(query.category, limit)
    else:
        news = await feed.fetch_top_headlines("india", limit)

    # The provider returns a single batch; page through it locally.
    page = query.current_page
    start = (page - 1) * limit
    return ApiResponse(
        data=news[start : start + limit],
        pagination=PageInfo.build(total=len(news), page=page, limit=limit),
        source=LIVE_SOURCE,
        message="Live news from GNews API",
    )


@router.get("/breaking", response_model_exclude_none=True)
async def breaking_news(
    feed: NewsFeedService = Depends(get_feed),
) -> ApiResponse[list[FeedArticle]]:
    news = await feed.fetch_breaking_news(10)
    return ApiResponse(
        data=news, source=LIVE_SOURCE, message="Live breaking news from GNews"
    )


@router.get("/featured", response_model_exclude_none=True)
async def live_featured(
    feed: NewsFeedService = Depends(get_feed),
) -> ApiResponse[list[FeedArticle]]:
    if not feed.configured:
        logger.warning("No NEWS_API_KEY configured; live featured list is empty")
        return ApiResponse(
            data=[],
            source=LIVE_SOURCE,
            message="No API key configured; returning empty featured list",
        )
    news = await feed.fetch_featured_news(6)
    return ApiResponse(
        data=news,
        source=LIVE_SOURCE,
        message="Live featured news from multiple categories",
    )


@router.get("/trending", response_model_exclude_none=True)
async def trending_news(
    feed: NewsFeedService = Depends(get_feed),
) -> ApiResponse[list[FeedArticle]]:
    news = await feed.fetch_trending()
    return ApiResponse(
        data=news,
        source=LIVE_SOURCE,
        message="Live trending news from popular categories",
    )


@router.post("/cache/clear", response_model_exclude_none=True)
async def clear_cache(feed: NewsFeedService = Depends(get_feed)) -> ApiResponse[None]:
    feed.clear_cache()
    return ApiResponse(message="Cache cleared successfully")


# --- Submissions ---


@router.post("/admin/upload", response_model_exclude_none=True)
async def admin_upload(
    submission: ArticleSubmission = Depends(submission_form),
    media: SubmissionMedia = Depends(media_form),
    user: Principal = Depends(require(Capability.UPLOAD_NEWS)),
    db: AsyncSession = Depends(get_db),
    workflow: NewsWorkflow = Depends(get_workflow),
) -> ApiResponse[ArticleOut]:
    article = await workflow.submit_admin(db, submission, user, media)
    return ApiResponse(
        data=_out(article), message="News uploaded and pending approval"
    )


@router.post("/reporter/upload", response_model_exclude_none=True)
async def reporter_upload(
    submission: ArticleSubmission = Depends(submission_form),
    media: SubmissionMedia = Depends(media_form),
    user: Principal = Depends(require(Capability.SUBMIT_NEWS)),
    db: AsyncSession = Depends(get_db),
    workflow: NewsWorkflow = Depends(get_workflow),
) -> ApiResponse[ArticleOut]:
    article = await workflow.submit_reporter(db, submission, user, media)
    return ApiResponse(
        data=_out(article), message="News submitted and pending approval"
    )


# --- Public, database backed ---


@router.get("/ujala", response_model_exclude_none=True)
async def ujala_listing(
    pagination: Annotated[PaginationParams, Query()],
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[ArticleOut]]:
    items, total = await queries.public_ujala(db, pagination)
    return ApiResponse(
        data=[_out(a) for a in items],
        pagination=PageInfo.build(
            total=total, page=pagination.current_page, limit=pagination.limit
        ),
        source=DB_SOURCE,
    )


@router.get("/featured-db", response_model_exclude_none=True)
async def featured_db(
    limit: Annotated[int, Query(ge=1, le=50)] = queries.DEFAULT_FEATURED_LIMIT,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[ArticleOut]]:
    items = await queries.featured(db, limit)
    return ApiResponse(data=[_out(a) for a in items], source=DB_SOURCE)


@router.get("/share/{slug}", response_class=HTMLResponse)
async def share_page(
    slug: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    settings: UjalaSettings = Depends(get_settings),
):
    article = await queries.get_public_by_slug(db, slug)
    if article is None:
        raise NotFoundError("News not found")
    return render_share_page(request, article, settings)


@router.get("/r/{short_id}", response_model_exclude_none=True)
async def by_short_id(
    short_id: str,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[ArticleOut]:
    article = await queries.get_public_by_short_id(db, short_id)
    if article is None:
        raise NotFoundError("News not found")
    return ApiResponse(data=_out(article), source=DB_SOURCE)


# --- Moderation ---

moderate_news = require(Capability.MODERATE_NEWS)
delete_news = require(Capability.DELETE_NEWS)


@router.get(
    "/superadmin/approval",
    dependencies=[Depends(moderate_news)],
    response_model_exclude_none=True,
)
async def pending_approvals(
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[ArticleOut]]:
    items = await queries.pending_approvals(db)
    return ApiResponse(data=[_out(a) for a in items])


@router.put(
    "/superadmin/approval/{article_id}/approve",
    dependencies=[Depends(moderate_news)],
    response_model_exclude_none=True,
)
async def approve(
    article_id: int,
    db: AsyncSession = Depends(get_db),
    workflow: NewsWorkflow = Depends(get_workflow),
) -> ApiResponse[ArticleOut]:
    article = await workflow.approve(db, article_id)
    return ApiResponse(data=_out(article), message="News approved")


@router.get(
    "/admin/approved-news",
    dependencies=[Depends(moderate_news)],
    response_model_exclude_none=True,
)
async def approved_news(
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[ArticleOut]]:
    items = await queries.approved_news(db)
    return ApiResponse(data=[_out(a) for a in items])


@router.put(
    "/admin/approved-news/{article_id}/feature",
    dependencies=[Depends(moderate_news)],
    response_model_exclude_none=True,
)
async def feature(
    article_id: int,
    db: AsyncSession = Depends(get_db),
    workflow: NewsWorkflow = Depends(get_workflow),
) -> ApiResponse[ArticleOut]:
    article = await workflow.feature(db, article_id)
    return ApiResponse(data=_out(article), message="Marked as featured")


@router.put(
    "/admin/approved-news/{article_id}/unfeature",
    dependencies=[Depends(moderate_news)],
    response_model_exclude_none=True,
)
async def unfeature(
    article_id: int,
    db: AsyncSession = Depends(get_db),
    workflow: NewsWorkflow = Depends(get_workflow),
) -> ApiResponse[ArticleOut]:
    article = await workflow.unfeature(db, article_id)
    return ApiResponse(data=_out(article), message="Removed from featured")


@router.delete(
    "/admin/approved-news/{article_id}",
    dependencies=[Depends(delete_news)],
    response_model_exclude_none=True,
)
async def delete_approved(
    article_id: int,
    db: AsyncSession = Depends(get_db),
    workflow: NewsWorkflow = Depends(get_workflow),
) -> ApiResponse[None]:
    await workflow.delete(db, article_id)
    return ApiResponse(message="Approved news deleted")


@router.put(
    "/{article_id}",
    dependencies=[Depends(require(Capability.EDIT_NEWS))],
    response_model_exclude_none=True,
)
async def update(
    article_id: int,
    changes: ArticleUpdate = Depends(update_form),
    media: SubmissionMedia = Depends(media_form),
    db: AsyncSession = Depends(get_db),
    workflow: NewsWorkflow = Depends(get_workflow),
) -> ApiResponse[ArticleOut]:
    article = await workflow.update(db, article_id, changes, media)
    return ApiResponse(data=_out(article), message="News updated")


@router.delete(
    "/{article_id}",
    dependencies=[Depends(delete_news)],
    response_model_exclude_none=True,
)
async def delete(
    article_id: int,
    db: AsyncSession = Depends(get_db),
    workflow: NewsWorkflow = Depends(get_workflow),
) -> ApiResponse[None]:
    await workflow.delete(db, article_id)
    return ApiResponse(message="News deleted")


# --- Detail. Registered last: the catch-all path shadows everything after it ---


@router.get("/{slug}", response_model_exclude_none=True)
async def detail(
    slug: str,
    db: AsyncSession = Depends(get_db),
    feed: NewsFeedService = Depends(get_feed),
) -> ApiResponse[Any]:
    """Stored article first, then the live cache, then a live search."""
    try:
        article = await queries.get_public_by_slug(db, slug)
    except SQLAlchemyError as e:
        logger.warning("DB lookup failed for slug %r: %s", slug, e)
    else:
        if article is not None:
            return ApiResponse(
                data=_out(article),
                source=DB_SOURCE,
                message="News detail from database",
            )
        if await queries.slug_exists(db, slug):
            # Stored but unapproved: hidden, and never looked up live.
            raise NotFoundError("News not found")

    cached = feed.get_article_by_slug(slug)
    if cached is not None:
        return ApiResponse(
            data=cached, source=CACHE_SOURCE, message="Live article from cache"
        )

    term = slug_search_term(slug)
    if not term or not feed.configured:
        logger.info("Slug %r has no usable search term or feed is disabled", slug)
        raise NotFoundError("News not found")

    results = await feed.search_news(term, 1)
    if not results:
        raise NotFoundError("News not found")
    return ApiResponse(data=results[0], source=LIVE_SOURCE, message="Live news detail")
