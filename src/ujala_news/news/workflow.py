"""
Submission and moderation of news articles.

States: submitted (``approved`` false) and approved. Approval is one-way.
Featuring is a separate flag that only approved articles may carry.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from ujala_news.accounts.schemas import Principal
from ujala_news.core.config import UjalaSettings
from ujala_news.core.exceptions import (
    DuplicateError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from ujala_news.db.exceptions import DoesNotExistError, IntegrityViolationError
from ujala_news.db.models import utcnow
from ujala_news.media.cleanup import CleanupResult, MediaCleanupQueue
from ujala_news.media.storage import FileStore

from .models import NewsArticle
from .schemas import ArticleSubmission, ArticleUpdate, SubmissionMedia

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "description", "content")
_UJALA_LIKE_RE = re.compile("ujala", re.IGNORECASE)


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class NewsWorkflow:
    """
    Creates articles and moves them through moderation.

    Branding defaults come from the injected settings; file removal after a
    delete is handed to the cleanup queue and never awaited here.
    """

    def __init__(
        self,
        settings: UjalaSettings,
        cleanup_queue: MediaCleanupQueue,
        file_store: FileStore,
    ) -> None:
        self.settings = settings
        self.cleanup_queue = cleanup_queue
        self.file_store = file_store

    # --- Helpers ---

    def _require_fields(self, submission: ArticleSubmission) -> dict[str, str]:
        values = {f: _clean(getattr(submission, f)) for f in REQUIRED_FIELDS}
        missing = [f for f, v in values.items() if v is None]
        if missing:
            raise ValidationError("Missing required fields", missing=missing)
        return values  # type: ignore[return-value]

    def validate_category(self, category: str) -> str:
        choices = self.settings.CATEGORY_CHOICES
        if choices and category not in choices:
            msg = f"Unknown category '{category}'"
            raise ValidationError(msg, choices=choices)
        return category

    async def _attach_media(
        self, article: NewsArticle, media: SubmissionMedia | None
    ) -> tuple[list[str], list[str]]:
        """
        Store uploads and point the article at them.

        Returns the newly stored paths and the paths they replaced.
        """
        stored: list[str] = []
        replaced: list[str] = []
        if not media:
            return stored, replaced

        if media.image is not None:
            path = await self.file_store.put(media.image.filename, media.image.data)
            stored.append(path)
            if article.image_path:
                replaced.append(article.image_path)
            article.image_path = path
            article.image_url = path
        if media.video is not None:
            path = await self.file_store.put(media.video.filename, media.video.data)
            stored.append(path)
            if article.video_path:
                replaced.append(article.video_path)
            article.video_path = path
            article.video_url = path
        if media.gallery:
            gallery = [
                await self.file_store.put(f.filename, f.data) for f in media.gallery
            ]
            stored.extend(gallery)
            article.gallery_images = [*(article.gallery_images or []), *gallery]
            article.is_gallery = True
        return stored, replaced

    def enqueue_cleanup(
        self, paths: Iterable[str | None]
    ) -> asyncio.Task[CleanupResult] | None:
        wanted = [p for p in paths if p]
        if not wanted:
            return None
        try:
            return self.cleanup_queue.submit(wanted)
        except RuntimeError:
            logger.exception("Media cleanup queue unavailable; leaving %s", wanted)
            return None

    async def _save(
        self,
        db: AsyncSession,
        article: NewsArticle,
        uploaded: Iterable[str] = (),
    ) -> NewsArticle:
        try:
            return await NewsArticle.objects.save(db, article)
        except IntegrityViolationError as e:
            # Nothing references the stored files once the write fails.
            self.enqueue_cleanup(uploaded)
            msg = "An article with the same slug or short id already exists"
            raise DuplicateError(msg) from e

    async def get(self, db: AsyncSession, article_id: int) -> NewsArticle:
        try:
            return await NewsArticle.objects.get_by_pk(db, article_id)
        except DoesNotExistError as e:
            raise NotFoundError("News not found") from e

    # --- Submission ---

    async def _submit(
        self,
        db: AsyncSession,
        submission: ArticleSubmission,
        media: SubmissionMedia | None,
        *,
        author: str,
        category: str,
        reporter_id: int | None = None,
    ) -> NewsArticle:
        fields = self._require_fields(submission)
        article = NewsArticle(
            **fields,
            author=author,
            category=category,
            location=_clean(submission.location) or "",
            is_ujala=True,
            approved=False,
            reporter_id=reporter_id,
            image_url=self.settings.DEFAULT_IMAGE_URL,
            source=self.settings.DEFAULT_SOURCE,
            tags=list(submission.tags),
            gallery_images=[],
        )
        if submission.is_event:
            article.is_event = True
            article.event_date = submission.event_date
            article.event_venue = _clean(submission.event_venue)

        stored, _ = await self._attach_media(article, media)
        article = await self._save(db, article, stored)
        logger.info(
            "Article %s submitted (%s), pending approval", article.id, article.slug
        )
        return article

    async def submit_admin(
        self,
        db: AsyncSession,
        submission: ArticleSubmission,
        principal: Principal,  # noqa: ARG002
        media: SubmissionMedia | None = None,
    ) -> NewsArticle:
        return await self._submit(
            db,
            submission,
            media,
            author=_clean(submission.author) or self.settings.ADMIN_AUTHOR,
            category=self.settings.ADMIN_CATEGORY,
        )

    async def submit_reporter(
        self,
        db: AsyncSession,
        submission: ArticleSubmission,
        principal: Principal,
        media: SubmissionMedia | None = None,
    ) -> NewsArticle:
        author = (
            _clean(submission.author)
            or _clean(principal.name)
            or self.settings.REPORTER_AUTHOR
        )
        return await self._submit(
            db,
            submission,
            media,
            author=author,
            category=self.settings.UJALA_CATEGORY,
            reporter_id=principal.id,
        )

    async def update(
        self,
        db: AsyncSession,
        article_id: int,
        changes: ArticleUpdate,
        media: SubmissionMedia | None = None,
    ) -> NewsArticle:
        """
        Apply a partial edit. A new title regenerates the slug on save.
        """
        article = await self.get(db, article_id)
        for field, value in changes.model_dump().items():
            value = _clean(value)
            if value is None:
                continue
            if field == "category":
                value = self.validate_category(value)
            setattr(article, field, value)

        stored, replaced = await self._attach_media(article, media)
        article = await self._save(db, article, stored)
        self.enqueue_cleanup(replaced)
        logger.info("Article %s updated", article.id)
        return article

    # --- Moderation ---

    async def approve(self, db: AsyncSession, article_id: int) -> NewsArticle:
        """
        Publish an article as a breaking Ujala item.

        Reporter submissions, ujala-like and empty categories are normalized to
        the canonical Ujala category; any other category is kept.
        """
        article = await self.get(db, article_id)
        article.approved = True
        article.is_ujala = True
        category = (article.category or "").strip()
        if (
            not category
            or _UJALA_LIKE_RE.search(category)
            or article.reporter_id is not None
        ):
            article.category = self.settings.UJALA_CATEGORY
        article.is_breaking = True
        article = await self._save(db, article)
        logger.info("Article %s approved", article.id)
        return article

    async def feature(self, db: AsyncSession, article_id: int) -> NewsArticle:
        article = await self.get(db, article_id)
        if not article.approved:
            msg = "Only approved news can be featured"
            raise InvalidTransitionError(msg, id=article_id)
        article.is_featured = True
        article.featured_at = utcnow()
        article = await self._save(db, article)
        logger.info("Article %s featured", article.id)
        return article

    async def unfeature(self, db: AsyncSession, article_id: int) -> NewsArticle:
        article = await self.get(db, article_id)
        article.is_featured = False
        article.featured_at = None
        article = await self._save(db, article)
        logger.info("Article %s removed from featured", article.id)
        return article

    async def delete(self, db: AsyncSession, article_id: int) -> NewsArticle:
        """
        Remove an article and queue removal of its media files.

        Returns the removed article. The cleanup outcome is never reported to
        the caller.
        """
        article = await NewsArticle.objects.delete_by_pk(db, article_id)
        if article is None:
            raise NotFoundError("News not found")
        self.enqueue_cleanup(article.media_paths)
        logger.info("Article %s deleted", article_id)
        return article
