import re
from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text, event, inspect
from sqlalchemy.orm import Mapped, mapped_column, validates

from ujala_news.core.config import settings
from ujala_news.core.exceptions import ValidationError
from ujala_news.db.models import Model, TimestampMixin

from .identifiers import generate_slug, short_id

_REMOTE_URL_RE = re.compile(r"^https?://", re.IGNORECASE)


class NewsArticle(Model, TimestampMixin):
    """
    A news item, either written in-house or submitted by a reporter.

    ``slug`` follows ``title``; ``short_id`` is fixed once the row is inserted.
    """

    __tablename__ = "news_articles"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    slug: Mapped[str] = mapped_column(
        String(600), unique=True, index=True, nullable=False
    )
    short_id: Mapped[str | None] = mapped_column(
        String(16), unique=True, index=True, nullable=True
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(
        String(100), nullable=False, default=lambda: settings.UJALA_CATEGORY
    )

    image_url: Mapped[str] = mapped_column(
        String(1000), default=lambda: settings.DEFAULT_IMAGE_URL
    )
    image_path: Mapped[str | None] = mapped_column(String(500), nullable=True)
    video_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    video_path: Mapped[str | None] = mapped_column(String(500), nullable=True)
    gallery_images: Mapped[list[str]] = mapped_column(JSON, default=list)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Weak reference to accounts.id; reporters can be deleted independently.
    reporter_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    author: Mapped[str] = mapped_column(
        String(255), default=lambda: settings.DEFAULT_AUTHOR
    )

    is_ujala: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    is_gallery: Mapped[bool] = mapped_column(Boolean, default=False)
    is_event: Mapped[bool] = mapped_column(Boolean, default=False)
    event_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    event_venue: Mapped[str | None] = mapped_column(String(255), nullable=True)

    approved: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    is_breaking: Mapped[bool] = mapped_column(Boolean, default=False)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False)
    featured_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    views: Mapped[int] = mapped_column(Integer, default=0)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    source: Mapped[str] = mapped_column(
        String(255), default=lambda: settings.DEFAULT_SOURCE
    )

    @validates("short_id")
    def _validate_short_id(self, key: str, value: str | None) -> str | None:
        current = self.__dict__.get(key)
        if current and value != current:
            msg = "short_id cannot be changed once assigned"
            raise ValidationError(msg, short_id=current)
        return value

    @property
    def media_paths(self) -> list[str]:
        """Local upload paths owned by this article."""
        paths = [p for p in (self.image_path, self.video_path) if p]
        paths.extend(
            p for p in self.gallery_images or [] if not _REMOTE_URL_RE.match(p)
        )
        return list(dict.fromkeys(paths))

    def __repr__(self) -> str:
        return f"<NewsArticle(id={self.id}, slug='{self.slug}')>"


@event.listens_for(NewsArticle, "before_insert")
def _assign_identifiers_on_insert(mapper, connection, target: NewsArticle) -> None:  # noqa: ARG001
    if not target.short_id:
        target.short_id = short_id()
    target.slug = generate_slug(target.title)


@event.listens_for(NewsArticle, "before_update")
def _refresh_slug_on_title_change(mapper, connection, target: NewsArticle) -> None:  # noqa: ARG001
    if inspect(target).attrs.title.history.has_changes():
        target.slug = generate_slug(target.title)
