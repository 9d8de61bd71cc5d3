from datetime import datetime

from pydantic import BaseModel, Field

from ujala_news.core.schemas.base import CamelModel


class ArticleOut(CamelModel):
    """Wire representation of a stored article."""

    id: int
    title: str
    slug: str
    short_id: str | None = None
    description: str
    content: str
    category: str
    image_url: str | None = None
    image_path: str | None = None
    video_url: str | None = None
    video_path: str | None = None
    gallery_images: list[str] = Field(default_factory=list)
    location: str | None = None
    reporter_id: int | None = None
    author: str | None = None
    is_ujala: bool = False
    is_gallery: bool = False
    is_event: bool = False
    event_date: datetime | None = None
    event_venue: str | None = None
    approved: bool = True
    is_breaking: bool = False
    is_featured: bool = False
    featured_at: datetime | None = None
    views: int = 0
    tags: list[str] = Field(default_factory=list)
    source: str | None = None
    created_at: datetime
    updated_at: datetime | None = None


class ArticleSubmission(BaseModel):
    """Fields a submitter may provide. Required fields are checked by the workflow."""

    title: str | None = None
    description: str | None = None
    content: str | None = None
    author: str | None = None
    location: str | None = None
    is_event: bool = False
    event_date: datetime | None = None
    event_venue: str | None = None
    tags: list[str] = Field(default_factory=list)


class ArticleUpdate(BaseModel):
    """Partial edit; empty values leave the stored field alone."""

    title: str | None = None
    description: str | None = None
    content: str | None = None
    author: str | None = None
    location: str | None = None
    category: str | None = None


class MediaFile(BaseModel):
    filename: str
    data: bytes


class SubmissionMedia(BaseModel):
    image: MediaFile | None = None
    video: MediaFile | None = None
    gallery: list[MediaFile] = Field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.image or self.video or self.gallery)
