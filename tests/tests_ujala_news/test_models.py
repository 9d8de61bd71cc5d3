import pytest

from ujala_news.core.exceptions import ValidationError
from ujala_news.db.exceptions import IntegrityViolationError
from ujala_news.news.identifiers import SHORT_ID_LENGTH
from ujala_news.news.models import NewsArticle

from .factories import make_article


@pytest.mark.asyncio
class TestSlugLifecycle:
    async def test_slug_assigned_on_insert(self, db_session):
        article = await make_article(db_session, "Road Accident in Moradabad: 3 Injured")
        assert article.slug == "road-accident-in-moradabad-3-injured"

    async def test_explicit_slug_is_overridden_by_title(self, db_session):
        article = await make_article(db_session, "Budget 2024", slug="custom")
        assert article.slug == "budget-2024"

    async def test_unusable_title_gets_fallback(self, db_session):
        article = await make_article(db_session, "!!!???")
        assert article.slug.startswith("item-")

    async def test_title_change_regenerates_slug(self, db_session):
        article = await make_article(db_session, "Old Title")
        article.title = "New Title"
        article = await NewsArticle.objects.save(db_session, article)
        assert article.slug == "new-title"

    async def test_other_changes_keep_slug(self, db_session):
        article = await make_article(db_session, "Stable Title")
        article.content = "Rewritten body"
        article.views = 10
        article = await NewsArticle.objects.save(db_session, article)
        assert article.slug == "stable-title"

    async def test_duplicate_slug_rejected(self, db_session):
        await make_article(db_session, "Same Headline")
        with pytest.raises(IntegrityViolationError):
            await make_article(db_session, "Same Headline")
        assert await NewsArticle.objects.all().count(db_session) == 1

    async def test_styled_capitals_collide_with_plain_title(self, db_session):
        article = await make_article(db_session, "𝐁reaking")
        assert article.slug == "breaking"
        with pytest.raises(IntegrityViolationError):
            await make_article(db_session, "breaking")


@pytest.mark.asyncio
class TestShortId:
    async def test_assigned_on_insert(self, db_session):
        article = await make_article(db_session, "Short Id Story")
        assert article.short_id is not None
        assert len(article.short_id) == SHORT_ID_LENGTH

    async def test_explicit_short_id_kept(self, db_session):
        article = await make_article(db_session, "Given Id", short_id="abc123")
        assert article.short_id == "abc123"

    async def test_stable_across_updates(self, db_session):
        article = await make_article(db_session, "Before")
        first_id = article.short_id
        article.title = "After"
        article = await NewsArticle.objects.save(db_session, article)
        assert article.short_id == first_id

    async def test_reassignment_rejected(self, db_session):
        article = await make_article(db_session, "Immutable")
        with pytest.raises(ValidationError, match="cannot be changed"):
            article.short_id = "different1"

    async def test_reassigning_same_value_allowed(self, db_session):
        article = await make_article(db_session, "Same Value")
        article.short_id = article.short_id


@pytest.mark.asyncio
class TestDefaults:
    async def test_branding_defaults(self, db_session, settings):
        article = await make_article(db_session, "Defaults")
        assert article.approved is True
        assert article.is_ujala is False
        assert article.is_featured is False
        assert article.featured_at is None
        assert article.views == 0
        assert article.gallery_images == []
        assert article.tags == []
        assert article.category == settings.UJALA_CATEGORY
        assert article.author == settings.DEFAULT_AUTHOR
        assert article.created_at is not None


class TestMediaPaths:
    def test_collects_local_paths_only(self):
        article = NewsArticle(
            title="Media",
            image_path="/uploads/a.jpg",
            video_path="/uploads/b.mp4",
            gallery_images=[
                "/uploads/c.jpg",
                "https://cdn.example.in/remote.jpg",
                "/uploads/a.jpg",
            ],
        )
        assert article.media_paths == [
            "/uploads/a.jpg",
            "/uploads/b.mp4",
            "/uploads/c.jpg",
        ]

    def test_empty_without_media(self):
        assert NewsArticle(title="Plain").media_paths == []
