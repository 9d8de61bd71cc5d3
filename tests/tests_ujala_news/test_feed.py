import httpx
import pytest
import pytest_asyncio

from ujala_news.core.exceptions import FeedError, FeedNotConfiguredError
from ujala_news.feed.client import NewsFeedService

pytestmark = pytest.mark.asyncio


def gnews_article(title, source="Amar Ujala"):
    return {
        "title": title,
        "description": f"{title} summary",
        "content": f"{title} full text",
        "url": "https://news.example.in/" + title.lower().replace(" ", "-"),
        "image": None,
        "publishedAt": "2025-01-26T09:00:00Z",
        "source": {"name": source, "url": "https://news.example.in"},
    }


class FakeGNews:
    """Records requests and answers with canned articles per category/term."""

    def __init__(self, status_code=200):
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"errors": ["nope"]})
        label = request.url.params.get("category") or request.url.params.get("q")
        limit = int(request.url.params.get("max", 10))
        articles = [gnews_article(f"{label} story {i}") for i in range(limit)]
        return httpx.Response(200, json={"totalArticles": limit, "articles": articles})


@pytest.fixture
def gnews():
    return FakeGNews()


@pytest.fixture
def feed_settings(settings):
    return settings.model_copy(update={"NEWS_API_KEY": "test-key", "NEWS_CACHE_TTL": 60})


@pytest_asyncio.fixture
async def feed(feed_settings, gnews):
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(gnews), base_url=feed_settings.NEWS_API_BASE_URL
    )
    service = NewsFeedService(feed_settings, client=client)
    yield service
    await service.aclose()


class TestTopHeadlines:
    async def test_category_uses_top_headlines(self, feed, gnews):
        articles = await feed.fetch_top_headlines("sports", 3)

        assert len(articles) == 3
        request = gnews.requests[0]
        assert request.url.path.endswith("/top-headlines")
        assert request.url.params["category"] == "sports"
        assert request.url.params["apikey"] == "test-key"
        assert request.url.params["lang"] == "hi"
        assert request.url.params["country"] == "in"

    async def test_non_category_is_searched(self, feed, gnews):
        articles = await feed.fetch_top_headlines("india", 2)

        assert gnews.requests[0].url.path.endswith("/search")
        assert gnews.requests[0].url.params["q"] == "india"
        assert all(a.category == "india" for a in articles)

    async def test_normalization(self, feed, feed_settings):
        [article] = await feed.fetch_top_headlines("business", 1)

        assert article.title == "business story 0"
        assert article.slug == "business-story-0"
        assert article.source == "Amar Ujala"
        assert article.image_url == feed_settings.DEFAULT_IMAGE_URL
        assert article.published_at is not None
        assert article.is_live is True
        assert "imageUrl" in article.model_dump(by_alias=True)


class TestCache:
    async def test_repeated_requests_hit_cache(self, feed, gnews):
        await feed.fetch_breaking_news(5)
        await feed.fetch_breaking_news(5)
        assert len(gnews.requests) == 1

    async def test_clear_cache(self, feed, gnews):
        await feed.fetch_breaking_news(5)
        feed.clear_cache()
        await feed.fetch_breaking_news(5)
        assert len(gnews.requests) == 2

    async def test_expired_entries_refetched(self, feed, gnews):
        feed.cache_ttl = 0
        await feed.fetch_breaking_news(5)
        await feed.fetch_breaking_news(5)
        assert len(gnews.requests) == 2

    async def test_slug_index(self, feed):
        articles = await feed.search_news("moradabad", 2)

        assert feed.get_article_by_slug(articles[1].slug) == articles[1]
        assert feed.get_article_by_slug("never-seen") is None

        feed.clear_cache()
        assert feed.get_article_by_slug(articles[1].slug) is None

    async def test_expired_entries_are_pruned(self, feed):
        feed.cache_ttl = 0
        for i in range(50):
            articles = await feed.search_news(f"term {i}", 5)

        assert len(feed._cache) == 0
        assert len(feed._by_slug) == 0
        assert feed.get_article_by_slug(articles[0].slug) is None

    async def test_size_caps_evict_oldest(self, feed):
        feed.max_entries = 3
        feed.max_articles = 10
        batches = [await feed.search_news(f"term {i}", 5) for i in range(6)]

        assert len(feed._cache) == 3
        assert len(feed._by_slug) == 10
        assert feed.get_article_by_slug(batches[0][0].slug) is None
        assert feed.get_article_by_slug(batches[-1][0].slug) == batches[-1][0]

    async def test_cap_settings(self, feed_settings):
        capped = feed_settings.model_copy(
            update={"NEWS_CACHE_MAX_ENTRIES": 2, "NEWS_CACHE_MAX_ARTICLES": 4}
        )
        service = NewsFeedService(capped, client=httpx.AsyncClient())
        assert (service.max_entries, service.max_articles) == (2, 4)
        await service.aclose()


class TestComposites:
    async def test_featured_round_robin(self, feed):
        articles = await feed.fetch_featured_news(6)

        assert [a.category for a in articles] == [
            "nation",
            "world",
            "business",
            "technology",
            "sports",
            "nation",
        ]
        assert len({a.slug for a in articles}) == 6

    async def test_trending_mix(self, feed):
        articles = await feed.fetch_trending()
        categories = [a.category for a in articles]

        assert categories.count("sports") == 4
        assert categories.count("entertainment") == 3
        assert categories.count("business") == 3


class TestFailures:
    async def test_not_configured(self, settings):
        service = NewsFeedService(settings)
        try:
            assert service.configured is False
            with pytest.raises(FeedNotConfiguredError, match="NEWS_API_KEY") as exc:
                await service.fetch_breaking_news()
            assert "NEWS_API_KEY" in exc.value.context["hint"]
        finally:
            await service.aclose()

    async def test_upstream_error(self, feed_settings):
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(FakeGNews(status_code=429)),
            base_url=feed_settings.NEWS_API_BASE_URL,
        )
        service = NewsFeedService(feed_settings, client=client)
        try:
            with pytest.raises(FeedError, match="429"):
                await service.search_news("anything")
        finally:
            await service.aclose()

    async def test_unreachable(self, feed_settings):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = httpx.AsyncClient(
            transport=httpx.MockTransport(refuse),
            base_url=feed_settings.NEWS_API_BASE_URL,
        )
        service = NewsFeedService(feed_settings, client=client)
        try:
            with pytest.raises(FeedError, match="unreachable"):
                await service.search_news("anything")
        finally:
            await service.aclose()
