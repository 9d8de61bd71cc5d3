import pytest

from ujala_news.news.models import NewsArticle
from ujala_news.news.routes import slug_search_term
from ujala_news.news.share import absolute_url, share_context


def article(**fields) -> NewsArticle:
    fields.setdefault("title", "Holi Milan at Town Hall")
    fields.setdefault("slug", "holi-milan-at-town-hall")
    fields.setdefault("description", "Colours and sweets")
    fields.setdefault("content", "Long body")
    return NewsArticle(**fields)


class TestAbsoluteUrl:
    def test_relative_path(self):
        assert (
            absolute_url("https://api.moradabadujala.in", "/uploads/a.jpg")
            == "https://api.moradabadujala.in/uploads/a.jpg"
        )

    def test_missing_leading_slash(self):
        assert absolute_url("http://x", "uploads/a.jpg") == "http://x/uploads/a.jpg"

    def test_absolute_passes_through(self):
        assert absolute_url("http://x", "https://cdn.in/a.jpg") == "https://cdn.in/a.jpg"

    def test_empty(self):
        assert absolute_url("http://x", None) == ""


class TestShareContext:
    def test_image_story(self, settings):
        ctx = share_context(
            article(image_url="/uploads/cover.jpg"), settings, "http://testserver"
        )

        assert ctx["title"] == "Holi Milan at Town Hall"
        assert ctx["page_url"] == "http://testserver/news/holi-milan-at-town-hall"
        assert ctx["image"] == "http://testserver/uploads/cover.jpg"
        assert ctx["is_video"] is False

    def test_configured_urls_win(self, settings):
        settings.SERVER_URL = "https://api.moradabadujala.in/"
        settings.FRONTEND_URL = "https://moradabadujala.in"
        ctx = share_context(
            article(video_path="/uploads/clip.mp4"), settings, "http://testserver"
        )

        assert ctx["page_url"] == "https://moradabadujala.in/news/holi-milan-at-town-hall"
        assert ctx["video"] == "https://api.moradabadujala.in/uploads/clip.mp4"
        assert ctx["is_video"] is True

    def test_description_falls_back_to_content(self, settings):
        ctx = share_context(article(description=""), settings, "http://testserver")
        assert ctx["description"] == "Long body"


@pytest.mark.parametrize(
    ("slug", "term"),
    [
        ("road-accident-in-moradabad-3-injured", "road accident moradabad injured"),
        ("a-to-z-of-it", ""),
        ("one-two-three-four-five-six", "one two three four"),
        ("मुरादाबाद-व-बारिश", "मुरादाबाद बारिश"),
        ("item-1718000000000-42", "item"),
    ],
)
def test_slug_search_term(slug, term):
    assert slug_search_term(slug) == term
