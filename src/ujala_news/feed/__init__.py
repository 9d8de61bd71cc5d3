from .client import FeedArticle, NewsFeedService

__all__ = ["FeedArticle", "NewsFeedService"]
