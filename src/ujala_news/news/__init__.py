from .models import NewsArticle

__all__ = ["NewsArticle"]
