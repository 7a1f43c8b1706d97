"""
Articles and videos served through the quota manager.
"""

from .models import Article, ArticlePreview, Video, VideoPreview
from .repository import ContentRepository
from .services import ContentRenderer, ContentService

__all__ = [
    "Article",
    "ArticlePreview",
    "Video",
    "VideoPreview",
    "ContentRepository",
    "ContentRenderer",
    "ContentService",
]
