"""
Article and video persistence over the document store.
"""
import logging
from typing import List, Optional, Type, TypeVar

from pydantic import ValidationError as PydanticValidationError

from membership_service.document_store import JsonDocumentStore
from .models import Article, ArticlePreview, Video, VideoPreview

logger = logging.getLogger(__name__)

ARTICLES_COLLECTION = "articles"
VIDEOS_COLLECTION = "videos"
DEFAULT_LIST_LIMIT = 50

T = TypeVar("T", Article, Video)


class ContentRepository:
    """Read access for the app, write access for seeding."""

    def __init__(self, store: JsonDocumentStore):
        self.store = store

    def _load_all(self, collection: str, model: Type[T]) -> List[T]:
        items = []
        for data in self.store.list(collection):
            doc_id = data.pop("id")
            try:
                items.append(model.from_document(doc_id, data))
            except PydanticValidationError as e:
                logger.error(f"Skipping invalid document {collection}/{doc_id}: {e}")
        items.sort(key=lambda item: item.published_at, reverse=True)
        return items

    def _get(self, collection: str, model: Type[T], doc_id: str) -> Optional[T]:
        if not self.store.is_valid_id(doc_id):
            return None
        data = self.store.get(collection, doc_id)
        if data is None:
            return None
        return model.from_document(doc_id, data)

    def _get_by_slug(self, collection: str, model: Type[T], slug: str) -> Optional[T]:
        data = self.store.find_one(collection, "slug", slug)
        if data is None:
            return None
        return model.from_document(data.pop("id"), data)

    # Articles

    def list_articles(self, limit: int = DEFAULT_LIST_LIMIT) -> List[ArticlePreview]:
        """Newest first."""
        return [a.to_preview() for a in self._load_all(ARTICLES_COLLECTION, Article)[:limit]]

    def get_article_by_id(self, article_id: str) -> Optional[Article]:
        return self._get(ARTICLES_COLLECTION, Article, article_id)

    def get_article_by_slug(self, slug: str) -> Optional[Article]:
        return self._get_by_slug(ARTICLES_COLLECTION, Article, slug)

    def save_article(self, article: Article) -> Article:
        self.store.set(ARTICLES_COLLECTION, article.id, article.to_document())
        return article

    # Videos

    def list_videos(self, limit: int = DEFAULT_LIST_LIMIT) -> List[VideoPreview]:
        """Newest first."""
        return [v.to_preview() for v in self._load_all(VIDEOS_COLLECTION, Video)[:limit]]

    def get_video_by_id(self, video_id: str) -> Optional[Video]:
        return self._get(VIDEOS_COLLECTION, Video, video_id)

    def get_video_by_slug(self, slug: str) -> Optional[Video]:
        return self._get_by_slug(VIDEOS_COLLECTION, Video, slug)

    def save_video(self, video: Video) -> Video:
        self.store.set(VIDEOS_COLLECTION, video.id, video.to_document())
        return video

    def clear(self) -> dict:
        """Delete all content. Returns per-collection removal counts."""
        counts = {
            ARTICLES_COLLECTION: self.store.clear(ARTICLES_COLLECTION),
            VIDEOS_COLLECTION: self.store.clear(VIDEOS_COLLECTION),
        }
        logger.info(f"Cleared content: {counts}")
        return counts
