"""
Content services: quota-gated article and video retrieval.
"""
import logging

import markdown

from membership_service.membership import ContentType
from portal.errors import ArticleNotFoundError, QuotaExceededError, VideoNotFoundError
from portal.quota.manager import QuotaManager
from .models import Article, ArticleListResult, Video, VideoListResult
from .repository import DEFAULT_LIST_LIMIT, ContentRepository

logger = logging.getLogger(__name__)


class ContentRenderer:
    """Service for rendering article bodies."""

    def render_markdown(self, md_text: str) -> str:
        """Convert Markdown → HTML (GitHub-flavoured-ish)."""
        return markdown.markdown(
            md_text or "",
            extensions=[
                "fenced_code",
                "tables",
                "codehilite",
                "toc",
                "attr_list",
            ],
        )

    def render_article(self, article: Article) -> dict:
        data = article.to_dict()
        data["contentHtml"] = self.render_markdown(article.content)
        return data


class ContentService:
    """
    Serves content through the quota manager.

    Detail reads follow one sequence: check access, refuse if denied, load the
    item, then record the access only when it consumed quota. A missing item
    is never recorded.
    """

    def __init__(self, content_repository: ContentRepository, quota_manager: QuotaManager):
        self.content_repository = content_repository
        self.quota_manager = quota_manager

    def list_articles_for_user(self, user_id: str, limit: int = DEFAULT_LIST_LIMIT) -> ArticleListResult:
        articles = self.content_repository.list_articles(limit)
        usage = self.quota_manager.get_usage_stats(user_id)
        return ArticleListResult(
            articles=articles,
            usage=usage,
            accessed_ids=usage.articles.accessed,
        )

    def list_videos_for_user(self, user_id: str, limit: int = DEFAULT_LIST_LIMIT) -> VideoListResult:
        videos = self.content_repository.list_videos(limit)
        usage = self.quota_manager.get_usage_stats(user_id)
        return VideoListResult(
            videos=videos,
            usage=usage,
            accessed_ids=usage.videos.accessed,
        )

    def _check_or_raise(self, user_id: str, content_type: ContentType, content_id: str):
        access = self.quota_manager.check_access(user_id, content_type, content_id)
        if not access.allowed:
            raise QuotaExceededError(
                current_usage=access.current_usage,
                limit=access.limit.to_json(),
                membership_type=access.membership_type.value,
            )
        return access

    def get_article(self, user_id: str, article_id: str) -> Article:
        """
        Full article for a user.

        Raises:
            QuotaExceededError: new article and the tier ceiling is reached
            ArticleNotFoundError: no such article
        """
        access = self._check_or_raise(user_id, ContentType.ARTICLE, article_id)

        article = self.content_repository.get_article_by_id(article_id)
        if article is None:
            raise ArticleNotFoundError()

        if access.is_new_access:
            self.quota_manager.record_access(user_id, ContentType.ARTICLE, article_id)
        return article

    def get_video(self, user_id: str, video_id: str) -> Video:
        """
        Full video for a user.

        Raises:
            QuotaExceededError: new video and the tier ceiling is reached
            VideoNotFoundError: no such video
        """
        access = self._check_or_raise(user_id, ContentType.VIDEO, video_id)

        video = self.content_repository.get_video_by_id(video_id)
        if video is None:
            raise VideoNotFoundError()

        if access.is_new_access:
            self.quota_manager.record_access(user_id, ContentType.VIDEO, video_id)
        return video
