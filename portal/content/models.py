"""
Article and video models.

Stored documents and API payloads both use camelCase keys; attributes are
snake_case.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from portal.quota.models import UsageStats
from portal.user_management.models import utc_now


class ContentModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator("published_at", "created_at", "updated_at", check_fields=False)
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Hand-written documents may omit the offset; timestamps are UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return self.model_dump(mode="json", by_alias=True)


class ArticlePreview(ContentModel):
    """Article fields shown in listings (no body)."""
    id: str
    title: str
    slug: str
    preview: str = Field(description="Short teaser shown on cards")
    cover_image: Optional[str] = None
    author: str
    published_at: datetime


class Article(ArticlePreview):
    """Full article; ``content`` is Markdown."""
    content: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "Article":
        return cls.model_validate({**data, "id": doc_id})

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude={"id"})

    def to_preview(self) -> ArticlePreview:
        return ArticlePreview.model_validate(self.model_dump(include=set(ArticlePreview.model_fields)))


class VideoPreview(ContentModel):
    """Video fields shown in listings (no stream URL)."""
    id: str
    title: str
    slug: str
    description: str
    thumbnail: Optional[str] = None
    duration: int = Field(ge=0, description="Length in seconds")
    author: str
    published_at: datetime


class Video(VideoPreview):
    """Full video including the playable URL."""
    video_url: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "Video":
        return cls.model_validate({**data, "id": doc_id})

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude={"id"})

    def to_preview(self) -> VideoPreview:
        return VideoPreview.model_validate(self.model_dump(include=set(VideoPreview.model_fields)))


@dataclass
class ArticleListResult:
    articles: List[ArticlePreview]
    usage: UsageStats
    accessed_ids: List[str]

    def to_dict(self) -> dict:
        return {
            "articles": [a.to_dict() for a in self.articles],
            "usage": self.usage.to_dict(),
            "accessedIds": list(self.accessed_ids),
        }


@dataclass
class VideoListResult:
    videos: List[VideoPreview]
    usage: UsageStats
    accessed_ids: List[str]

    def to_dict(self) -> dict:
        return {
            "videos": [v.to_dict() for v in self.videos],
            "usage": self.usage.to_dict(),
            "accessedIds": list(self.accessed_ids),
        }
