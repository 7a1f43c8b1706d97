"""
Data models for the content quota system.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from membership_service.membership import Ceiling, ContentType, MembershipType


class AccessReason(Enum):
    """Why an access decision came out the way it did."""
    WITHIN_QUOTA = "within_quota"          # New item, ceiling not yet reached
    ALREADY_ACCESSED = "already_accessed"  # Re-access, never consumes quota
    QUOTA_EXCEEDED = "quota_exceeded"      # New item, ceiling reached


@dataclass
class AccessResult:
    """Result of a quota check. Never persisted."""
    allowed: bool
    reason: AccessReason
    current_usage: int
    limit: Ceiling
    membership_type: MembershipType

    @property
    def is_new_access(self) -> bool:
        """True when the caller should record the access after serving it."""
        return self.reason == AccessReason.WITHIN_QUOTA

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "allowed": self.allowed,
            "reason": self.reason.value,
            "currentUsage": self.current_usage,
            "limit": self.limit.to_json(),
            "isUnlimited": self.limit.is_unbounded,
            "membershipType": self.membership_type.value,
        }


@dataclass
class ContentUsage:
    """Usage figures for one content type."""
    accessed: List[str]
    count: int
    limit: Ceiling
    remaining: Optional[int]  # None when the ceiling is unbounded

    @property
    def is_unlimited(self) -> bool:
        return self.limit.is_unbounded

    def to_dict(self) -> dict:
        return {
            "accessed": list(self.accessed),
            "count": self.count,
            "limit": self.limit.to_json(),
            "remaining": self.remaining,
            "isUnlimited": self.is_unlimited,
        }


@dataclass
class UsageStats:
    """Per-user usage across both content types."""
    articles: ContentUsage
    videos: ContentUsage
    membership_type: MembershipType

    def for_content(self, content_type: ContentType) -> ContentUsage:
        if content_type == ContentType.ARTICLE:
            return self.articles
        return self.videos

    def to_dict(self) -> dict:
        return {
            "articles": self.articles.to_dict(),
            "videos": self.videos.to_dict(),
            "membershipType": self.membership_type.value,
            "membershipName": self.membership_type.display_name,
        }


def _dedupe(ids: List[Any]) -> List[str]:
    seen = set()
    result = []
    for item in ids or []:
        key = str(item)
        if key not in seen:
            seen.add(key)
            result.append(key)
    return result


class UsageRecord(BaseModel):
    """Usage document as stored in the ``usage`` collection, keyed by user id."""
    user_id: str = Field(description="Owner of this record")
    articles_accessed: List[str] = Field(default_factory=list, description="Distinct article ids ever viewed")
    videos_accessed: List[str] = Field(default_factory=list, description="Distinct video ids ever viewed")
    last_updated: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("articles_accessed", "videos_accessed", mode="before")
    @classmethod
    def _unique_ids(cls, value):
        return _dedupe(value)

    @classmethod
    def empty(cls, user_id: str) -> "UsageRecord":
        return cls(user_id=user_id)

    @classmethod
    def from_document(cls, user_id: str, data: Dict[str, Any]) -> "UsageRecord":
        """Convert a stored document into a typed record."""
        return cls.model_validate({**data, "user_id": user_id})

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    def accessed(self, content_type: ContentType) -> List[str]:
        if content_type == ContentType.ARTICLE:
            return self.articles_accessed
        return self.videos_accessed
