"""
Quota manager: decides whether a user may open an article or video.
"""

import logging

from membership_service.membership import (
    ContentType,
    MembershipLimits,
    MembershipType,
)
from portal.errors import UserNotFoundError
from portal.user_management.repository import UserRepository
from .models import AccessReason, AccessResult, ContentUsage, UsageStats
from .usage_store import UsageStore

logger = logging.getLogger(__name__)


class QuotaManager:
    """
    Enforces membership ceilings on distinct content views.

    Rules:
    - Re-opening an item already in the user's accessed set is always allowed
      and costs nothing.
    - A new item is allowed while the accessed set is smaller than the tier
      ceiling for that content type.
    - Unbounded ceilings never deny.

    ``check_access`` and ``record_access`` are separate calls, so two
    concurrent first views of one item can both pass the check before either
    is recorded. The resulting overcount is bounded by the number of
    concurrent requests.
    """

    def __init__(
        self,
        limits: MembershipLimits,
        user_repository: UserRepository,
        usage_store: UsageStore,
    ):
        """
        Initialize QuotaManager.

        Args:
            limits: Tier -> ceiling table
            user_repository: Source of each user's membership tier
            usage_store: Per-user accessed-id sets
        """
        self.limits = limits
        self.user_repository = user_repository
        self.usage_store = usage_store

    def get_user_tier(self, user_id: str) -> MembershipType:
        """
        Look up the user's membership tier.

        Raises:
            UserNotFoundError: if the user does not exist
        """
        user = self.user_repository.find_by_id(user_id)
        if not user:
            raise UserNotFoundError()
        return user.membership_type

    def check_access(self, user_id: str, content_type, content_id: str) -> AccessResult:
        """
        Decide whether the user may open ``content_id``. Pure read.

        Args:
            user_id: User ID
            content_type: ContentType or its string value
            content_id: Article or video ID

        Returns:
            AccessResult with allowed status and reason
        """
        content_type = ContentType.parse(content_type)
        tier = self.get_user_tier(user_id)
        ceiling = self.limits.ceiling(tier, content_type)
        accessed = self.usage_store.get(user_id).accessed(content_type)
        current_usage = len(accessed)

        if str(content_id) in accessed:
            reason = AccessReason.ALREADY_ACCESSED
        elif ceiling.is_reached(current_usage):
            reason = AccessReason.QUOTA_EXCEEDED
        else:
            reason = AccessReason.WITHIN_QUOTA

        logger.info(
            f"Quota check: user={user_id}, type={content_type.value}, id={content_id}, "
            f"tier={tier.value}, usage={current_usage}/{ceiling}, reason={reason.value}"
        )

        return AccessResult(
            allowed=reason != AccessReason.QUOTA_EXCEEDED,
            reason=reason,
            current_usage=current_usage,
            limit=ceiling,
            membership_type=tier,
        )

    def record_access(self, user_id: str, content_type, content_id: str) -> None:
        """
        Add ``content_id`` to the user's accessed set.

        Call only after ``check_access`` returned ``within_quota`` for the same
        item. Recording twice leaves the set unchanged.
        """
        content_type = ContentType.parse(content_type)
        if content_type == ContentType.ARTICLE:
            self.usage_store.add_article_id(user_id, content_id)
        else:
            self.usage_store.add_video_id(user_id, content_id)

    def get_usage_stats(self, user_id: str) -> UsageStats:
        """
        Counts, ceilings and remaining views for both content types.

        Raises:
            UserNotFoundError: if the user does not exist
        """
        tier = self.get_user_tier(user_id)
        usage = self.usage_store.get(user_id)
        tier_limits = self.limits.for_tier(tier)

        return UsageStats(
            articles=self._content_usage(usage.articles_accessed, tier_limits.articles),
            videos=self._content_usage(usage.videos_accessed, tier_limits.videos),
            membership_type=tier,
        )

    @staticmethod
    def _content_usage(accessed, ceiling) -> ContentUsage:
        count = len(accessed)
        return ContentUsage(
            accessed=list(accessed),
            count=count,
            limit=ceiling,
            remaining=ceiling.remaining(count),
        )

    def has_remaining_quota(self, user_id: str, content_type) -> bool:
        """True if the user can still open at least one new item of this type."""
        content_type = ContentType.parse(content_type)
        usage = self.get_usage_stats(user_id).for_content(content_type)
        return usage.is_unlimited or usage.remaining > 0

    # =====================
    # Admin methods
    # =====================

    def reset_usage(self, user_id: str) -> None:
        """Clear the user's accessed sets."""
        self.get_user_tier(user_id)
        self.usage_store.reset(user_id)
