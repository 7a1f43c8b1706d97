"""
User profile and membership services.
"""
import logging

from membership_service.membership import MembershipType
from portal.errors import UserNotFoundError
from portal.quota.manager import QuotaManager
from portal.quota.models import UsageStats
from .models import PublicUser
from .repository import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    """Read-side user operations plus administrative tier changes."""

    def __init__(self, user_repository: UserRepository, quota_manager: QuotaManager):
        self.user_repository = user_repository
        self.quota_manager = quota_manager

    def get_profile(self, user_id: str) -> PublicUser:
        """Public profile of a user; raises UserNotFoundError if absent."""
        user = self.user_repository.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError()
        return user.to_public()

    def get_usage(self, user_id: str) -> UsageStats:
        return self.quota_manager.get_usage_stats(user_id)

    def set_membership(self, user_id: str, membership_type) -> PublicUser:
        """Move a user to another tier. Past usage is kept."""
        tier = MembershipType.parse(membership_type)
        user = self.user_repository.update(user_id, membership_type=tier)
        if user is None:
            raise UserNotFoundError()
        logger.info(f"User {user_id} moved to tier {tier.value}")
        return user.to_public()
