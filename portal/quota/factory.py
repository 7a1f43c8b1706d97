"""
Factory for creating quota management components.
"""

from membership_service.document_store import JsonDocumentStore
from membership_service.membership import MembershipLimits
from portal.user_management.repository import UserRepository
from .manager import QuotaManager
from .usage_store import UsageStore


def create_quota_module(
    store: JsonDocumentStore,
    user_repository: UserRepository,
    limits: MembershipLimits = None,
) -> dict:
    """
    Create quota management module.

    Args:
        store: Document store holding the ``usage`` collection
        user_repository: Repository used to resolve membership tiers
        limits: Tier -> ceiling table (defaults to the built-in table)

    Returns:
        Dictionary with:
        - manager: QuotaManager instance
        - usage_store: UsageStore instance
        - limits: MembershipLimits in effect
    """
    limits = limits or MembershipLimits.default()
    usage_store = UsageStore(store)

    manager = QuotaManager(
        limits=limits,
        user_repository=user_repository,
        usage_store=usage_store,
    )

    return {
        "manager": manager,
        "usage_store": usage_store,
        "limits": limits,
    }
