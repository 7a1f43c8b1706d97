"""
Quota management for tiered content access.
Tracks which articles and videos each user has opened and enforces
per-tier ceilings on distinct items.
"""

from .models import AccessReason, AccessResult, ContentUsage, UsageStats, UsageRecord
from .manager import QuotaManager
from .usage_store import UsageStore

__all__ = [
    "AccessReason",
    "AccessResult",
    "ContentUsage",
    "UsageStats",
    "UsageRecord",
    "QuotaManager",
    "UsageStore",
]
