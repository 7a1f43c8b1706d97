"""
Core membership library: tiers and ceilings, the JSON document store and
logging setup shared by the portal web app and the admin scripts.
"""

from .membership import (
    MembershipType,
    ContentType,
    Ceiling,
    TierLimits,
    MembershipLimits,
    DEFAULT_MEMBERSHIP_TYPE,
    MEMBERSHIP_NAMES,
)
from .document_store import JsonDocumentStore, DocumentStoreError

__all__ = [
    "MembershipType",
    "ContentType",
    "Ceiling",
    "TierLimits",
    "MembershipLimits",
    "DEFAULT_MEMBERSHIP_TYPE",
    "MEMBERSHIP_NAMES",
    "JsonDocumentStore",
    "DocumentStoreError",
]
