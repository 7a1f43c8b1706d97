"""
User accounts: stored records, public profiles and tier administration.
"""

from .models import AuthProvider, PublicUser, UserRecord
from .repository import UserRepository

__all__ = ["AuthProvider", "PublicUser", "UserRecord", "UserRepository"]
