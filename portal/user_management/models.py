"""
User management models and data structures.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from membership_service.membership import MembershipType, DEFAULT_MEMBERSHIP_TYPE


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AuthProvider(str, Enum):
    """How the account authenticates."""
    EMAIL = "email"
    GOOGLE = "google"
    FACEBOOK = "facebook"


class UserRecord(BaseModel):
    """User document as stored in the ``users`` collection."""
    id: str = Field(description="Document id")
    email: str = Field(description="Normalized (lowercase) email address")
    display_name: str = Field(description="Name shown in the UI")
    membership_type: MembershipType = Field(default=DEFAULT_MEMBERSHIP_TYPE, description="Membership tier")
    auth_provider: AuthProvider = Field(default=AuthProvider.EMAIL, description="Registration method")
    password_hash: Optional[str] = Field(default=None, description="bcrypt hash for email accounts")
    google_id: Optional[str] = Field(default=None, description="Linked Google account id")
    facebook_id: Optional[str] = Field(default=None, description="Linked Facebook account id")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "UserRecord":
        """Convert a stored document into a typed record."""
        return cls.model_validate({**data, "id": doc_id})

    def to_document(self) -> Dict[str, Any]:
        """Convert to the stored representation (id is the document key)."""
        return self.model_dump(mode="json", exclude={"id"}, exclude_none=True)

    def to_public(self) -> "PublicUser":
        return PublicUser(
            id=self.id,
            email=self.email,
            display_name=self.display_name,
            membership_type=self.membership_type,
            auth_provider=self.auth_provider,
        )


@dataclass
class PublicUser:
    """User fields that are safe to return to clients."""
    id: str
    email: str
    display_name: str
    membership_type: MembershipType
    auth_provider: AuthProvider

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "email": self.email,
            "displayName": self.display_name,
            "membershipType": self.membership_type.value,
            "membershipName": self.membership_type.display_name,
            "authProvider": self.auth_provider.value,
        }
