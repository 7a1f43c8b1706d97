"""
Session and authentication result models.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from portal.user_management.models import PublicUser, utc_now


class SessionRecord(BaseModel):
    """Session document as stored in the ``sessions`` collection, keyed by token."""
    token: str = Field(description="Opaque session token, also the document id")
    user_id: str = Field(description="Owner of the session")
    expires_at: datetime = Field(description="Expiry instant (UTC)")
    created_at: datetime = Field(default_factory=utc_now)
    user_agent: Optional[str] = Field(default=None, description="User-Agent of the creating request")
    ip_address: Optional[str] = Field(default=None, description="Client address of the creating request")

    @classmethod
    def from_document(cls, token: str, data: Dict[str, Any]) -> "SessionRecord":
        """Convert a stored document into a typed record."""
        return cls.model_validate({**data, "token": token})

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude={"token"}, exclude_none=True)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.expires_at <= (now or utc_now())


@dataclass
class AuthResult:
    """Outcome of a successful login or OAuth callback."""
    user: PublicUser
    session_token: str
    expires_at: datetime

    def to_dict(self) -> dict:
        # The token travels only in the cookie
        return {
            "user": self.user.to_dict(),
            "expiresAt": self.expires_at.isoformat(),
        }


@dataclass
class OAuthProfile:
    """Identity returned by an OAuth provider."""
    provider_id: str
    email: str
    name: Optional[str] = None
    picture: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.email.split("@")[0]
