"""
Session persistence and lifecycle.
"""
import logging
import secrets
from datetime import timedelta
from typing import Optional, Tuple

from membership_service.document_store import JsonDocumentStore
from portal.user_management.models import UserRecord, utc_now
from portal.user_management.repository import UserRepository
from .models import SessionRecord

logger = logging.getLogger(__name__)

SESSIONS_COLLECTION = "sessions"
SESSION_TOKEN_BYTES = 32


def generate_session_token() -> str:
    """64 hex characters from a CSPRNG."""
    return secrets.token_hex(SESSION_TOKEN_BYTES)


class SessionRepository:
    """Session documents keyed by token."""

    def __init__(self, store: JsonDocumentStore):
        self.store = store

    def create(
        self,
        token: str,
        user_id: str,
        expires_at,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> SessionRecord:
        session = SessionRecord(
            token=token,
            user_id=user_id,
            expires_at=expires_at,
            created_at=utc_now(),
            user_agent=user_agent,
            ip_address=ip_address,
        )
        self.store.set(SESSIONS_COLLECTION, token, session.to_document())
        return session

    def find_by_token(self, token: str) -> Optional[SessionRecord]:
        """Return the session, or None if it is unknown or expired."""
        if not token or not self.store.is_valid_id(token):
            return None
        data = self.store.get(SESSIONS_COLLECTION, token)
        if data is None:
            return None
        session = SessionRecord.from_document(token, data)
        if session.is_expired():
            return None
        return session

    def delete(self, token: str) -> None:
        if token and self.store.is_valid_id(token):
            self.store.delete(SESSIONS_COLLECTION, token)

    def delete_expired(self) -> int:
        """Remove every expired session. Returns how many were removed."""
        now = utc_now()
        removed = 0
        with self.store.transaction():
            for doc in self.store.list(SESSIONS_COLLECTION):
                session = SessionRecord.from_document(doc.pop("id"), doc)
                if session.is_expired(now):
                    self.store.delete(SESSIONS_COLLECTION, session.token)
                    removed += 1
        return removed

    def delete_user_sessions(self, user_id: str) -> int:
        """Remove every session belonging to ``user_id``."""
        removed = 0
        with self.store.transaction():
            for doc in self.store.find_all(SESSIONS_COLLECTION, "user_id", user_id):
                self.store.delete(SESSIONS_COLLECTION, doc["id"])
                removed += 1
        return removed


class SessionService:
    """Creates, validates and invalidates login sessions."""

    def __init__(
        self,
        session_repository: SessionRepository,
        user_repository: UserRepository,
        max_age_seconds: int = 7 * 24 * 60 * 60,
    ):
        self.session_repository = session_repository
        self.user_repository = user_repository
        self.max_age = timedelta(seconds=max_age_seconds)

    def create_session(
        self,
        user_id: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> SessionRecord:
        session = self.session_repository.create(
            token=generate_session_token(),
            user_id=user_id,
            expires_at=utc_now() + self.max_age,
            user_agent=user_agent,
            ip_address=ip_address,
        )
        logger.info(f"Created session for user {user_id}")
        return session

    def validate_session(self, token: str) -> Optional[Tuple[UserRecord, SessionRecord]]:
        """
        Resolve a token to its user and session.

        Returns None for unknown or expired tokens. A session whose user no
        longer exists is deleted.
        """
        session = self.session_repository.find_by_token(token)
        if session is None:
            return None

        user = self.user_repository.find_by_id(session.user_id)
        if user is None:
            logger.warning(f"Removing orphaned session for missing user {session.user_id}")
            self.session_repository.delete(token)
            return None

        return user, session

    def invalidate_session(self, token: str) -> None:
        """Delete a session. Unknown tokens are ignored."""
        self.session_repository.delete(token)

    def refresh_session(
        self,
        old_token: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> Optional[SessionRecord]:
        """Replace a valid session with a new one carrying a fresh expiry."""
        result = self.validate_session(old_token)
        if result is None:
            return None
        user, _ = result
        new_session = self.create_session(user.id, user_agent=user_agent, ip_address=ip_address)
        self.invalidate_session(old_token)
        return new_session
