"""
User persistence over the document store.
"""
import logging
from typing import List, Optional

from membership_service.document_store import JsonDocumentStore
from membership_service.membership import MembershipType, DEFAULT_MEMBERSHIP_TYPE
from .models import AuthProvider, UserRecord, utc_now

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"


class UserRepository:
    """CRUD access to user documents."""

    def __init__(self, store: JsonDocumentStore):
        self.store = store

    def create(
        self,
        email: str,
        display_name: str,
        auth_provider: AuthProvider,
        password_hash: Optional[str] = None,
        google_id: Optional[str] = None,
        facebook_id: Optional[str] = None,
        membership_type: MembershipType = DEFAULT_MEMBERSHIP_TYPE,
    ) -> UserRecord:
        """Create a user with a fresh id."""
        now = utc_now()
        user = UserRecord(
            id=self.store.new_id(),
            email=email,
            display_name=display_name,
            auth_provider=auth_provider,
            membership_type=membership_type,
            password_hash=password_hash,
            google_id=google_id,
            facebook_id=facebook_id,
            created_at=now,
            updated_at=now,
        )
        self.store.set(USERS_COLLECTION, user.id, user.to_document())
        logger.info(f"Created user {user.id} ({auth_provider.value}, tier {membership_type.value})")
        return user

    def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        if not user_id or not self.store.is_valid_id(user_id):
            return None
        data = self.store.get(USERS_COLLECTION, user_id)
        if data is None:
            return None
        return UserRecord.from_document(user_id, data)

    def _find_by_field(self, field: str, value: str) -> Optional[UserRecord]:
        data = self.store.find_one(USERS_COLLECTION, field, value)
        if data is None:
            return None
        return UserRecord.from_document(data.pop("id"), data)

    def find_by_email(self, email: str) -> Optional[UserRecord]:
        return self._find_by_field("email", email)

    def find_by_google_id(self, google_id: str) -> Optional[UserRecord]:
        return self._find_by_field("google_id", google_id)

    def find_by_facebook_id(self, facebook_id: str) -> Optional[UserRecord]:
        return self._find_by_field("facebook_id", facebook_id)

    def update(self, user_id: str, **fields) -> Optional[UserRecord]:
        """
        Update selected fields of a user.

        Fields set to None are ignored. Returns the updated record, or None if
        the user does not exist.
        """
        with self.store.transaction():
            user = self.find_by_id(user_id)
            if user is None:
                return None
            changes = {k: v for k, v in fields.items() if v is not None}
            updated = user.model_copy(update={**changes, "updated_at": utc_now()})
            # Round-trip through validation so enum strings become members
            updated = UserRecord.from_document(user_id, updated.to_document())
            self.store.set(USERS_COLLECTION, user_id, updated.to_document())
            return updated

    def list_all(self) -> List[UserRecord]:
        return [UserRecord.from_document(d.pop("id"), d) for d in self.store.list(USERS_COLLECTION)]
