"""
Per-user record of which articles and videos have been viewed.
"""

import logging
from datetime import datetime, timezone
from typing import Dict

from membership_service.document_store import JsonDocumentStore
from membership_service.membership import ContentType
from .models import UsageRecord

logger = logging.getLogger(__name__)

USAGE_COLLECTION = "usage"


class UsageStore:
    """Reads and appends to usage documents. Appends are duplicate-safe."""

    def __init__(self, store: JsonDocumentStore):
        self.store = store

    def get(self, user_id: str) -> UsageRecord:
        """Usage for a user; an empty, unsaved record if none exists yet."""
        data = self.store.get(USAGE_COLLECTION, user_id)
        if data is None:
            return UsageRecord.empty(user_id)
        return UsageRecord.from_document(user_id, data)

    def add_content_id(self, user_id: str, content_type: ContentType, content_id: str) -> bool:
        """
        Add ``content_id`` to the user's accessed set for ``content_type``.

        Creates the usage record on first access. Returns False without
        writing if the id was already present.
        """
        content_id = str(content_id)
        with self.store.transaction():
            record = self.get(user_id)
            accessed = record.accessed(content_type)
            if content_id in accessed:
                return False
            accessed.append(content_id)
            record.last_updated = datetime.now(timezone.utc)
            self.store.set(USAGE_COLLECTION, user_id, record.to_document())

        logger.info(f"Recorded {content_type.value} access: user={user_id}, id={content_id}, count={len(accessed)}")
        return True

    def add_article_id(self, user_id: str, article_id: str) -> bool:
        return self.add_content_id(user_id, ContentType.ARTICLE, article_id)

    def add_video_id(self, user_id: str, video_id: str) -> bool:
        return self.add_content_id(user_id, ContentType.VIDEO, video_id)

    def has_accessed(self, user_id: str, content_type: ContentType, content_id: str) -> bool:
        return str(content_id) in self.get(user_id).accessed(content_type)

    def get_counts(self, user_id: str) -> Dict[str, int]:
        record = self.get(user_id)
        return {
            "articles": len(record.articles_accessed),
            "videos": len(record.videos_accessed),
        }

    def reset(self, user_id: str) -> None:
        """Administrative reset: overwrite with an empty record."""
        self.store.set(USAGE_COLLECTION, user_id, UsageRecord.empty(user_id).to_document())
        logger.info(f"Reset usage for user={user_id}")
