"""
JSON document store.

Each collection is a directory under the store root and each document is a
``<id>.json`` file inside it. The store is constructed once by the process
entry point and handed to the repositories that need it.
"""

import json
import logging
import threading
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)


class DocumentStoreError(Exception):
    """Raised when a document cannot be read or written."""


class JsonDocumentStore:
    """File-backed document store with a process-wide write lock."""

    def __init__(self, root_dir: Path):
        self.root_dir = Path(root_dir)
        self.root_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()

    def _collection_dir(self, collection: str) -> Path:
        path = self.root_dir / collection
        path.mkdir(parents=True, exist_ok=True)
        return path

    @staticmethod
    def is_valid_id(doc_id) -> bool:
        """Ids become file names, so path separators and leading dots are rejected."""
        doc_id = str(doc_id)
        return bool(doc_id) and "/" not in doc_id and "\\" not in doc_id and not doc_id.startswith(".")

    def _document_path(self, collection: str, doc_id: str) -> Path:
        doc_id = str(doc_id)
        if not self.is_valid_id(doc_id):
            raise DocumentStoreError(f"Invalid document id: {doc_id!r}")
        return self._collection_dir(collection) / f"{doc_id}.json"

    @staticmethod
    def new_id() -> str:
        """Generate a fresh document id."""
        return uuid.uuid4().hex

    @contextmanager
    def transaction(self) -> Iterator["JsonDocumentStore"]:
        """Hold the store lock across a read-modify-write sequence."""
        with self._lock:
            yield self

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Return the document, or None if it does not exist."""
        path = self._document_path(collection, doc_id)
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except json.JSONDecodeError as e:
            raise DocumentStoreError(f"Corrupt document {collection}/{doc_id}: {e}") from e

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Create or overwrite a document."""
        path = self._document_path(collection, doc_id)
        with self._lock:
            tmp_path = path.with_suffix(".json.tmp")
            tmp_path.write_text(
                json.dumps(data, ensure_ascii=False, indent=2, default=str), encoding="utf-8"
            )
            tmp_path.replace(path)

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Shallow-merge ``fields`` into an existing document."""
        with self._lock:
            current = self.get(collection, doc_id)
            if current is None:
                raise DocumentStoreError(f"Document {collection}/{doc_id} does not exist")
            current.update(fields)
            self.set(collection, doc_id, current)
            return current

    def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document. Returns False if it was already absent."""
        path = self._document_path(collection, doc_id)
        with self._lock:
            try:
                path.unlink()
                return True
            except FileNotFoundError:
                return False

    def list(self, collection: str) -> List[Dict[str, Any]]:
        """Return every document in a collection, each carrying an ``id`` key."""
        documents = []
        for path in sorted(self._collection_dir(collection).glob("*.json")):
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as e:
                logger.error(f"Skipping corrupt document {path}: {e}")
                continue
            data.setdefault("id", path.stem)
            documents.append(data)
        return documents

    def find_one(self, collection: str, field: str, value: Any) -> Optional[Dict[str, Any]]:
        """Return the first document whose ``field`` equals ``value``."""
        for document in self.list(collection):
            if document.get(field) == value:
                return document
        return None

    def find_all(self, collection: str, field: str, value: Any) -> List[Dict[str, Any]]:
        return [d for d in self.list(collection) if d.get(field) == value]

    def clear(self, collection: str) -> int:
        """Delete every document in a collection; returns how many were removed."""
        removed = 0
        with self._lock:
            for path in self._collection_dir(collection).glob("*.json"):
                path.unlink()
                removed += 1
        return removed
