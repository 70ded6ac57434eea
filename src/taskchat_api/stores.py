from __future__ import annotations

import logging
import secrets
import string
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from threading import RLock
from typing import Any, Dict, Iterator, List, Optional, Tuple

import firebase_admin
from firebase_admin import credentials, db, firestore
from firebase_admin.exceptions import FirebaseError
from google.auth.exceptions import GoogleAuthError
from google.api_core.exceptions import GoogleAPIError, NotFound
from google.cloud.firestore_v1.base_query import FieldFilter

from .errors import StoreError
from .models import ChatMessageEntity, TaskEntity
from .settings import Settings

logger = logging.getLogger(__name__)

TASKS_COLLECTION = "tasks"
CHATS_PATH = "chats"

# Upper bound appended to a prefix for Firestore range queries.
HIGH_SENTINEL = "\uf8ff"


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    """Re-raise any client failure inside the block as StoreError."""
    try:
        yield
    except (GoogleAPIError, GoogleAuthError, FirebaseError, ValueError) as exc:
        logger.error("Store operation %s failed: %s", operation, exc)
        raise StoreError(exc) from exc


# PUBLIC_INTERFACE
class TaskStore(ABC):
    """Contract for the document store holding task records."""

    @abstractmethod
    def add(self, record: Dict[str, Any]) -> str:
        """Insert a new document and return its store-assigned id."""

    @abstractmethod
    def update(self, task_id: str, fields: Dict[str, Any]) -> None:
        """Merge fields into an existing document. A missing document is a StoreError."""

    @abstractmethod
    def query(self, title_prefix: Optional[str] = None) -> List[TaskEntity]:
        """
        Return every task, or only those whose title lies in
        ``[title_prefix, title_prefix + HIGH_SENTINEL]`` when a prefix is given.
        Results keep the store's native ordering.
        """

    @abstractmethod
    def delete(self, task_id: str) -> None:
        """Delete a document. Deleting an absent id is not an error."""


# PUBLIC_INTERFACE
class ChatStore(ABC):
    """Contract for the realtime tree holding chat messages."""

    @abstractmethod
    def push(self, record: Dict[str, Any]) -> str:
        """Append a child with a freshly generated key and return the key."""

    @abstractmethod
    def list_ordered(self) -> List[ChatMessageEntity]:
        """Return every message ordered by timestamp ascending; empty when none exist."""


class FirestoreTaskStore(TaskStore):
    """
    Task store backed by a Cloud Firestore collection.
    """

    def __init__(self, client: Any, collection: str = TASKS_COLLECTION) -> None:
        self._client = client
        self._collection_name = collection

    def _collection(self) -> Any:
        return self._client.collection(self._collection_name)

    def add(self, record: Dict[str, Any]) -> str:
        with _store_errors("add"):
            _, doc_ref = self._collection().add(record)
        return doc_ref.id

    def update(self, task_id: str, fields: Dict[str, Any]) -> None:
        with _store_errors("update"):
            self._collection().document(task_id).update(fields)

    def query(self, title_prefix: Optional[str] = None) -> List[TaskEntity]:
        with _store_errors("query"):
            query = self._collection()
            if title_prefix:
                query = query.where(filter=FieldFilter("title", ">=", title_prefix)).where(
                    filter=FieldFilter("title", "<=", title_prefix + HIGH_SENTINEL)
                )
            return [{"id": snap.id, **snap.to_dict()} for snap in query.stream()]  # type: ignore[misc]

    def delete(self, task_id: str) -> None:
        with _store_errors("delete"):
            self._collection().document(task_id).delete()


class RealtimeChatStore(ChatStore):
    """
    Chat store backed by a Firebase Realtime Database reference.

    Reads are ordered server-side by ``timestamp``; the database rules must
    declare ``".indexOn": "timestamp"`` on the chats path.
    """

    def __init__(self, reference: Any) -> None:
        self._ref = reference

    def push(self, record: Dict[str, Any]) -> str:
        with _store_errors("push"):
            child = self._ref.push(record)
        return child.key

    def list_ordered(self) -> List[ChatMessageEntity]:
        with _store_errors("list"):
            snapshot = self._ref.order_by_child("timestamp").get()
        if not snapshot:
            return []
        return [{"id": key, **value} for key, value in snapshot.items()]  # type: ignore[misc]


_AUTO_ID_CHARS = string.ascii_letters + string.digits


def _auto_id() -> str:
    """Generate a 20-character document id in the style of Firestore's auto ids."""
    return "".join(secrets.choice(_AUTO_ID_CHARS) for _ in range(20))


class PushIdGenerator:
    """
    Generate chronologically sortable 20-character keys the way the realtime
    database client does: 8 characters of millisecond time followed by 12
    random characters that are incremented, not redrawn, within the same
    millisecond so keys stay strictly increasing.
    """

    PUSH_CHARS = "-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz"

    def __init__(self) -> None:
        self._lock = RLock()
        self._last_time = 0
        self._last_rand: List[int] = [0] * 12

    def __call__(self, now_ms: Optional[int] = None) -> str:
        now = int(time.time() * 1000) if now_ms is None else now_ms
        with self._lock:
            if now == self._last_time:
                i = 11
                while i >= 0 and self._last_rand[i] == 63:
                    self._last_rand[i] = 0
                    i -= 1
                if i >= 0:
                    self._last_rand[i] += 1
            else:
                self._last_rand = [secrets.randbelow(64) for _ in range(12)]
            self._last_time = now

            time_chars = []
            t = now
            for _ in range(8):
                time_chars.append(self.PUSH_CHARS[t % 64])
                t //= 64
            prefix = "".join(reversed(time_chars))
            return prefix + "".join(self.PUSH_CHARS[r] for r in self._last_rand)


class InMemoryTaskStore(TaskStore):
    """
    Thread-safe in-memory task store with Firestore's observable semantics:
    auto ids, results ordered by document id (or by title under a title
    range filter), and update failing on a missing document.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._docs: Dict[str, Dict[str, Any]] = {}

    def add(self, record: Dict[str, Any]) -> str:
        with self._lock:
            doc_id = _auto_id()
            while doc_id in self._docs:
                doc_id = _auto_id()
            self._docs[doc_id] = dict(record)
            return doc_id

    def update(self, task_id: str, fields: Dict[str, Any]) -> None:
        with _store_errors("update"), self._lock:
            existing = self._docs.get(task_id)
            if existing is None:
                raise NotFound(f"No document to update: {TASKS_COLLECTION}/{task_id}")
            existing.update(fields)

    def query(self, title_prefix: Optional[str] = None) -> List[TaskEntity]:
        with self._lock:
            items: List[Tuple[str, Dict[str, Any]]] = sorted(self._docs.items())
            if title_prefix:
                upper = title_prefix + HIGH_SENTINEL
                items = [
                    (doc_id, doc) for doc_id, doc in items
                    if isinstance(doc.get("title"), str) and title_prefix <= doc["title"] <= upper
                ]
                items.sort(key=lambda pair: pair[1]["title"])
            return [{"id": doc_id, **doc} for doc_id, doc in items]  # type: ignore[misc]

    def delete(self, task_id: str) -> None:
        with self._lock:
            self._docs.pop(task_id, None)


class InMemoryChatStore(ChatStore):
    """
    Thread-safe in-memory chat store. Children are keyed by push ids and read
    back ordered by timestamp, ties broken by key.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._children: Dict[str, Dict[str, Any]] = {}
        self._next_key = PushIdGenerator()

    def push(self, record: Dict[str, Any]) -> str:
        with self._lock:
            key = self._next_key()
            self._children[key] = dict(record)
            return key

    def list_ordered(self) -> List[ChatMessageEntity]:
        with self._lock:
            ordered = sorted(
                self._children.items(),
                key=lambda pair: (pair[1].get("timestamp", 0), pair[0]),
            )
            return [{"id": key, **value} for key, value in ordered]  # type: ignore[misc]


def _firebase_app(settings: Settings) -> firebase_admin.App:
    try:
        return firebase_admin.get_app()
    except ValueError:
        logger.info("Initializing Firebase app for %s", settings.firebase_database_url)
        return firebase_admin.initialize_app(
            credentials.Certificate(settings.firebase_credentials),
            {"databaseURL": settings.firebase_database_url},
        )


# PUBLIC_INTERFACE
def build_stores(settings: Settings) -> Tuple[TaskStore, ChatStore]:
    """
    Build the task and chat stores for the configured backend.
    - memory: InMemoryTaskStore / InMemoryChatStore
    - firebase: FirestoreTaskStore / RealtimeChatStore sharing one Firebase app
    """
    if settings.store_backend == "memory":
        return InMemoryTaskStore(), InMemoryChatStore()
    app = _firebase_app(settings)
    return (
        FirestoreTaskStore(firestore.client(app)),
        RealtimeChatStore(db.reference(CHATS_PATH, app=app)),
    )
