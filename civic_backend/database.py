"""
JSON document store.

Each collection is one JSON file holding a list of documents under the data
directory. A single DocumentStore is opened at application start-up, stored on
``app.state`` and handed to routes through the ``get_store`` dependency.
"""

import os, json, re, secrets, shutil, tempfile, threading, logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from fastapi import Request

from civic_backend.errors import ConflictError, ValidationError

logger = logging.getLogger(__name__)

COLLECTIONS = ("users", "reports", "departments", "notifications")

_ID_PATTERN = re.compile(r"^[0-9a-f]{24}$")

Document = Dict[str, Any]
Predicate = Callable[[Document], bool]


def new_id() -> str:
    return secrets.token_hex(12)


def is_valid_id(value: Optional[str]) -> bool:
    return bool(value) and bool(_ID_PATTERN.match(value))


def check_id(value: str, label: str = "ID") -> str:
    """Raise ValidationError if ``value`` is not a well-formed document id."""
    if not is_valid_id(value):
        raise ValidationError(f"Invalid {label}")
    return value


def utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def public(doc: Document) -> Document:
    """Copy of ``doc`` with the storage key ``_id`` exposed as ``id``."""
    out = {k: v for k, v in doc.items() if k != "_id"}
    out["id"] = doc["_id"]
    return out


def _matches(doc: Document, query: Optional[Document], where: Optional[Predicate]) -> bool:
    if query:
        for key, value in query.items():
            if doc.get(key) != value:
                return False
    if where is not None and not where(doc):
        return False
    return True


class DocumentStore:
    def __init__(self, data_dir: str):
        self.data_dir = data_dir
        self._lock = threading.RLock()
        self._is_open = False

    # ────────────────────────────────
    # Lifecycle
    # ────────────────────────────────
    def open(self) -> "DocumentStore":
        os.makedirs(self.data_dir, exist_ok=True)
        for name in COLLECTIONS:
            path = self._path(name)
            if not os.path.exists(path):
                with open(path, "w", encoding="utf-8") as f:
                    json.dump([], f)
        self._is_open = True
        logger.info("Document store opened at %s", os.path.abspath(self.data_dir))
        return self

    def close(self) -> None:
        self._is_open = False
        logger.info("Document store closed")

    @property
    def is_open(self) -> bool:
        return self._is_open

    # ────────────────────────────────
    # JSON helpers
    # ────────────────────────────────
    def _path(self, collection: str) -> str:
        if collection not in COLLECTIONS:
            raise KeyError(f"Unknown collection: {collection}")
        return os.path.join(self.data_dir, f"{collection}.json")

    def _load(self, collection: str) -> List[Document]:
        if not self._is_open:
            raise RuntimeError("Document store is not open")
        path = self._path(collection)
        if not os.path.exists(path):
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                content = f.read().strip()
                if not content:
                    return []
                return json.loads(content)
        except json.JSONDecodeError:
            logger.warning("Corrupted collection file %s. Resetting...", path)
            self._save(collection, [])
            return []

    def _save(self, collection: str, docs: List[Document]) -> None:
        """Atomic write: dump to a temp file beside the target, then move it in place."""
        path = self._path(collection)
        tmp_fd, tmp_path = tempfile.mkstemp(dir=os.path.dirname(path))
        os.close(tmp_fd)
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(docs, f, indent=2)
            shutil.move(tmp_path, path)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

    # ────────────────────────────────
    # Queries
    # ────────────────────────────────
    def insert(self, collection: str, doc: Document) -> Document:
        with self._lock:
            docs = self._load(collection)
            doc = dict(doc)
            doc.setdefault("_id", new_id())
            docs.append(doc)
            self._save(collection, docs)
        return doc

    def find(self, collection: str, query: Optional[Document] = None,
             where: Optional[Predicate] = None) -> List[Document]:
        with self._lock:
            return [d for d in self._load(collection) if _matches(d, query, where)]

    def find_one(self, collection: str, query: Optional[Document] = None,
                 where: Optional[Predicate] = None) -> Optional[Document]:
        with self._lock:
            for doc in self._load(collection):
                if _matches(doc, query, where):
                    return doc
        return None

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        return self.find_one(collection, {"_id": doc_id})

    def count(self, collection: str, query: Optional[Document] = None,
              where: Optional[Predicate] = None) -> int:
        return len(self.find(collection, query, where))

    def update(self, collection: str, doc_id: str, changes: Document,
               expected_version: Optional[int] = None) -> Optional[Document]:
        """
        Apply ``changes`` to one document. When ``expected_version`` is given the
        write only goes through if the stored ``version`` still matches, and the
        version is bumped; otherwise ConflictError is raised.
        """
        with self._lock:
            docs = self._load(collection)
            for doc in docs:
                if doc["_id"] != doc_id:
                    continue
                if expected_version is not None:
                    if doc.get("version", 0) != expected_version:
                        raise ConflictError("Document was modified concurrently, reload and retry")
                    changes = {**changes, "version": expected_version + 1}
                doc.update(changes)
                self._save(collection, docs)
                return doc
        return None

    def update_many(self, collection: str, changes: Document,
                    query: Optional[Document] = None,
                    where: Optional[Predicate] = None) -> int:
        with self._lock:
            docs = self._load(collection)
            modified = 0
            for doc in docs:
                if _matches(doc, query, where):
                    doc.update(changes)
                    modified += 1
            if modified:
                self._save(collection, docs)
        return modified

    def push(self, collection: str, doc_id: str, field: str, value: Any) -> bool:
        """Append ``value`` to a list field of one document."""
        with self._lock:
            docs = self._load(collection)
            for doc in docs:
                if doc["_id"] == doc_id:
                    doc.setdefault(field, []).append(value)
                    self._save(collection, docs)
                    return True
        return False

    def pull(self, collection: str, doc_id: str, field: str, value: Any) -> bool:
        """Remove ``value`` from a list field of one document."""
        with self._lock:
            docs = self._load(collection)
            for doc in docs:
                if doc["_id"] == doc_id and value in doc.get(field, []):
                    doc[field].remove(value)
                    self._save(collection, docs)
                    return True
        return False

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._lock:
            docs = self._load(collection)
            remaining = [d for d in docs if d["_id"] != doc_id]
            if len(remaining) == len(docs):
                return False
            self._save(collection, remaining)
        return True


def get_store(request: Request) -> DocumentStore:
    """FastAPI dependency returning the store opened in the app lifespan."""
    return request.app.state.store
