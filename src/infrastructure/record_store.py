"""
Record Store Module

Named-collection record stores: read / create / update / delete per
collection, rows are flat dicts keyed by "id".

SheetsRecordStore speaks the spreadsheet web-app protocol:
- GET  <url>?action=read&sheet=<name>
- POST <url> with JSON body {"action", "sheet", "data"}
- Response JSON {"status": "success"|"error", "data": ..., "message": ...}
"""

import json
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import requests

from infrastructure.logger import get_logger

logger = get_logger("RecordStore")


# ==============================================================================
# Custom Exceptions
# ==============================================================================
class StoreError(Exception):
    """Raised when the backing store cannot complete a request."""
    pass


class DuplicateKeyError(StoreError):
    """Raised by stores that enforce a unique id on create."""

    def __init__(self, collection: str, record_id: str):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"Duplicate id '{record_id}' in {collection}")


# ==============================================================================
# Interface
# ==============================================================================
class RecordStore(ABC):
    """Abstract named-collection record store. No transactional guarantees."""

    # True if upsert() is a single keyed operation on the backend
    supports_upsert: bool = False

    @abstractmethod
    def read(self, collection: str) -> List[dict]:
        pass

    @abstractmethod
    def create(self, collection: str, record: dict) -> None:
        pass

    @abstractmethod
    def update(self, collection: str, record: dict) -> None:
        pass

    @abstractmethod
    def delete(self, collection: str, record_id: str) -> None:
        pass

    def upsert(self, collection: str, record: dict) -> None:
        """Insert or replace by id in one backend operation."""
        raise NotImplementedError(f"{type(self).__name__} has no server-side upsert")


# ==============================================================================
# In-memory backend
# ==============================================================================
class InMemoryRecordStore(RecordStore):
    """
    Dict-backed store for tests and offline use.

    With unique_ids=False, create() appends even if the id exists, which
    mirrors a spreadsheet backend and lets the duplicate-row race be
    reproduced. With unique_ids=True, create() rejects duplicates and
    upsert() is available.
    """

    def __init__(self, unique_ids: bool = False, initial: Optional[Dict[str, List[dict]]] = None):
        self.unique_ids = unique_ids
        self.supports_upsert = unique_ids
        self._lock = threading.Lock()
        self._collections: Dict[str, List[dict]] = {
            name: [dict(row) for row in rows] for name, rows in (initial or {}).items()
        }
        self.calls: List[tuple] = []

    def read(self, collection: str) -> List[dict]:
        self.calls.append(("read", collection))
        with self._lock:
            return [dict(row) for row in self._collections.get(collection, [])]

    def create(self, collection: str, record: dict) -> None:
        self.calls.append(("create", collection, record.get("id")))
        with self._lock:
            rows = self._collections.setdefault(collection, [])
            if self.unique_ids and any(str(r.get("id")) == str(record.get("id")) for r in rows):
                raise DuplicateKeyError(collection, str(record.get("id")))
            rows.append(dict(record))

    def update(self, collection: str, record: dict) -> None:
        self.calls.append(("update", collection, record.get("id")))
        with self._lock:
            rows = self._collections.get(collection, [])
            for i, row in enumerate(rows):
                if str(row.get("id")) == str(record.get("id")):
                    rows[i] = {**row, **record}
                    return
            raise StoreError(f"No record '{record.get('id')}' in {collection}")

    def delete(self, collection: str, record_id: str) -> None:
        self.calls.append(("delete", collection, record_id))
        with self._lock:
            rows = self._collections.get(collection, [])
            self._collections[collection] = [
                r for r in rows if str(r.get("id")) != str(record_id)
            ]

    def upsert(self, collection: str, record: dict) -> None:
        if not self.supports_upsert:
            return super().upsert(collection, record)
        self.calls.append(("upsert", collection, record.get("id")))
        with self._lock:
            rows = self._collections.setdefault(collection, [])
            for i, row in enumerate(rows):
                if str(row.get("id")) == str(record.get("id")):
                    rows[i] = {**row, **record}
                    return
            rows.append(dict(record))


# ==============================================================================
# Spreadsheet web-app backend
# ==============================================================================
class SheetsRecordStore(RecordStore):
    """
    Record store backed by a spreadsheet web-app endpoint.

    A successful read whose response is not JSON (the endpoint answers with
    an HTML page for a missing sheet) yields an empty collection. HTTP error
    statuses and every other failure raise StoreError.
    """

    def __init__(
        self,
        script_url: str,
        timeout: float = 20.0,
        server_upsert: bool = False,
        session: Optional[requests.Session] = None
    ):
        if not script_url:
            raise StoreError("Spreadsheet script URL is not configured")
        self.script_url = script_url
        self.timeout = timeout
        self.supports_upsert = server_upsert
        self.session = session or requests.Session()

    def read(self, collection: str) -> List[dict]:
        try:
            res = self.session.get(
                self.script_url,
                params={"action": "read", "sheet": collection},
                timeout=self.timeout,
                allow_redirects=True,
            )
        except requests.RequestException as e:
            logger.error(f"Network error reading {collection}: {e}")
            raise StoreError(f"Network error reading {collection}: {e}") from e

        self._check_status(res, "read", collection)
        if not self._is_json(res):
            logger.warning(f"Non-JSON response reading {collection}, treating as empty")
            return []

        data = self._unwrap(res, "read", collection)
        if not isinstance(data, list):
            logger.warning(f"Unexpected payload reading {collection}: {type(data).__name__}")
            return []
        return [row for row in data if isinstance(row, dict)]

    def create(self, collection: str, record: dict) -> None:
        self._post("create", collection, record)

    def update(self, collection: str, record: dict) -> None:
        self._post("update", collection, record)

    def delete(self, collection: str, record_id: str) -> None:
        self._post("delete", collection, {"id": record_id})

    def upsert(self, collection: str, record: dict) -> None:
        if not self.supports_upsert:
            return super().upsert(collection, record)
        self._post("upsert", collection, record)

    def _post(self, action: str, collection: str, data: dict) -> None:
        # No Content-Type header: the web app rejects CORS preflight triggers
        body = json.dumps({"action": action, "sheet": collection, "data": data})
        try:
            res = self.session.post(
                self.script_url,
                data=body,
                timeout=self.timeout,
                allow_redirects=True,
            )
        except requests.RequestException as e:
            logger.error(f"Network error on {action} in {collection}: {e}")
            raise StoreError(f"Network error on {action} in {collection}: {e}") from e

        self._check_status(res, action, collection)
        if not self._is_json(res):
            raise StoreError(f"Invalid API response format on {action} in {collection}")
        self._unwrap(res, action, collection)
        logger.debug(f"{action} {collection} id={data.get('id')}")

    @staticmethod
    def _is_json(res) -> bool:
        content_type = res.headers.get("content-type") or ""
        return "application/json" in content_type

    @staticmethod
    def _check_status(res, action: str, collection: str) -> None:
        if res.status_code >= 400:
            logger.error(f"HTTP {res.status_code} on {action} in {collection}")
            raise StoreError(f"HTTP {res.status_code} on {action} in {collection}")

    def _unwrap(self, res, action: str, collection: str):
        try:
            payload = res.json()
        except ValueError as e:
            raise StoreError(f"Malformed JSON on {action} in {collection}") from e

        if payload.get("status") == "error":
            message = payload.get("message") or "unknown error"
            logger.error(f"[API Error] {action} {collection}: {message}")
            raise StoreError(message)
        return payload.get("data")


def build_record_store(settings) -> RecordStore:
    """Create the backend named by StoreSettings.backend."""
    if settings.backend == "memory":
        return InMemoryRecordStore(unique_ids=settings.server_upsert)
    return SheetsRecordStore(
        settings.script_url,
        timeout=settings.timeout,
        server_upsert=settings.server_upsert,
    )
