"""Record stores: a local JSON file and a remote PostgREST-style database.

Both expose the same four calls, each atomic on its own:

    query(collection, filters)  -> list of records
    insert(collection, fields)  -> stored record (with id and created_at)
    update(collection, id, fields) -> stored record
    delete(collection, id)

Filters map a column to the value it must equal; None means "is null".
Failures of any kind surface as StoreError carrying the store's message.
"""

import json
import logging
import uuid
from datetime import datetime

import requests

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """A read or write against the record store failed."""


def now_iso():
    """Return current datetime as ISO string with seconds precision."""
    return datetime.now().isoformat(timespec='seconds')


def _matches(record, filters):
    for key, value in (filters or {}).items():
        if record.get(key) != value:
            return False
    return True


class JsonFileStore:
    """All collections in one JSON document on disk."""

    def __init__(self, path):
        self.path = path

    def _load(self):
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text())
        except (OSError, ValueError) as e:
            raise StoreError(f"Could not read {self.path.name}: {e}") from e

    def _save(self, data):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2))
        except OSError as e:
            raise StoreError(f"Could not write {self.path.name}: {e}") from e

    def query(self, collection, filters=None):
        records = self._load().get(collection, [])
        return [dict(r) for r in records if _matches(r, filters)]

    def get(self, collection, record_id):
        for record in self.query(collection, {"id": record_id}):
            return record
        return None

    def insert(self, collection, fields):
        data = self._load()
        record = dict(fields)
        record.setdefault("id", str(uuid.uuid4()))
        record.setdefault("created_at", now_iso())
        data.setdefault(collection, []).append(record)
        self._save(data)
        logger.debug("Inserted %s/%s", collection, record["id"])
        return dict(record)

    def update(self, collection, record_id, fields):
        data = self._load()
        for record in data.get(collection, []):
            if record.get("id") == record_id:
                record.update(fields)
                self._save(data)
                logger.debug("Updated %s/%s: %s", collection, record_id, sorted(fields))
                return dict(record)
        raise StoreError(f"Record not found: {collection}/{record_id}")

    def delete(self, collection, record_id):
        data = self._load()
        records = data.get(collection, [])
        kept = [r for r in records if r.get("id") != record_id]
        if len(kept) == len(records):
            raise StoreError(f"Record not found: {collection}/{record_id}")
        data[collection] = kept
        self._save(data)
        logger.debug("Deleted %s/%s", collection, record_id)


class RestStore:
    """Tables behind a PostgREST endpoint (/rest/v1/<table>)."""

    def __init__(self, base_url, api_key, timeout=30):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    def _url(self, collection):
        return f"{self.base_url}/rest/v1/{collection}"

    def _headers(self):
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }

    @staticmethod
    def _params(filters):
        params = {}
        for key, value in (filters or {}).items():
            if value is None:
                params[key] = "is.null"
            elif isinstance(value, bool):
                params[key] = f"is.{str(value).lower()}"
            else:
                params[key] = f"eq.{value}"
        return params

    def _request(self, method, collection, params=None, payload=None):
        try:
            response = requests.request(
                method,
                self._url(collection),
                params=params,
                json=payload,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise StoreError(f"Request failed: {e}") from e

        if response.status_code >= 400:
            raise StoreError(f"{method} {collection} failed: {response.status_code} {response.text}")
        if not response.text:
            return []
        return response.json()

    def query(self, collection, filters=None):
        return self._request("GET", collection, params=self._params(filters))

    def get(self, collection, record_id):
        rows = self.query(collection, {"id": record_id})
        return rows[0] if rows else None

    def insert(self, collection, fields):
        rows = self._request("POST", collection, payload=fields)
        if not rows:
            raise StoreError(f"Insert into {collection} returned nothing")
        return rows[0]

    def update(self, collection, record_id, fields):
        rows = self._request("PATCH", collection, params=self._params({"id": record_id}), payload=fields)
        if not rows:
            raise StoreError(f"Record not found: {collection}/{record_id}")
        return rows[0]

    def delete(self, collection, record_id):
        rows = self._request("DELETE", collection, params=self._params({"id": record_id}))
        if not rows:
            raise StoreError(f"Record not found: {collection}/{record_id}")
