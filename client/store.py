"""
client/store.py

Entity stores: the in-memory collection of one resource type backing a page.

LocalStore is the single-writer, in-memory variant: it assigns identifiers
itself from a monotonic counter. RemoteStore keeps a snapshot of the
server's collection; every mutation goes through the ApiClient and is
followed by a full refresh(), so the snapshot only ever holds what the
server returned.
"""

import copy
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional

from .api import ApiClient
from .entities import EntityKind
from .errors import ApiError, NotFoundError

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class EntityStore:
    """Shared read side of both store variants."""

    def __init__(self, kind: EntityKind):
        self.kind = kind
        self.records: List[Record] = []
        self.loading = False
        self.error: Optional[str] = None

    def list(self) -> List[Record]:
        return list(self.records)

    def get(self, record_id: str) -> Record:
        for r in self.records:
            if r.get('id') == record_id:
                return r
        raise NotFoundError(f"{self.kind.label} {record_id} not found")

    def __len__(self):
        return len(self.records)

    def __contains__(self, record_id):
        return any(r.get('id') == record_id for r in self.records)

    def refresh(self) -> bool:
        raise NotImplementedError

    def create(self, draft: Record) -> str:
        raise NotImplementedError

    def update(self, record_id: str, draft: Record) -> None:
        raise NotImplementedError

    def delete(self, record_id: str) -> None:
        raise NotImplementedError


class LocalStore(EntityStore):
    """In-memory store seeded from a list of records; ids are `<prefix><NNN>`."""

    def __init__(self, kind: EntityKind, records: Optional[Iterable[Record]] = None):
        super().__init__(kind)
        self.records = copy.deepcopy(list(records or []))
        self._counter = len(self.records)

    def _next_id(self) -> str:
        existing = {r.get('id') for r in self.records}
        while True:
            self._counter += 1
            candidate = f"{self.kind.id_prefix}{self._counter:03d}"
            if candidate not in existing:
                return candidate

    def refresh(self) -> bool:
        # nothing to re-read, the local list is authoritative
        self.error = None
        return True

    def create(self, draft: Record) -> str:
        record = copy.deepcopy(draft)
        record.pop('id', None)
        record_id = self._next_id()
        self.records.append({'id': record_id, **record})
        logger.info(f"Created {self.kind.label} {record_id}")
        return record_id

    def update(self, record_id: str, draft: Record) -> None:
        for i, r in enumerate(self.records):
            if r.get('id') == record_id:
                record = copy.deepcopy(draft)
                record.pop('id', None)
                self.records[i] = {'id': record_id, **record}
                logger.info(f"Updated {self.kind.label} {record_id}")
                return
        raise NotFoundError(f"{self.kind.label} {record_id} not found")

    def delete(self, record_id: str) -> None:
        if record_id not in self:
            raise NotFoundError(f"{self.kind.label} {record_id} not found")
        self.records = [r for r in self.records if r.get('id') != record_id]
        logger.info(f"Deleted {self.kind.label} {record_id}")


class RemoteStore(EntityStore):
    """Snapshot of one API collection; empty until the first refresh()."""

    def __init__(self, kind: EntityKind, api: ApiClient):
        super().__init__(kind)
        self.api = api

    @contextmanager
    def _busy(self):
        self.loading = True
        try:
            yield
        finally:
            self.loading = False

    def refresh(self) -> bool:
        """Re-read the collection. On failure keep the old snapshot and set ``error``."""
        with self._busy():
            try:
                records = self.api.list(self.kind.resource)
            except ApiError as e:
                logger.error(f"Failed to load {self.kind.resource}: {e.message}", exc_info=True)
                self.error = f"Could not load {self.kind.resource}: {e.message}"
                return False
        self.records = records
        self.error = None
        return True

    def create(self, draft: Record) -> str:
        with self._busy():
            record = self.api.create(self.kind.resource, draft)
        logger.info(f"Created {self.kind.label} {record['id']}")
        self.refresh()
        return record['id']

    def update(self, record_id: str, draft: Record) -> None:
        with self._busy():
            self.api.update(self.kind.resource, record_id, draft)
        logger.info(f"Updated {self.kind.label} {record_id}")
        self.refresh()

    def delete(self, record_id: str) -> None:
        with self._busy():
            self.api.delete(self.kind.resource, record_id)
        logger.info(f"Deleted {self.kind.label} {record_id}")
        self.refresh()
