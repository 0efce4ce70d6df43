"""Apply / commit / rollback for single-record edits.

The in-memory record is changed first so the board reflects the edit at
once. The inverse patch is captured before anything is touched; if the store
rejects the write, that inverse is applied and the store's error is raised
to the caller.
"""

import logging

from dayboard.store import StoreError

logger = logging.getLogger(__name__)


class OptimisticUpdate:
    """One pending edit of one in-memory record."""

    def __init__(self, record, patch):
        self.record = record
        self.patch = dict(patch)
        # Keys missing before the edit are restored as missing
        self.inverse = {key: record.get(key) for key in self.patch}
        self._missing = [key for key in self.patch if key not in record]
        self.applied = False

    def apply(self):
        self.record.update(self.patch)
        self.applied = True
        return self.record

    def rollback(self):
        if not self.applied:
            return self.record
        self.record.update(self.inverse)
        for key in self._missing:
            self.record.pop(key, None)
        self.applied = False
        return self.record

    def commit(self, persist):
        """Run persist(patch); undo the local edit if it raises StoreError."""
        if not self.applied:
            self.apply()
        try:
            result = persist(self.patch)
        except StoreError as e:
            logger.warning("Rolling back %s on record %s: %s",
                           sorted(self.patch), self.record.get("id"), e)
            self.rollback()
            raise
        return result
