"""
CRUD and range-scan semantics over gadgets addressed by opaque string keys.
All durability and ordering is delegated to the :class:`Ledger`.
"""

from __future__ import annotations

import logging
from contextlib import closing
from typing import List

from ..errors import AlreadyExistsError, NotFoundError
from ..persistence.ledger import Ledger, LedgerState
from .record import SAMPLE_GADGETS, Gadget, sample_key

logger = logging.getLogger(__name__)


class RecordStore:
    """Record lifecycle on top of a ledger.

    ``allow_overwrite`` keeps the permissive create semantics (a create on an
    existing key replaces it).  Set it to False to reject such creates with
    :class:`AlreadyExistsError`.
    """

    def __init__(self, ledger: Ledger, *, allow_overwrite: bool = True):
        self.ledger = ledger
        self.allow_overwrite = allow_overwrite

    def get(self, key: str) -> bytes:
        """Raw current value, ``b""`` when absent."""
        return self.ledger.get_state(key)

    def read(self, key: str) -> Gadget:
        raw = self.ledger.get_state(key)
        if not raw:
            raise NotFoundError(key)
        return Gadget.from_bytes(key, raw)

    def create(self, key: str, gadget: Gadget, *, overwrite: bool | None = None) -> None:
        overwrite = self.allow_overwrite if overwrite is None else overwrite
        if not overwrite and self.ledger.get_state(key):
            raise AlreadyExistsError(key)
        self.ledger.put_state(key, gadget.to_bytes())

    def change_owner(self, key: str, new_owner: str) -> Gadget:
        """Read-modify-write, conditioned on the version that was read."""
        raw, version = self.ledger.get_versioned(key)
        if not raw:
            raise NotFoundError(key)
        updated = Gadget.from_bytes(key, raw).with_owner(new_owner)
        self.ledger.put_state(key, updated.to_bytes(), expected_version=version)
        return updated

    def delete(self, key: str) -> None:
        raw = self.ledger.get_state(key)
        if not raw:
            raise NotFoundError(key)
        Gadget.from_bytes(key, raw)  # refuse to delete what we cannot decode
        self.ledger.delete_state(key)

    def range_scan(self, start_key: str, end_key: str) -> List[LedgerState]:
        with closing(self.ledger.range_query(start_key, end_key)) as it:
            return list(it)

    def seed(self) -> List[str]:
        """Write the fixed sample set under GADGET0..; always overwrites."""
        keys = []
        for i, gadget in enumerate(SAMPLE_GADGETS):
            key = sample_key(i)
            self.create(key, gadget, overwrite=True)
            logger.debug("Added %s: %s", key, gadget)
            keys.append(key)
        return keys
