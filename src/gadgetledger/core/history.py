"""
Turns a key's raw ledger change log into an ordered audit trail.
"""

from __future__ import annotations

from contextlib import closing
from typing import List

from ..persistence.ledger import Ledger
from .record import Gadget, HistoryEntry, RawHistoryEntry, render_timestamp


class HistoryReconstructor:
    def __init__(self, ledger: Ledger):
        self.ledger = ledger

    def history_raw(self, key: str) -> List[RawHistoryEntry]:
        """
        Every mutation of `key` in ledger delivery order, values undecoded.

        The list is built completely before it is returned; a failure
        mid-stream propagates and nothing partial escapes.
        """
        entries: List[RawHistoryEntry] = []
        with closing(self.ledger.history_query(key)) as it:
            for mod in it:
                entries.append(
                    RawHistoryEntry(
                        tx_id=mod.tx_id,
                        value=None if mod.is_delete else mod.value,
                        timestamp=render_timestamp(mod.seconds, mod.nanos),
                        is_delete=mod.is_delete,
                    )
                )
        return entries

    def history_for(self, key: str) -> List[HistoryEntry]:
        return [
            HistoryEntry(
                tx_id=e.tx_id,
                value=None if e.value is None else Gadget.from_bytes(key, e.value),
                timestamp=e.timestamp,
                is_delete=e.is_delete,
            )
            for e in self.history_raw(key)
        ]
