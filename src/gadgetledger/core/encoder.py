"""
Multi-item response assembly.

Results are built as a Python value tree and serialized in one ``json.dumps``
call, so a malformed stored fragment can never break the surrounding array:
fragments that do not parse are embedded as JSON strings instead.

Stored bytes are decoded as UTF-8 with ``errors="replace"``: invalid byte
sequences appear as U+FFFD in the response.  The ledger copy is untouched;
``queryGadget`` still returns the exact stored bytes.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Iterable, Sequence, TypeVar

from ..persistence.ledger import LedgerState
from .record import RawHistoryEntry

T = TypeVar("T")

_SEPARATORS = (",", ":")


def embed_raw(value: bytes | None) -> Any:
    """Stored bytes ➜ JSON-compatible value (``None`` stays ``null``)."""
    if value is None:
        return None
    text = value.decode("utf-8", errors="replace")
    try:
        return json.loads(text)
    except ValueError:
        return text


def encode_array(items: Iterable[T], render_item: Callable[[T], Any]) -> str:
    return json.dumps([render_item(item) for item in items], separators=_SEPARATORS)


def encode_range(pairs: Sequence[LedgerState]) -> str:
    return encode_array(pairs, lambda kv: {"Key": kv.key, "Record": embed_raw(kv.value)})


def encode_history(entries: Sequence[RawHistoryEntry]) -> str:
    return encode_array(
        entries,
        lambda e: {
            "TxId": e.tx_id,
            "Value": None if e.is_delete else embed_raw(e.value),
            "Timestamp": e.timestamp,
            "IsDelete": e.is_delete,
        },
    )
