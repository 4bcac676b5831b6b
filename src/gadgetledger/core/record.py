"""
Record kernel – *pure Pydantic* (no SQLAlchemy imports).

* ``Gadget`` is the stored value; its identity is the external ledger key.
* ``HistoryEntry`` is one reconstructed mutation of a key.
"""

from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, ValidationError, field_validator

from ..errors import DecodeError


class _StoredGadget(BaseModel):
    """Decode-side view of a stored value: absent or null fields read as ``""``."""

    make: str = ""
    model: str = ""
    colour: str = ""
    owner: str = ""

    model_config = {"extra": "ignore"}

    @field_validator("make", "model", "colour", "owner", mode="before")
    @classmethod
    def _null_is_empty(cls, v):
        return "" if v is None else v


class Gadget(BaseModel):
    """An asset record: four required string fields, immutable once built."""

    make: str
    model: str
    colour: str
    owner: str

    model_config = {"frozen": True, "extra": "ignore"}

    def to_bytes(self) -> bytes:
        """Compact JSON, field order as declared."""
        return self.model_dump_json().encode("utf-8")

    @classmethod
    def from_bytes(cls, key: str, raw: bytes) -> "Gadget":
        """
        Decode a stored value.  Missing or null fields become ``""``; only
        malformed JSON, a non-object, or a non-string field is rejected.
        """
        try:
            return cls(**_StoredGadget.model_validate_json(raw).model_dump())
        except ValidationError as exc:
            raise DecodeError(key, f"{exc.error_count()} validation error(s)") from exc

    def with_owner(self, owner: str) -> "Gadget":
        return self.model_copy(update={"owner": owner})


# Fixed sample set written by ``RecordStore.seed`` under GADGET0..GADGET7.
SAMPLE_GADGETS: tuple[Gadget, ...] = (
    Gadget(make="Samsung", model="GalS10", colour="blue", owner="Shyam"),
    Gadget(make="Apple", model="Ipod", colour="black", owner="Sravan"),
    Gadget(make="Apple", model="AirMac", colour="Silver", owner="Pavan"),
    Gadget(make="Sony", model="Bravia10", colour="Black", owner="Karthick"),
    Gadget(make="SkullCandy", model="EarPhones", colour="black", owner="Jhon"),
    Gadget(make="Nokia", model="N72", colour="Black", owner="Lalitha"),
    Gadget(make="MI", model="MI20", colour="Gray", owner="Jack"),
    Gadget(make="Samsung", model="GalS10Plus", colour="DarkBlack", owner="Akram"),
)

KEY_PREFIX = "GADGET"


def sample_key(index: int) -> str:
    return f"{KEY_PREFIX}{index}"


def render_timestamp(seconds: int, nanos: int) -> str:
    """
    (seconds, nanos) ➜ ``2019-07-01 10:00:00.000000042 +0000 UTC``.

    The fraction is always nine digits, zeros kept (``.500000000``, never
    ``.5``), so every rendered timestamp has the same width.
    """
    base = dt.datetime.fromtimestamp(seconds, tz=dt.timezone.utc)
    return f"{base:%Y-%m-%d %H:%M:%S}.{nanos:09d} +0000 UTC"


class HistoryEntry(BaseModel):
    """One decoded mutation of a key; ``value`` is None for tombstones."""

    tx_id: str
    value: Optional[Gadget] = None
    timestamp: str
    is_delete: bool = False

    model_config = {"frozen": True}


class RawHistoryEntry(BaseModel):
    """Same as :class:`HistoryEntry` but the value stays undecoded."""

    tx_id: str
    value: Optional[bytes] = None
    timestamp: str
    is_delete: bool = False

    model_config = {"frozen": True}
