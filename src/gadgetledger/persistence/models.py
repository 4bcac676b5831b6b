"""
Single-table schema: every version of every key lives here, tombstones included.
"""

import time

from sqlalchemy import (
    Boolean,
    Column,
    Integer,
    LargeBinary,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def now_pair() -> tuple[int, int]:  # (seconds, nanos) since the epoch
    ns = time.time_ns()
    return ns // 1_000_000_000, ns % 1_000_000_000


class LedgerRow(Base):
    """One immutable mutation of one key."""

    __tablename__ = "ledger_entries"
    __table_args__ = (UniqueConstraint("key", "version", name="uq_ledger_key_version"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    tx_id = Column(String(64), nullable=False, index=True)
    key = Column(String, nullable=False, index=True)
    version = Column(Integer, nullable=False)
    value = Column(LargeBinary, nullable=True)  # NULL for tombstones
    is_delete = Column(Boolean, nullable=False, default=False)
    ts_seconds = Column(Integer, nullable=False)
    ts_nanos = Column(Integer, nullable=False)
