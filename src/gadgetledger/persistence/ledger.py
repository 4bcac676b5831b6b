"""
Ledger collaborator: a versioned key-value store over the ``ledger_entries``
table.  Writes append immutable rows; the current state of a key is its
highest version unless that version is a tombstone.

Range and history queries return lazy generators bound to an SQLAlchemy
result.  Callers release them with ``contextlib.closing`` (or by draining).
"""

from __future__ import annotations

import logging
import threading
import uuid
from contextlib import AbstractContextManager, contextmanager, nullcontext
from typing import Iterator, NamedTuple, Optional, Protocol, runtime_checkable

from sqlalchemy import and_, func, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from ..errors import ConflictError, StorageError
from .models import LedgerRow, now_pair

logger = logging.getLogger(__name__)


class LedgerState(NamedTuple):
    key: str
    value: bytes


class KeyModification(NamedTuple):
    tx_id: str
    value: Optional[bytes]  # None for tombstones
    seconds: int
    nanos: int
    is_delete: bool


@runtime_checkable
class Ledger(Protocol):
    """What the record store needs from a versioned ledger."""

    def transaction(self) -> AbstractContextManager[str]:
        """Scope of one invocation; yields its transaction id."""
        ...

    def get_state(self, key: str) -> bytes:
        """Current value of `key`, or ``b""`` when absent / deleted."""
        ...

    def get_versioned(self, key: str) -> tuple[bytes, int]:
        """Current value plus the version marker to condition a write on."""
        ...

    def put_state(
        self, key: str, value: bytes, *, expected_version: int | None = None
    ) -> None:
        ...

    def delete_state(self, key: str) -> None:
        ...

    def range_query(self, start_key: str, end_key: str) -> Iterator[LedgerState]:
        """Live keys in ``[start_key, end_key)``; empty bound = unbounded."""
        ...

    def history_query(self, key: str) -> Iterator[KeyModification]:
        """Every mutation of `key`, oldest → newest."""
        ...


class _Tx(NamedTuple):
    tx_id: str
    session: Session


class SqlLedger:
    """SQLAlchemy implementation of :class:`Ledger`."""

    def __init__(self, engine: Engine, *, serialize: bool | None = None):
        """
        `serialize` holds one lock per ledger for the whole of each
        ``transaction()`` and of each standalone call made outside one.  It
        defaults to on for a ``StaticPool`` engine (in-memory SQLite), where
        every thread shares one connection and interleaved work would commit
        or roll back another thread's writes.
        """
        self.engine = engine
        self._local = threading.local()
        if serialize is None:
            serialize = isinstance(engine.pool, StaticPool)
        self._lock = threading.RLock() if serialize else None

    def _new_session(self) -> Session:
        return Session(bind=self.engine, future=True)

    def _active(self) -> _Tx | None:
        return getattr(self._local, "tx", None)

    # ---- transaction scope ---------------------------------------------
    @contextmanager
    def transaction(self) -> Iterator[str]:
        """
        Run one invocation in a single database transaction.

        • commit on normal exit
        • rollback on *any* exception, which is re-raised
          (SQLAlchemy failures as :class:`StorageError`)
        """
        if self._active() is not None:
            raise StorageError("a ledger transaction is already active")
        if self._lock is not None:
            self._lock.acquire()
        tx_id = uuid.uuid4().hex
        session = self._new_session()
        self._local.tx = _Tx(tx_id, session)
        try:
            yield tx_id
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise StorageError(f"transaction {tx_id} failed: {exc}") from exc
        except BaseException:
            session.rollback()
            raise
        finally:
            self._local.tx = None
            session.close()
            if self._lock is not None:
                self._lock.release()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        """
        • *Inside* ``transaction()`` → reuse the ambient session
        • *Outside*                   → short-lived Session, committed on exit
        """
        tx = self._active()
        if tx is not None:
            yield tx.session
            return
        with self._locked(), self._new_session() as s:
            yield s
            s.commit()

    def _locked(self):
        return self._lock if self._lock is not None else nullcontext()

    def _tx_id(self) -> str:
        tx = self._active()
        return tx.tx_id if tx is not None else uuid.uuid4().hex

    # ---- reads ---------------------------------------------------------
    def _latest(self, s: Session, key: str):
        q = (
            select(LedgerRow.version, LedgerRow.value, LedgerRow.is_delete)
            .where(LedgerRow.key == key)
            .order_by(LedgerRow.version.desc())
            .limit(1)
        )
        return s.execute(q).first()

    def get_versioned(self, key: str) -> tuple[bytes, int]:
        try:
            with self._session() as s:
                row = self._latest(s, key)
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to get state for {key}: {exc}") from exc
        if row is None:
            return b"", 0
        if row.is_delete:
            return b"", row.version
        return row.value or b"", row.version

    def get_state(self, key: str) -> bytes:
        value, _ = self.get_versioned(key)
        return value

    def _stream(self, q, what: str):
        with self._session() as s:
            try:
                result = s.execute(q)
                try:
                    yield from result
                finally:
                    result.close()
            except SQLAlchemyError as exc:
                raise StorageError(f"{what} failed: {exc}") from exc

    def range_query(self, start_key: str, end_key: str) -> Iterator[LedgerState]:
        bounds = []
        if start_key:
            bounds.append(LedgerRow.key >= start_key)
        if end_key:
            bounds.append(LedgerRow.key < end_key)

        latest = (
            select(
                LedgerRow.key.label("k"),
                func.max(LedgerRow.version).label("v"),
            )
            .where(*bounds)
            .group_by(LedgerRow.key)
        ).subquery()
        q = (
            select(LedgerRow.key, LedgerRow.value)
            .join(
                latest,
                and_(LedgerRow.key == latest.c.k, LedgerRow.version == latest.c.v),
            )
            .where(LedgerRow.is_delete.is_(False))
            .order_by(LedgerRow.key)
        )
        for key, value in self._stream(q, f"range query [{start_key}, {end_key})"):
            yield LedgerState(key, value or b"")

    def history_query(self, key: str) -> Iterator[KeyModification]:
        q = (
            select(
                LedgerRow.tx_id,
                LedgerRow.value,
                LedgerRow.ts_seconds,
                LedgerRow.ts_nanos,
                LedgerRow.is_delete,
            )
            .where(LedgerRow.key == key)
            .order_by(LedgerRow.version)
        )
        for tx_id, value, seconds, nanos, is_delete in self._stream(
            q, f"history query for {key}"
        ):
            yield KeyModification(
                tx_id, None if is_delete else value, seconds, nanos, bool(is_delete)
            )

    # ---- writes --------------------------------------------------------
    def _append(
        self, s: Session, key: str, version: int, value: bytes | None, is_delete: bool
    ) -> None:
        seconds, nanos = now_pair()
        s.execute(
            insert(LedgerRow).values(
                tx_id=self._tx_id(),
                key=key,
                version=version,
                value=value,
                is_delete=is_delete,
                ts_seconds=seconds,
                ts_nanos=nanos,
            )
        )

    def put_state(
        self, key: str, value: bytes, *, expected_version: int | None = None
    ) -> None:
        try:
            with self._session() as s:
                row = self._latest(s, key)
                current = row.version if row is not None else 0
                if expected_version is not None and current != expected_version:
                    raise ConflictError(key, expected_version, current)
                try:
                    self._append(s, key, current + 1, value, is_delete=False)
                except IntegrityError as exc:
                    # another writer took version current+1 first
                    raise ConflictError(key, current, current + 1) from exc
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to put state for {key}: {exc}") from exc

    def delete_state(self, key: str) -> None:
        """Append a tombstone; deleting an absent key is a no-op."""
        try:
            with self._session() as s:
                row = self._latest(s, key)
                if row is None or row.is_delete:
                    logger.debug("delete of absent key %s ignored", key)
                    return
                try:
                    self._append(s, key, row.version + 1, None, is_delete=True)
                except IntegrityError as exc:
                    raise ConflictError(key, row.version, row.version + 1) from exc
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to delete state: {exc}") from exc
