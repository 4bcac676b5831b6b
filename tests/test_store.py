"""
Tests for RecordStore lifecycle rules.
"""

from contextlib import closing

import pytest

from gadgetledger.core.record import SAMPLE_GADGETS, Gadget
from gadgetledger.core.store import RecordStore
from gadgetledger.errors import AlreadyExistsError, DecodeError, NotFoundError, StorageError
from gadgetledger.persistence.ledger import LedgerState


class FlakyRangeLedger:
    """Yields one key, then loses its cursor."""

    def __init__(self):
        self.closed = False

    def range_query(self, start_key, end_key):
        try:
            yield LedgerState(start_key, b"{}")
            raise StorageError(f"range query [{start_key}, {end_key}) failed: cursor lost")
        finally:
            self.closed = True


class TestCreateAndGet:
    def test_round_trip(self, store, gadget):
        store.create("G1", gadget)
        assert Gadget.from_bytes("G1", store.get("G1")) == gadget
        assert store.read("G1") == gadget

    def test_get_absent_is_empty(self, store):
        assert store.get("MISSING") == b""

    def test_read_absent_raises(self, store):
        with pytest.raises(NotFoundError):
            store.read("MISSING")

    def test_create_overwrites_by_default(self, store, gadget):
        store.create("G1", gadget)
        other = Gadget(make="Sony", model="Bravia10", colour="Black", owner="Karthick")
        store.create("G1", other)
        assert store.read("G1") == other

    def test_strict_create_refuses_existing_key(self, ledger, gadget):
        strict = RecordStore(ledger, allow_overwrite=False)
        strict.create("G1", gadget)
        with pytest.raises(AlreadyExistsError):
            strict.create("G1", gadget.with_owner("Tom"))
        assert strict.read("G1") == gadget

    def test_strict_create_allowed_after_delete(self, ledger, gadget):
        strict = RecordStore(ledger, allow_overwrite=False)
        strict.create("G1", gadget)
        strict.delete("G1")
        strict.create("G1", gadget)
        assert strict.read("G1") == gadget


class TestChangeOwner:
    def test_only_owner_changes(self, store, gadget):
        store.create("G1", gadget)
        updated = store.change_owner("G1", "Tom")
        current = store.read("G1")
        assert current == updated
        assert current.owner == "Tom"
        assert current.model_dump(exclude={"owner"}) == gadget.model_dump(exclude={"owner"})

    def test_absent_key_raises(self, store, ledger):
        with pytest.raises(NotFoundError):
            store.change_owner("MISSING", "Tom")
        assert ledger.get_state("MISSING") == b""

    def test_undecodable_value_raises(self, store, ledger):
        ledger.put_state("BAD", b"{not json")
        with pytest.raises(DecodeError):
            store.change_owner("BAD", "Tom")
        assert ledger.get_state("BAD") == b"{not json"

    def test_partial_record_gets_new_owner(self, store, ledger):
        ledger.put_state("P2", b'{"make":"Sony","colour":null}')
        updated = store.change_owner("P2", "Tom")
        assert updated == Gadget(make="Sony", model="", colour="", owner="Tom")
        assert store.read("P2") == updated


class TestDelete:
    def test_delete_clears_value(self, store, gadget):
        store.create("G1", gadget)
        store.delete("G1")
        assert store.get("G1") == b""

    def test_absent_key_raises_and_changes_nothing(self, store, ledger, gadget):
        store.create("G1", gadget)
        with pytest.raises(NotFoundError):
            store.delete("MISSING")
        assert store.read("G1") == gadget
        with closing(ledger.history_query("MISSING")) as it:
            assert list(it) == []

    def test_double_delete_raises(self, store, gadget):
        store.create("G1", gadget)
        store.delete("G1")
        with pytest.raises(NotFoundError):
            store.delete("G1")

    def test_undecodable_value_raises(self, store, ledger):
        ledger.put_state("BAD", b"\x00\x01")
        with pytest.raises(DecodeError):
            store.delete("BAD")
        assert ledger.get_state("BAD") == b"\x00\x01"

    def test_partial_record_can_be_deleted(self, store, ledger):
        ledger.put_state("P1", b'{"make":"Sony"}')
        store.delete("P1")
        assert store.get("P1") == b""


class TestRangeScan:
    def test_only_keys_in_interval(self, store, gadget):
        for key in ("A0", "A5", "A10", "A999", "B1", "0"):
            store.create(key, gadget)
        got = store.range_scan("A0", "A999")
        assert [k for k, _ in got] == ["A0", "A10", "A5"]
        assert all(Gadget.from_bytes(k, v) == gadget for k, v in got)

    def test_empty_namespace(self, store):
        assert store.range_scan("A0", "A999") == []

    def test_failure_mid_scan_raises_and_closes(self):
        flaky = FlakyRangeLedger()
        with pytest.raises(StorageError):
            RecordStore(flaky).range_scan("A0", "A999")
        assert flaky.closed


class TestSeed:
    def test_populates_eight_sequential_keys(self, store):
        keys = store.seed()
        assert keys == [f"GADGET{i}" for i in range(8)]
        for i, expected in enumerate(SAMPLE_GADGETS):
            assert store.read(f"GADGET{i}") == expected

    def test_twice_overwrites_without_error(self, store, ledger):
        store.seed()
        store.seed()
        assert len(store.range_scan("GADGET0", "GADGET999")) == 8
        with closing(ledger.history_query("GADGET3")) as it:
            assert len(list(it)) == 2

    def test_seed_ignores_strict_mode(self, ledger):
        strict = RecordStore(ledger, allow_overwrite=False)
        strict.seed()
        strict.seed()
        assert strict.read("GADGET0") == SAMPLE_GADGETS[0]
