"""
Tests for the Gadget record, sample set and timestamp rendering.
"""

import json

import pytest
from pydantic import ValidationError

from gadgetledger.core.record import (
    SAMPLE_GADGETS,
    Gadget,
    render_timestamp,
    sample_key,
)
from gadgetledger.errors import DecodeError


class TestGadget:
    def test_wire_form_is_compact_json_in_field_order(self, gadget):
        assert gadget.to_bytes() == (
            b'{"make":"Apple","model":"Ipod","colour":"black","owner":"Sravan"}'
        )

    def test_from_bytes_round_trip(self, gadget):
        assert Gadget.from_bytes("K", gadget.to_bytes()) == gadget

    def test_from_bytes_rejects_garbage(self):
        with pytest.raises(DecodeError) as exc:
            Gadget.from_bytes("BROKEN", b"not json at all")
        assert "BROKEN" in str(exc.value)

    def test_from_bytes_fills_missing_field(self):
        raw = json.dumps({"make": "Sony", "model": "X", "colour": "red"}).encode()
        assert Gadget.from_bytes("K", raw) == Gadget(make="Sony", model="X", colour="red", owner="")

    def test_from_bytes_null_field_reads_empty(self):
        raw = b'{"make":"Sony","model":"X","colour":null,"owner":"Tom"}'
        assert Gadget.from_bytes("K", raw).colour == ""

    def test_from_bytes_empty_object(self):
        assert Gadget.from_bytes("K", b"{}") == Gadget(make="", model="", colour="", owner="")

    def test_from_bytes_rejects_non_object(self):
        with pytest.raises(DecodeError):
            Gadget.from_bytes("K", b'["Sony"]')

    def test_from_bytes_rejects_non_string_field(self):
        with pytest.raises(DecodeError):
            Gadget.from_bytes("K", b'{"make":42}')

    def test_direct_construction_still_requires_every_field(self):
        with pytest.raises(ValidationError):
            Gadget(make="Sony")

    def test_from_bytes_rejects_empty(self):
        with pytest.raises(DecodeError):
            Gadget.from_bytes("K", b"")

    def test_with_owner_keeps_other_fields(self, gadget):
        moved = gadget.with_owner("Tom")
        assert moved.owner == "Tom"
        assert (moved.make, moved.model, moved.colour) == ("Apple", "Ipod", "black")
        assert gadget.owner == "Sravan"

    def test_gadget_is_frozen(self, gadget):
        with pytest.raises(ValidationError):
            gadget.owner = "Mallory"


class TestSampleSet:
    def test_eight_fixed_records(self):
        assert len(SAMPLE_GADGETS) == 8
        assert SAMPLE_GADGETS[0] == Gadget(
            make="Samsung", model="GalS10", colour="blue", owner="Shyam"
        )
        assert SAMPLE_GADGETS[7].owner == "Akram"

    def test_sequential_keys(self):
        assert [sample_key(i) for i in range(3)] == ["GADGET0", "GADGET1", "GADGET2"]


class TestRenderTimestamp:
    def test_epoch(self):
        assert render_timestamp(0, 0) == "1970-01-01 00:00:00.000000000 +0000 UTC"

    def test_fraction_keeps_trailing_zeros(self):
        assert render_timestamp(0, 500_000_000) == "1970-01-01 00:00:00.500000000 +0000 UTC"

    def test_nanos_are_zero_padded(self):
        assert render_timestamp(1561975200, 42) == "2019-07-01 10:00:00.000000042 +0000 UTC"
