"""
Pytest configuration and fixtures for gadgetledger tests.
"""

import pytest

from gadgetledger.bootstrap import init_ledger, make_engine
from gadgetledger.contract.dispatcher import Dispatcher
from gadgetledger.core.history import HistoryReconstructor
from gadgetledger.core.record import Gadget
from gadgetledger.core.store import RecordStore


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test."""
    eng = make_engine("sqlite+pysqlite:///:memory:")
    yield eng
    eng.dispose()


@pytest.fixture
def ledger(engine):
    return init_ledger(engine)


@pytest.fixture
def store(ledger):
    return RecordStore(ledger)


@pytest.fixture
def history(ledger):
    return HistoryReconstructor(ledger)


@pytest.fixture
def dispatcher(ledger):
    return Dispatcher(ledger)


@pytest.fixture
def gadget():
    return Gadget(make="Apple", model="Ipod", colour="black", owner="Sravan")
