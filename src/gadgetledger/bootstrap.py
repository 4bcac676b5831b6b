"""
Single entry-point that wires SQLAlchemy into the gadget contract.
Call once at application start-up (``GadgetRuntime.init`` does it for you).
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from .contract.dispatcher import Dispatcher
from .persistence.ledger import SqlLedger
from .persistence.models import Base


def make_engine(database_url: str) -> Engine:
    """
    ``create_engine`` with the one SQLite tweak an in-memory ledger needs.

    ``:memory:`` is meant for tests and demos: it is a single shared
    connection, so ``SqlLedger`` runs its transactions and standalone calls
    one at a time.
    """
    if database_url.startswith("sqlite") and ":memory:" in database_url:
        # one shared connection, usable from the server's worker threads
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            future=True,
        )
    return create_engine(database_url, pool_pre_ping=True, future=True)


def init_ledger(engine: Engine) -> SqlLedger:
    """Create the ``ledger_entries`` table (if missing) and return a ledger."""
    Base.metadata.create_all(engine)
    return SqlLedger(engine)


def init_contract(engine: Engine, *, allow_overwrite: bool = True) -> Dispatcher:
    return Dispatcher(init_ledger(engine), allow_overwrite=allow_overwrite)
