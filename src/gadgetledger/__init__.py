"""
Public surface for gadgetledger.
Importing this module does **not** touch the database; call
`gadgetledger.init_contract(engine)` (or `GadgetRuntime.init`) at start-up.
"""

from .bootstrap import init_contract, init_ledger, make_engine
from .contract.dispatcher import Dispatcher, Response, Status
from .core.history import HistoryReconstructor
from .core.record import Gadget, HistoryEntry
from .core.store import RecordStore
from .errors import (
    AlreadyExistsError,
    ArgumentCountError,
    ConflictError,
    DecodeError,
    GadgetError,
    NotFoundError,
    StorageError,
    UnknownOperationError,
)
from .persistence.ledger import Ledger, SqlLedger
from .runtime import GadgetRuntime

__all__ = [
    "Dispatcher",
    "Response",
    "Status",
    "RecordStore",
    "HistoryReconstructor",
    "Gadget",
    "HistoryEntry",
    "Ledger",
    "SqlLedger",
    "GadgetRuntime",
    "init_contract",
    "init_ledger",
    "make_engine",
    "GadgetError",
    "ArgumentCountError",
    "UnknownOperationError",
    "NotFoundError",
    "AlreadyExistsError",
    "DecodeError",
    "StorageError",
    "ConflictError",
]
