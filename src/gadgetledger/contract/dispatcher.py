"""
Single invocation entry point: ``(function, args)`` ➜ :class:`Response`.

Each invocation runs inside one ledger transaction – committed on success,
rolled back on any error – and every :class:`GadgetError` is turned into an
error response carrying its message.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, List, Type

from pydantic import BaseModel

from ..core.encoder import encode_history, encode_range
from ..core.history import HistoryReconstructor
from ..core.record import Gadget, sample_key
from ..core.store import RecordStore
from ..errors import GadgetError
from ..persistence.ledger import Ledger
from .operations import (
    ChangeGadgetOwner,
    CreateGadget,
    DeleteGadget,
    GetGadgetHistory,
    InitLedger,
    Operation,
    QueryAllGadgets,
    QueryGadget,
    parse_operation,
)

logger = logging.getLogger(__name__)

RANGE_START = sample_key(0)
RANGE_END = sample_key(999)


class Status(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class Response(BaseModel):
    status: Status
    payload: bytes = b""
    message: str = ""
    status_code: int = 200

    model_config = {"frozen": True}

    @property
    def ok(self) -> bool:
        return self.status is Status.SUCCESS

    @classmethod
    def success(cls, payload: bytes = b"") -> "Response":
        return cls(status=Status.SUCCESS, payload=payload)

    @classmethod
    def error(cls, err: GadgetError) -> "Response":
        return cls(status=Status.ERROR, message=str(err), status_code=err.status_code)


class Dispatcher:
    def __init__(self, ledger: Ledger, *, allow_overwrite: bool = True):
        self.ledger = ledger
        self.store = RecordStore(ledger, allow_overwrite=allow_overwrite)
        self.history = HistoryReconstructor(ledger)
        self._handlers: Dict[Type[Operation], Callable[..., bytes]] = {
            QueryGadget: self._query_gadget,
            InitLedger: self._init_ledger,
            CreateGadget: self._create_gadget,
            QueryAllGadgets: self._query_all_gadgets,
            ChangeGadgetOwner: self._change_gadget_owner,
            GetGadgetHistory: self._get_gadget_history,
            DeleteGadget: self._delete_gadget,
        }

    def invoke(self, function: str, args: List[str]) -> Response:
        try:
            op = parse_operation(function, list(args))
            handler = self._handlers[type(op)]
            with self.ledger.transaction() as tx_id:
                logger.info("invoke %s tx=%s", function, tx_id)
                payload = handler(op)
        except GadgetError as err:
            logger.warning("%s failed: %s", function, err)
            return Response.error(err)
        return Response.success(payload)

    # ---- handlers ------------------------------------------------------
    def _query_gadget(self, op: QueryGadget) -> bytes:
        return self.store.get(op.key)

    def _init_ledger(self, op: InitLedger) -> bytes:
        keys = self.store.seed()
        logger.info("seeded %d gadgets", len(keys))
        return b""

    def _create_gadget(self, op: CreateGadget) -> bytes:
        gadget = Gadget(make=op.make, model=op.model, colour=op.colour, owner=op.owner)
        self.store.create(op.key, gadget)
        return b""

    def _query_all_gadgets(self, op: QueryAllGadgets) -> bytes:
        body = encode_range(self.store.range_scan(RANGE_START, RANGE_END))
        logger.debug("- queryAllGadgets:\n%s", body)
        return body.encode("utf-8")

    def _change_gadget_owner(self, op: ChangeGadgetOwner) -> bytes:
        self.store.change_owner(op.key, op.new_owner)
        return b""

    def _get_gadget_history(self, op: GetGadgetHistory) -> bytes:
        body = encode_history(self.history.history_raw(op.key))
        logger.debug("- getGadgetHistory returning:\n%s", body)
        return body.encode("utf-8")

    def _delete_gadget(self, op: DeleteGadget) -> bytes:
        self.store.delete(op.key)
        return b""
