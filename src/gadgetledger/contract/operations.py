"""
Closed set of contract operations.  Each one is a pydantic model whose
fields, in declaration order, are its positional string arguments.

    op = parse_operation("createGadget", ["G1", "Apple", "Ipod", "black", "Tom"])
    # ➜ CreateGadget(key="G1", make="Apple", ...)
"""

from __future__ import annotations

from typing import ClassVar, Dict, List, Sequence, Type

from pydantic import BaseModel

from ..errors import ArgumentCountError, UnknownOperationError


class Operation(BaseModel):
    name: ClassVar[str] = ""
    model_config = {"frozen": True}

    @classmethod
    def arity(cls) -> int:
        return len(cls.model_fields)

    @classmethod
    def from_args(cls, args: Sequence[str]) -> "Operation":
        expected = cls.arity()
        if len(args) != expected:
            raise ArgumentCountError(expected, len(args))
        return cls(**dict(zip(cls.model_fields, args)))


class QueryGadget(Operation):
    name: ClassVar[str] = "queryGadget"
    key: str


class InitLedger(Operation):
    name: ClassVar[str] = "initLedger"


class CreateGadget(Operation):
    name: ClassVar[str] = "createGadget"
    key: str
    make: str
    model: str
    colour: str
    owner: str


class QueryAllGadgets(Operation):
    name: ClassVar[str] = "queryAllGadgets"


class ChangeGadgetOwner(Operation):
    name: ClassVar[str] = "changeGadgetOwner"
    key: str
    new_owner: str


class GetGadgetHistory(Operation):
    name: ClassVar[str] = "getGadgetHistory"
    key: str


class DeleteGadget(Operation):
    name: ClassVar[str] = "deleteGadget"
    key: str


OPERATIONS: Dict[str, Type[Operation]] = {
    op.name: op
    for op in (
        QueryGadget,
        InitLedger,
        CreateGadget,
        QueryAllGadgets,
        ChangeGadgetOwner,
        GetGadgetHistory,
        DeleteGadget,
    )
}


def parse_operation(function: str, args: List[str]) -> Operation:
    try:
        op_cls = OPERATIONS[function]
    except KeyError:
        raise UnknownOperationError(function) from None
    return op_cls.from_args(args)
