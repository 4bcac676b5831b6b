"""
Error taxonomy shared by the ledger, the record store and the dispatcher.

Every error carries a human-readable message (``str(err)``) and an HTTP
``status_code`` used by the runtime host.
"""

from __future__ import annotations


class GadgetError(Exception):
    """Base class – every operation failure surfaced to a caller."""

    status_code: int = 500


class ArgumentCountError(GadgetError):
    status_code = 400

    def __init__(self, expected: int, got: int | None = None):
        self.expected = expected
        self.got = got
        msg = f"Incorrect number of arguments. Expecting {expected}"
        if got is not None:
            msg += f", got {got}"
        super().__init__(msg)


class UnknownOperationError(GadgetError):
    status_code = 400

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Invalid smart contract function name: {name!r}")


class NotFoundError(GadgetError):
    status_code = 404

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"gadget does not exist: {key}")


class AlreadyExistsError(GadgetError):
    status_code = 409

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"gadget already exists: {key}")


class DecodeError(GadgetError):
    status_code = 422

    def __init__(self, key: str, reason: str = ""):
        self.key = key
        msg = f"Failed to decode JSON of: {key}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class StorageError(GadgetError):
    """Ledger read / write / iteration failure."""

    status_code = 500


class ConflictError(StorageError):
    """Versioned write lost the race: the key moved since it was read."""

    status_code = 409

    def __init__(self, key: str, expected: int, actual: int):
        self.key = key
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"version conflict on {key}: expected v{expected}, found v{actual}"
        )
