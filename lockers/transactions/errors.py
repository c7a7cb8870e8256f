"""
Locker operation errors.

Every guard failure raises one of these. The kind attribute is the stable,
coarse classification callers (and trace files) match against; subclasses
refine the message without changing the kind.
"""

from typing import Optional


class LockerError(Exception):
    """Base class for all locker operation failures."""
    kind = "LockerError"

    def __init__(self, message: str, locker_id: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.locker_id = locker_id

    def __str__(self) -> str:
        if self.locker_id is None:
            return f"{self.kind}: {self.message}"
        return f"{self.kind}: {self.message} (locker {self.locker_id})"


class NotFound(LockerError):
    """Referenced locker id was never assigned."""
    kind = "NotFound"


class Unauthorized(LockerError):
    """Caller is not in the operation's allowed role set."""
    kind = "Unauthorized"


class InvalidState(LockerError):
    """Locker status does not permit the requested transition."""
    kind = "InvalidState"


class Expired(LockerError):
    """Current height exceeds the locker's termination height."""
    kind = "Expired"


class NotYetExpired(Expired):
    """Reclaim attempted while the locker is still live."""


class TimelockActive(Expired):
    """Withdrawal attempted before the fixed delay has elapsed."""


class InvalidParameter(LockerError):
    """An argument violates its declared bound."""
    kind = "InvalidParameter"


class InvalidQuantity(InvalidParameter):
    """Locker quantity is zero, negative or not an integer."""


class TransferFailed(LockerError):
    """The custody ledger rejected a movement of value."""
    kind = "TransferFailed"


class SelfReferential(LockerError):
    """A party reference illegally equals originator, beneficiary, caller or custody."""
    kind = "SelfReferential"


ERROR_KINDS = {
    cls.kind: cls
    for cls in (
        NotFound, Unauthorized, InvalidState, Expired,
        InvalidParameter, TransferFailed, SelfReferential,
    )
}
