"""
Locker transactions.

Each locker operation is one atomic transaction over a single locker
record, checked against the transition table and the caller's roles.
"""

from .errors import (
    LockerError,
    NotFound,
    Unauthorized,
    InvalidState,
    Expired,
    NotYetExpired,
    TimelockActive,
    InvalidParameter,
    InvalidQuantity,
    TransferFailed,
    SelfReferential,
    ERROR_KINDS,
)
from .transitions import Operation, Role, Transition, TRANSITIONS
from .repository import LockerRepository
from .disputes import split_allocation
from .locker_protocol import LockerProtocol, create_protocol

__all__ = [
    # Errors
    "LockerError",
    "NotFound",
    "Unauthorized",
    "InvalidState",
    "Expired",
    "NotYetExpired",
    "TimelockActive",
    "InvalidParameter",
    "InvalidQuantity",
    "TransferFailed",
    "SelfReferential",
    "ERROR_KINDS",
    # Transitions
    "Operation",
    "Role",
    "Transition",
    "TRANSITIONS",
    # Storage
    "LockerRepository",
    # Protocol
    "split_allocation",
    "LockerProtocol",
    "create_protocol",
]
