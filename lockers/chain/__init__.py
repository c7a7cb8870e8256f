"""
Locker chain collaborators.

This package provides:
- primitives: hashing helpers
- types: LockerStatus and LockerRecord
- clock: the monotonic height clock
- ledger: the custody ledger transfer primitive
- audit: the append-only, hash-linked audit log
"""

from .primitives import (
    hash_data,
    hash_text,
    canonical_json,
)

from .types import (
    AccountId,
    LockerStatus,
    LockerRecord,
    TERMINAL_STATUSES,
    NON_TERMINAL_STATUSES,
)

from .clock import HeightClock

from .ledger import (
    CustodyLedger,
    LedgerError,
    InsufficientFunds,
    TransferRejected,
)

from .audit import AuditEvent, AuditLog

__all__ = [
    # Primitives
    "hash_data",
    "hash_text",
    "canonical_json",
    # Types
    "AccountId",
    "LockerStatus",
    "LockerRecord",
    "TERMINAL_STATUSES",
    "NON_TERMINAL_STATUSES",
    # Clock
    "HeightClock",
    # Ledger
    "CustodyLedger",
    "LedgerError",
    "InsufficientFunds",
    "TransferRejected",
    # Audit
    "AuditEvent",
    "AuditLog",
]
