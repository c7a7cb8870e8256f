"""
Type definitions for lockers: statuses and the persisted locker record.
"""

from dataclasses import dataclass
from enum import Enum


AccountId = str


# =============================================================================
# Locker Status
# =============================================================================

class LockerStatus(Enum):
    """Lifecycle state of a locker."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    DISPUTED = "disputed"
    FROZEN = "frozen"
    PAUSED = "paused"
    GRADUATED = "graduated"
    MULTISIG_PENDING = "multisig-pending"
    WITHDRAWAL_PENDING = "withdrawal-pending"

    # Terminal
    COMPLETED = "completed"
    RETURNED = "returned"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    WITHDRAWN = "withdrawn"
    RESOLVED = "resolved"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({
    LockerStatus.COMPLETED,
    LockerStatus.RETURNED,
    LockerStatus.CANCELLED,
    LockerStatus.EXPIRED,
    LockerStatus.WITHDRAWN,
    LockerStatus.RESOLVED,
})

NON_TERMINAL_STATUSES = frozenset(s for s in LockerStatus if s not in TERMINAL_STATUSES)


# =============================================================================
# Locker Record
# =============================================================================

@dataclass(frozen=True)
class LockerRecord:
    """
    A single locker.

    Records are immutable; transitions build a replacement with
    dataclasses.replace() and commit it through the repository.
    """
    locker_id: int
    originator: AccountId
    beneficiary: AccountId
    resource_type: int
    quantity: int
    status: LockerStatus
    genesis_height: int
    termination_height: int

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def is_expired_at(self, height: int) -> bool:
        """True once the height has passed the termination height."""
        return height > self.termination_height

    def to_dict(self) -> dict:
        return {
            "locker_id": self.locker_id,
            "originator": self.originator,
            "beneficiary": self.beneficiary,
            "resource_type": self.resource_type,
            "quantity": self.quantity,
            "status": self.status.value,
            "genesis_height": self.genesis_height,
            "termination_height": self.termination_height,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'LockerRecord':
        return cls(
            locker_id=data["locker_id"],
            originator=data["originator"],
            beneficiary=data["beneficiary"],
            resource_type=data["resource_type"],
            quantity=data["quantity"],
            status=LockerStatus(data["status"]),
            genesis_height=data["genesis_height"],
            termination_height=data["termination_height"],
        )
