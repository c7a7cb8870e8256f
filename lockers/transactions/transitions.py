"""
Locker transition table.

One row per operation: which statuses it may start from, which roles may
call it, and the status it leaves the locker in (None keeps the status).
The authorization engine and the lifecycle engine both read this table;
nothing else decides whether an operation is legal.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import FrozenSet, Optional

from ..chain.types import LockerRecord, LockerStatus, NON_TERMINAL_STATUSES
from .errors import InvalidState


class Role(Enum):
    """Roles a caller can hold with respect to one locker."""
    ORIGINATOR = auto()
    BENEFICIARY = auto()
    CONTROLLER = auto()


class Operation(Enum):
    """Per-locker operations."""
    ACCEPT_LOCKER = "accept-locker"
    FINALIZE_TRANSFER = "finalize-transfer"
    REPATRIATE = "repatriate"
    ORIGINATOR_TERMINATE = "originator-terminate"
    EXTEND_LIFECYCLE = "extend-lifecycle"
    RECLAIM_EXPIRED = "reclaim-expired"
    CONTEST = "contest"
    ADJUDICATE = "adjudicate"
    SUSPEND = "suspend"
    ESTABLISH_GRADUATED_RELEASE = "establish-graduated-release"
    SECURE_PAUSE = "secure-pause"
    PROCESS_TIMELOCK_WITHDRAWAL = "process-timelock-withdrawal"
    EMERGENCY_EXTRACTION = "emergency-extraction"

    # Announce-only registrations
    REGISTER_MULTISIG = "register-multisig-requirement"
    REGISTER_ORACLE = "register-oracle-validation"
    CONFIGURE_RATE_LIMIT = "configure-rate-limit"
    REGISTER_RECOVERY_AGENT = "register-recovery-agent"
    REGISTER_NONCE = "register-nonce"
    DELEGATE_AUDIT = "delegate-audit"


@dataclass(frozen=True)
class Transition:
    """Static rules for one operation."""
    allowed_from: FrozenSet[LockerStatus]
    roles: FrozenSet[Role]
    target: Optional[LockerStatus] = None


O = Role.ORIGINATOR
B = Role.BENEFICIARY
C = Role.CONTROLLER

_PENDING = frozenset({LockerStatus.PENDING})
_LIVE = frozenset({LockerStatus.PENDING, LockerStatus.ACCEPTED})
_ANY = frozenset(LockerStatus)


TRANSITIONS = {
    Operation.ACCEPT_LOCKER: Transition(_PENDING, frozenset({B}), LockerStatus.ACCEPTED),
    Operation.FINALIZE_TRANSFER: Transition(_PENDING, frozenset({O, C}), LockerStatus.COMPLETED),
    Operation.REPATRIATE: Transition(_PENDING, frozenset({C}), LockerStatus.RETURNED),
    Operation.ORIGINATOR_TERMINATE: Transition(_PENDING, frozenset({O}), LockerStatus.CANCELLED),
    Operation.EXTEND_LIFECYCLE: Transition(_LIVE, frozenset({O, B, C})),
    Operation.RECLAIM_EXPIRED: Transition(_LIVE, frozenset({O, C}), LockerStatus.EXPIRED),
    Operation.CONTEST: Transition(_LIVE, frozenset({O, B}), LockerStatus.DISPUTED),
    Operation.ADJUDICATE: Transition(
        frozenset({LockerStatus.DISPUTED}), frozenset({C}), LockerStatus.RESOLVED,
    ),
    Operation.SUSPEND: Transition(_LIVE, frozenset({O, B, C}), LockerStatus.FROZEN),
    Operation.ESTABLISH_GRADUATED_RELEASE: Transition(
        _PENDING, frozenset({O}), LockerStatus.GRADUATED,
    ),
    Operation.SECURE_PAUSE: Transition(
        _LIVE | {LockerStatus.GRADUATED}, frozenset({O, B, C}), LockerStatus.PAUSED,
    ),
    Operation.PROCESS_TIMELOCK_WITHDRAWAL: Transition(
        frozenset({LockerStatus.WITHDRAWAL_PENDING}), frozenset({O, C}), LockerStatus.WITHDRAWN,
    ),
    Operation.EMERGENCY_EXTRACTION: Transition(
        _ANY - {LockerStatus.COMPLETED, LockerStatus.RETURNED, LockerStatus.EXPIRED},
        frozenset({C}),
    ),

    Operation.REGISTER_MULTISIG: Transition(_PENDING, frozenset({O})),
    Operation.REGISTER_ORACLE: Transition(_LIVE, frozenset({O, B})),
    Operation.CONFIGURE_RATE_LIMIT: Transition(NON_TERMINAL_STATUSES, frozenset({O, C})),
    Operation.REGISTER_RECOVERY_AGENT: Transition(NON_TERMINAL_STATUSES, frozenset({O})),
    Operation.REGISTER_NONCE: Transition(NON_TERMINAL_STATUSES, frozenset({O, B})),
    Operation.DELEGATE_AUDIT: Transition(_ANY, frozenset({O, C})),
}


def check_status(operation: Operation, record: LockerRecord) -> Transition:
    """Raise InvalidState unless the record's status allows the operation."""
    transition = TRANSITIONS[operation]
    if record.status not in transition.allowed_from:
        raise InvalidState(
            f"{operation.value} not allowed in status {record.status.value}",
            locker_id=record.locker_id,
        )
    return transition


def next_status(operation: Operation, record: LockerRecord) -> LockerStatus:
    """Status the record ends up in after the operation."""
    target = TRANSITIONS[operation].target
    return record.status if target is None else target
