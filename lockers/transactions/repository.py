"""
Locker repository.

Owns the id -> LockerRecord map and the locker sequence. Every other
component reads and writes lockers through get()/set().
"""

from typing import Dict, Iterator, Optional

from ..chain.types import AccountId, LockerRecord, LockerStatus
from .errors import InvalidQuantity, InvalidState, NotFound


_IMMUTABLE_FIELDS = ("originator", "beneficiary", "resource_type", "genesis_height")


class LockerRepository:
    """Dict-backed store of locker records."""

    def __init__(self):
        self._records: Dict[int, LockerRecord] = {}
        self._sequence = 0

    @property
    def sequence(self) -> int:
        """Highest id assigned so far (0 before the first creation)."""
        return self._sequence

    def create(
        self,
        originator: AccountId,
        beneficiary: AccountId,
        resource_type: int,
        quantity: int,
        genesis_height: int,
        termination_height: int,
    ) -> int:
        """
        Store a new pending locker and return its id.

        Call only after the custody ledger accepted the inbound transfer.
        """
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
            raise InvalidQuantity(f"Locker quantity must be a positive integer, got {quantity!r}")

        locker_id = self._sequence + 1
        self._records[locker_id] = LockerRecord(
            locker_id=locker_id,
            originator=originator,
            beneficiary=beneficiary,
            resource_type=resource_type,
            quantity=quantity,
            status=LockerStatus.PENDING,
            genesis_height=genesis_height,
            termination_height=termination_height,
        )
        self._sequence = locker_id
        return locker_id

    def get(self, locker_id: int) -> Optional[LockerRecord]:
        return self._records.get(locker_id)

    def set(self, record: LockerRecord):
        """Replace a stored record. Identity fields cannot change."""
        current = self._records.get(record.locker_id)
        if current is None:
            raise NotFound(f"Locker {record.locker_id} was never created", locker_id=record.locker_id)
        for name in _IMMUTABLE_FIELDS:
            if getattr(current, name) != getattr(record, name):
                raise InvalidState(f"Field {name} is immutable", locker_id=record.locker_id)
        if record.termination_height < current.termination_height:
            raise InvalidState("Termination height cannot move backwards", locker_id=record.locker_id)
        if record.quantity < 0:
            raise InvalidState("Quantity cannot be negative", locker_id=record.locker_id)
        self._records[record.locker_id] = record

    def exists(self, locker_id: int) -> bool:
        """True iff the id was ever assigned, whatever the locker's status."""
        return isinstance(locker_id, int) and 1 <= locker_id <= self._sequence

    def all(self) -> Iterator[LockerRecord]:
        """Iterate records in id order."""
        for locker_id in range(1, self._sequence + 1):
            yield self._records[locker_id]

    def __len__(self) -> int:
        return self._sequence
