"""
Timelock and delay operations.

Everything here is expressed as height arithmetic against the locker's
genesis and termination heights; nothing waits on wall-clock time.
"""

from dataclasses import replace

from ..chain.types import AccountId
from .errors import InvalidParameter, NotYetExpired, TimelockActive
from .locker_lifecycle import reason_digest, require_int_in_range
from .transitions import Operation, next_status


class TimelockOperations:
    """Extension, expiry, suspension, pause and delayed withdrawal. Mixed into LockerProtocol."""

    def extend_lifecycle(self, caller: AccountId, locker_id: int, extension: int) -> int:
        """Push the termination height forward. Returns the new termination height."""
        with self._transaction(Operation.EXTEND_LIFECYCLE, caller, locker_id) as record:
            require_int_in_range("extension", extension, 1, self.config.max_extension)
            after = replace(record, termination_height=record.termination_height + extension)
            self._commit(
                record, after, "lifecycle-extended", caller,
                extension=extension,
                previous_termination_height=record.termination_height,
                termination_height=after.termination_height,
            )
            return after.termination_height

    def reclaim_expired(self, caller: AccountId, locker_id: int) -> bool:
        """Return an expired locker's funds to the originator."""
        with self._transaction(Operation.RECLAIM_EXPIRED, caller, locker_id) as record:
            if not record.is_expired_at(self.height):
                raise NotYetExpired(
                    f"Locker runs until height {record.termination_height} (now {self.height})",
                    locker_id=locker_id,
                )
            return self._settle(
                Operation.RECLAIM_EXPIRED, caller, record, record.originator, "locker-expired",
            )

    def suspend(self, caller: AccountId, locker_id: int, reason: str = "suspended") -> bool:
        """Freeze a live locker."""
        with self._transaction(Operation.SUSPEND, caller, locker_id) as record:
            self._check_reason(reason)
            after = replace(record, status=next_status(Operation.SUSPEND, record))
            self._commit(record, after, "locker-suspended", caller, reason_hash=reason_digest(reason))
            return True

    def establish_graduated_release(self, caller: AccountId, locker_id: int, percentage: int) -> bool:
        """
        Mark a high-value pending locker for graduated release.

        Only the marker transition is recorded; the percentage travels in
        the audit event.
        """
        with self._transaction(Operation.ESTABLISH_GRADUATED_RELEASE, caller, locker_id) as record:
            if record.quantity <= self.config.high_value_threshold:
                raise InvalidParameter(
                    f"Quantity {record.quantity} does not exceed the high-value threshold "
                    f"{self.config.high_value_threshold}",
                    locker_id=locker_id,
                )
            require_int_in_range("percentage", percentage, 1, self.config.max_graduated_percentage)
            after = replace(record, status=next_status(Operation.ESTABLISH_GRADUATED_RELEASE, record))
            self._commit(record, after, "graduated-release-established", caller, percentage=percentage)
            return True

    def secure_pause(self, caller: AccountId, locker_id: int, duration: int) -> int:
        """Pause a locker and extend its termination by the pause duration."""
        with self._transaction(Operation.SECURE_PAUSE, caller, locker_id) as record:
            require_int_in_range("duration", duration, self.config.min_pause, self.config.max_pause)
            after = replace(
                record,
                status=next_status(Operation.SECURE_PAUSE, record),
                termination_height=record.termination_height + duration,
            )
            self._commit(
                record, after, "locker-paused", caller,
                duration=duration,
                termination_height=after.termination_height,
            )
            return after.termination_height

    def process_timelock_withdrawal(self, caller: AccountId, locker_id: int) -> bool:
        """
        Pay a withdrawal-pending locker back to the originator once the
        fixed delay after genesis has elapsed.

        No operation moves a locker into withdrawal-pending yet.
        """
        with self._transaction(Operation.PROCESS_TIMELOCK_WITHDRAWAL, caller, locker_id) as record:
            unlock_height = record.genesis_height + self.config.withdrawal_delay
            if self.height < unlock_height:
                raise TimelockActive(
                    f"Withdrawal unlocks at height {unlock_height} (now {self.height})",
                    locker_id=locker_id,
                )
            return self._settle(
                Operation.PROCESS_TIMELOCK_WITHDRAWAL, caller, record, record.originator,
                "timelock-withdrawal-processed",
            )

    def emergency_extraction(self, caller: AccountId, locker_id: int) -> int:
        """
        Controller pulls a large locker's funds back to the originator.

        The status is left as it was; the quantity drops to zero so the
        locker can never be paid out twice. Returns the amount extracted.
        """
        with self._transaction(Operation.EMERGENCY_EXTRACTION, caller, locker_id) as record:
            if record.quantity <= self.config.emergency_threshold:
                raise InvalidParameter(
                    f"Quantity {record.quantity} does not exceed the emergency threshold "
                    f"{self.config.emergency_threshold}",
                    locker_id=locker_id,
                )
            amount = record.quantity
            self._payout(record, [(record.originator, amount)])
            after = replace(record, quantity=0)
            self._commit(record, after, "emergency-extraction", caller, recipient=record.originator, amount=amount)
            return amount
