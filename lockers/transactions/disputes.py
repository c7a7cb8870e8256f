"""
Dispute & Adjudication

Either party can contest a live locker; the controller then resolves it by
splitting the quantity between originator and beneficiary.
"""

from dataclasses import replace
from typing import Tuple

from ..chain.types import AccountId
from .locker_lifecycle import reason_digest, require_int_in_range
from .transitions import Operation, next_status


def split_allocation(quantity: int, allocation: int) -> Tuple[int, int]:
    """
    Split a quantity by an originator allocation percentage.

    The originator share is floored; the beneficiary gets the remainder,
    so the two shares always add back up to the quantity.
    """
    originator_share = quantity * allocation // 100
    beneficiary_share = quantity - originator_share
    return originator_share, beneficiary_share


class DisputeOperations:
    """Contest and adjudicate. Mixed into LockerProtocol."""

    def contest(self, caller: AccountId, locker_id: int, reason: str) -> bool:
        """Raise a dispute on a live locker."""
        with self._transaction(Operation.CONTEST, caller, locker_id) as record:
            self._require_fresh(record)
            self._check_reason(reason)
            after = replace(record, status=next_status(Operation.CONTEST, record))
            self._commit(record, after, "locker-contested", caller, reason_hash=reason_digest(reason))
            return True

    def adjudicate(self, caller: AccountId, locker_id: int, allocation: int) -> Tuple[int, int]:
        """
        Resolve a dispute.

        allocation is the percentage (0-100) of the quantity returned to the
        originator. Both payouts go to the ledger as one batch. Returns
        (originator_share, beneficiary_share).
        """
        with self._transaction(Operation.ADJUDICATE, caller, locker_id) as record:
            self._require_fresh(record)
            require_int_in_range("allocation", allocation, 0, 100)

            originator_share, beneficiary_share = split_allocation(record.quantity, allocation)
            self._payout(record, [
                (record.originator, originator_share),
                (record.beneficiary, beneficiary_share),
            ])
            after = replace(record, status=next_status(Operation.ADJUDICATE, record), quantity=0)
            self._commit(
                record, after, "locker-adjudicated", caller,
                allocation=allocation,
                originator_share=originator_share,
                beneficiary_share=beneficiary_share,
            )
            return originator_share, beneficiary_share
