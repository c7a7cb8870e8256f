"""
Locker Lifecycle

The transaction core of the locker protocol. Every public operation runs
the same pipeline inside an exclusive per-locker lock:

    existence -> authorization -> status -> timing -> parameters
              -> ledger effect -> commit -> emit

A failure at any step raises before the commit, so a rejected call leaves
both the record and the ledger untouched. The ledger effect runs before
the commit and nothing else can run on the same locker in between.

Operations defined here cover creation and the plain release paths;
disputes, timelocks and announce-only registrations are mixed in from
sibling modules (see locker_protocol.LockerProtocol).
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import replace
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..chain.audit import AuditLog
from ..chain.clock import HeightClock
from ..chain.ledger import CustodyLedger, LedgerError
from ..chain.primitives import hash_text
from ..chain.types import AccountId, LockerRecord, LockerStatus
from ..config import ProtocolConfig
from .authorization import authorize, check_beneficiary_eligibility
from .errors import (
    Expired, InvalidParameter, InvalidQuantity, InvalidState,
    NotFound, SelfReferential, TransferFailed, Unauthorized,
)
from .repository import LockerRepository
from .transitions import Operation, check_status, next_status


logger = logging.getLogger(__name__)

PROTOCOL_LOCK = "__protocol__"


# =============================================================================
# Parameter checks
# =============================================================================

def require_int_in_range(name: str, value: Any, minimum: int, maximum: Optional[int] = None) -> int:
    """Raise InvalidParameter unless minimum <= value <= maximum."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidParameter(f"{name} must be an integer, got {value!r}")
    if value < minimum or (maximum is not None and value > maximum):
        bound = f"[{minimum}, {maximum}]" if maximum is not None else f">= {minimum}"
        raise InvalidParameter(f"{name} must be in {bound}, got {value}")
    return value


def require_account_id(name: str, value: Any) -> AccountId:
    """Raise InvalidParameter unless value is a non-empty account id string."""
    if not isinstance(value, str) or not value:
        raise InvalidParameter(f"{name} must be a non-empty account id, got {value!r}")
    return value


# =============================================================================
# Per-locker locks
# =============================================================================

class LockerLocks:
    """
    Exclusive locks keyed by locker id.

    Another thread waits for the holder to commit. The holding thread
    calling back into the same locker is refused instead of deadlocking.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[Any, threading.Lock] = {}
        self._owners: Dict[Any, int] = {}

    @contextmanager
    def hold(self, key):
        me = threading.get_ident()
        with self._guard:
            if self._owners.get(key) == me:
                locker_id = key if isinstance(key, int) else None
                raise InvalidState("Re-entrant call while an operation is in flight", locker_id=locker_id)
            lock = self._locks.setdefault(key, threading.Lock())

        lock.acquire()
        with self._guard:
            self._owners[key] = me
        try:
            yield
        finally:
            with self._guard:
                del self._owners[key]
            lock.release()


# =============================================================================
# Lifecycle core
# =============================================================================

class LockerLifecycle:
    """
    Core of the locker protocol.

    Collaborators are injected: the custody ledger, the height clock, the
    audit sink and the configuration (which carries the controller).
    """

    def __init__(
        self,
        ledger: CustodyLedger,
        clock: HeightClock,
        audit: Optional[AuditLog] = None,
        config: Optional[ProtocolConfig] = None,
        repository: Optional[LockerRepository] = None,
    ):
        self.ledger = ledger
        self.clock = clock
        self.audit = audit if audit is not None else AuditLog()
        self.config = config or ProtocolConfig()
        self.repository = repository or LockerRepository()
        self._locks = LockerLocks()

    @property
    def controller(self) -> AccountId:
        return self.config.controller

    @property
    def custody_account(self) -> AccountId:
        return self.config.custody_account

    @property
    def height(self) -> int:
        return self.clock.current

    # ─────────────────────────────────────────────────────────────────────────
    # Pipeline
    # ─────────────────────────────────────────────────────────────────────────

    def _load(self, locker_id: int) -> LockerRecord:
        if not self.repository.exists(locker_id):
            raise NotFound(f"Locker {locker_id!r} does not exist")
        return self.repository.get(locker_id)

    @contextmanager
    def _transaction(self, operation: Operation, caller: AccountId, locker_id: int) -> Iterator[LockerRecord]:
        """Hold the locker, then run existence, authorization and status guards."""
        # Ids are never reused or removed, so only assigned ids get a lock entry
        if not self.repository.exists(locker_id):
            raise NotFound(f"Locker {locker_id!r} does not exist")
        with self._locks.hold(locker_id):
            record = self._load(locker_id)
            authorize(operation, caller, record, self.controller)
            try:
                check_status(operation, record)
            except InvalidState:
                logger.debug("Rejected %s on locker %d in status %s",
                             operation.value, locker_id, record.status.value)
                raise
            yield record

    def _require_fresh(self, record: LockerRecord):
        """Raise Expired once the height has passed the termination height."""
        if record.is_expired_at(self.height):
            raise Expired(
                f"Height {self.height} is past termination height {record.termination_height}",
                locker_id=record.locker_id,
            )

    def _check_reason(self, reason: Any) -> str:
        if not isinstance(reason, str) or not reason.strip():
            raise InvalidParameter("Reason must be a non-empty string")
        if len(reason) > self.config.max_reason_length:
            raise InvalidParameter(
                f"Reason exceeds {self.config.max_reason_length} characters ({len(reason)})"
            )
        return reason

    def _payout(self, record: LockerRecord, legs: List[Tuple[AccountId, int]]):
        """
        Move custody value out for one locker as a single ledger batch.

        The legs never exceed the locker's own quantity. Zero legs are
        dropped; a batch with nothing left makes no ledger call.
        """
        if sum(amount for _, amount in legs) > record.quantity:
            raise InvalidState("Payout exceeds locker quantity", locker_id=record.locker_id)
        transfers = [
            (self.custody_account, recipient, amount)
            for recipient, amount in legs
            if amount > 0
        ]
        if not transfers:
            return
        try:
            self.ledger.transfer_batch(transfers)
        except LedgerError as e:
            raise TransferFailed(str(e), locker_id=record.locker_id) from e

    def _commit(self, before: LockerRecord, after: LockerRecord, event: str, caller: AccountId, **fields) -> LockerRecord:
        """Store the new record and emit its audit event."""
        self.repository.set(after)
        self.audit.append(
            event,
            height=self.height,
            locker_id=after.locker_id,
            caller=caller,
            originator=after.originator,
            beneficiary=after.beneficiary,
            **fields,
        )
        if before.status != after.status:
            logger.info("Locker %d %s -> %s by %s",
                        after.locker_id, before.status.value, after.status.value, caller)
        else:
            logger.info("Locker %d %s by %s", after.locker_id, event, caller)
        return after

    def _settle(
        self,
        operation: Operation,
        caller: AccountId,
        record: LockerRecord,
        recipient: AccountId,
        event: str,
    ) -> bool:
        """Pay the full quantity to one party and close the locker."""
        amount = record.quantity
        self._payout(record, [(recipient, amount)])
        after = replace(record, status=next_status(operation, record), quantity=0)
        self._commit(record, after, event, caller, recipient=recipient, amount=amount)
        return True

    # ─────────────────────────────────────────────────────────────────────────
    # Creation
    # ─────────────────────────────────────────────────────────────────────────

    def create_locker(
        self,
        caller: AccountId,
        beneficiary: AccountId,
        resource_type: int,
        quantity: int,
    ) -> int:
        """
        Fund a new locker from the caller's balance.

        Returns the new locker id. The inbound transfer happens before the
        repository assigns an id, so a ledger failure consumes no id.
        """
        with self._locks.hold(PROTOCOL_LOCK):
            require_account_id("beneficiary", beneficiary)
            check_beneficiary_eligibility(caller, beneficiary, self.custody_account)
            if caller == self.custody_account:
                raise SelfReferential("The custody account cannot originate a locker")
            require_int_in_range("resource_type", resource_type, 0)
            if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
                raise InvalidQuantity(f"Locker quantity must be a positive integer, got {quantity!r}")

            try:
                self.ledger.transfer(caller, self.custody_account, quantity)
            except LedgerError as e:
                raise TransferFailed(str(e)) from e

            genesis = self.height
            locker_id = self.repository.create(
                originator=caller,
                beneficiary=beneficiary,
                resource_type=resource_type,
                quantity=quantity,
                genesis_height=genesis,
                termination_height=genesis + self.config.default_duration,
            )
            self.audit.append(
                "locker-created",
                height=genesis,
                locker_id=locker_id,
                originator=caller,
                beneficiary=beneficiary,
                resource_type=resource_type,
                quantity=quantity,
                termination_height=genesis + self.config.default_duration,
            )
            logger.info("Locker %d created by %s for %s (%d)", locker_id, caller, beneficiary, quantity)
            return locker_id

    # ─────────────────────────────────────────────────────────────────────────
    # Release paths
    # ─────────────────────────────────────────────────────────────────────────

    def accept_locker(self, caller: AccountId, locker_id: int) -> bool:
        """Beneficiary acknowledges a pending locker."""
        with self._transaction(Operation.ACCEPT_LOCKER, caller, locker_id) as record:
            self._require_fresh(record)
            after = replace(record, status=next_status(Operation.ACCEPT_LOCKER, record))
            self._commit(record, after, "locker-accepted", caller)
            return True

    def finalize_transfer(self, caller: AccountId, locker_id: int) -> bool:
        """Release the full quantity to the beneficiary."""
        with self._transaction(Operation.FINALIZE_TRANSFER, caller, locker_id) as record:
            self._require_fresh(record)
            return self._settle(
                Operation.FINALIZE_TRANSFER, caller, record, record.beneficiary, "transfer-finalized",
            )

    def repatriate(self, caller: AccountId, locker_id: int) -> bool:
        """Controller returns a pending locker's funds to the originator."""
        with self._transaction(Operation.REPATRIATE, caller, locker_id) as record:
            return self._settle(
                Operation.REPATRIATE, caller, record, record.originator, "locker-repatriated",
            )

    def originator_terminate(self, caller: AccountId, locker_id: int) -> bool:
        """Originator cancels a live pending locker and takes the funds back."""
        with self._transaction(Operation.ORIGINATOR_TERMINATE, caller, locker_id) as record:
            self._require_fresh(record)
            return self._settle(
                Operation.ORIGINATOR_TERMINATE, caller, record, record.originator, "locker-terminated",
            )

    # ─────────────────────────────────────────────────────────────────────────
    # Administration
    # ─────────────────────────────────────────────────────────────────────────

    def rotate_controller(self, caller: AccountId, new_controller: AccountId) -> AccountId:
        """Hand the controller role to a new identity."""
        with self._locks.hold(PROTOCOL_LOCK):
            previous = self.controller
            if caller != previous:
                raise Unauthorized(f"{caller} may not rotate the controller")
            require_account_id("new_controller", new_controller)
            if new_controller == previous:
                raise SelfReferential(f"{new_controller} is already the controller")
            if new_controller == self.custody_account:
                raise SelfReferential("The custody account cannot be the controller")

            self.config = self.config.with_controller(new_controller)
            self.audit.append(
                "controller-rotated",
                height=self.height,
                previous_controller=previous,
                new_controller=new_controller,
            )
            logger.info("Controller rotated from %s to %s", previous, new_controller)
            return new_controller

    # ─────────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────────

    def get_locker(self, locker_id: int) -> LockerRecord:
        return self._load(locker_id)

    def get_status(self, locker_id: int) -> LockerStatus:
        return self._load(locker_id).status

    def is_expired(self, locker_id: int) -> bool:
        return self._load(locker_id).is_expired_at(self.height)

    def locker_count(self) -> int:
        return self.repository.sequence

    def lockers(self) -> Iterator[LockerRecord]:
        return self.repository.all()

    def custody_balance(self) -> int:
        return self.ledger.balance(self.custody_account)

    def custody_consistent(self) -> bool:
        """Custody balance equals the sum of every locker's quantity."""
        held = sum(record.quantity for record in self.repository.all())
        return held == self.custody_balance()


def reason_digest(reason: str) -> str:
    """Digest recorded in audit events in place of free-text reasons."""
    return hash_text(reason)
