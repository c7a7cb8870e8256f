"""
Authorization engine.

Resolves which roles a caller holds on a locker and checks them against
the operation's allow-set. The check never looks at the locker's status,
so an unauthorized caller gets the same answer whatever state the locker
is in.
"""

import logging
from typing import Iterable, Set

from ..chain.types import AccountId, LockerRecord
from .errors import SelfReferential, Unauthorized
from .transitions import Operation, Role, TRANSITIONS


logger = logging.getLogger(__name__)


def roles_of(caller: AccountId, record: LockerRecord, controller: AccountId) -> Set[Role]:
    """All roles the caller holds on this locker."""
    roles = set()
    if caller == record.originator:
        roles.add(Role.ORIGINATOR)
    if caller == record.beneficiary:
        roles.add(Role.BENEFICIARY)
    if caller == controller:
        roles.add(Role.CONTROLLER)
    return roles


def authorize(
    operation: Operation,
    caller: AccountId,
    record: LockerRecord,
    controller: AccountId,
) -> Set[Role]:
    """
    Check the caller against the operation's allow-set.

    Returns the caller's matching roles; raises Unauthorized if none match.
    """
    held = roles_of(caller, record, controller)
    granted = held & TRANSITIONS[operation].roles
    if not granted:
        logger.debug("Rejected %s by %s on locker %d", operation.value, caller, record.locker_id)
        raise Unauthorized(f"{caller} may not call {operation.value}", locker_id=record.locker_id)
    return granted


def check_beneficiary_eligibility(
    caller: AccountId,
    beneficiary: AccountId,
    custody_account: AccountId,
):
    """A locker cannot pay its own creator or the custody account."""
    if beneficiary == caller:
        raise SelfReferential(f"Beneficiary {beneficiary} is the originator")
    if beneficiary == custody_account:
        raise SelfReferential(f"Beneficiary {beneficiary} is the custody account")


def check_distinct_party(
    label: str,
    party: AccountId,
    record: LockerRecord,
    caller: AccountId,
    also_excluded: Iterable[AccountId] = (),
):
    """Raise SelfReferential if a third-party reference collides with a locker party."""
    excluded = {
        "originator": record.originator,
        "beneficiary": record.beneficiary,
        "caller": caller,
    }
    for name, account in excluded.items():
        if party == account:
            raise SelfReferential(f"{label} {party} is the locker's {name}", locker_id=record.locker_id)
    if party in set(also_excluded):
        raise SelfReferential(f"{label} {party} is a reserved account", locker_id=record.locker_id)
