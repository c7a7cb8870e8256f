"""
Pytest configuration for locker tests.

Shared fixtures build a funded ledger, a height clock and a protocol whose
controller is "admin".
"""

import pytest

from lockers.chain.audit import AuditLog
from lockers.chain.clock import HeightClock
from lockers.chain.ledger import CustodyLedger
from lockers.config import ProtocolConfig
from lockers.transactions.locker_protocol import LockerProtocol


FUNDED = {
    "alice": 10_000,
    "bob": 1_000,
    "carol": 500,
    "admin": 0,
}


@pytest.fixture
def config():
    return ProtocolConfig(controller="admin")


@pytest.fixture
def clock():
    return HeightClock(start_height=100)


@pytest.fixture
def ledger():
    return CustodyLedger(dict(FUNDED))


@pytest.fixture
def audit():
    return AuditLog()


@pytest.fixture
def protocol(ledger, clock, audit, config):
    """A protocol over the shared ledger, clock and audit log."""
    return LockerProtocol(ledger=ledger, clock=clock, audit=audit, config=config)


@pytest.fixture
def locker(protocol):
    """A pending locker: alice -> bob, 1000 units, created at height 100."""
    return protocol.create_locker("alice", beneficiary="bob", resource_type=1, quantity=1000)


@pytest.fixture
def big_protocol(clock, audit, config):
    """A protocol with one very large account for threshold-gated operations."""
    ledger = CustodyLedger({"whale": 20_000_000, "bob": 0})
    return LockerProtocol(ledger=ledger, clock=clock, audit=audit, config=config)
