"""
Unit tests for announce-only registrations.
"""

import pytest

from lockers.chain.types import LockerStatus
from lockers.transactions.errors import (
    InvalidParameter,
    InvalidState,
    SelfReferential,
    Unauthorized,
)
from lockers.transactions.extensions import MAX_NONCE, MAX_SIGNERS


class TestMultisig:
    """Tests for register_multisig_requirement."""

    def test_register(self, protocol, audit, locker):
        """Registration writes an event and changes nothing else."""
        before = protocol.get_locker(locker)
        assert protocol.register_multisig_requirement("alice", locker, ["dave", "erin"], 2) is True
        assert protocol.get_locker(locker) == before
        [event] = audit.by_name("multisig-registered")
        assert event.fields["signers"] == ["dave", "erin"]
        assert event.fields["threshold"] == 2

    def test_bounds(self, protocol, locker):
        """Signer list and threshold are validated."""
        with pytest.raises(InvalidParameter):
            protocol.register_multisig_requirement("alice", locker, [], 1)
        with pytest.raises(InvalidParameter):
            protocol.register_multisig_requirement("alice", locker, [f"s{i}" for i in range(MAX_SIGNERS + 1)], 1)
        with pytest.raises(InvalidParameter):
            protocol.register_multisig_requirement("alice", locker, ["dave", "dave"], 1)
        with pytest.raises(InvalidParameter):
            protocol.register_multisig_requirement("alice", locker, ["dave", "erin"], 3)
        with pytest.raises(SelfReferential):
            protocol.register_multisig_requirement("alice", locker, ["custody"], 1)

    def test_originator_only_while_pending(self, protocol, locker):
        """Only the originator, and only on a pending locker."""
        with pytest.raises(Unauthorized):
            protocol.register_multisig_requirement("bob", locker, ["dave"], 1)
        protocol.accept_locker("bob", locker)
        with pytest.raises(InvalidState):
            protocol.register_multisig_requirement("alice", locker, ["dave"], 1)


class TestOracleAndRecovery:
    """Tests for oracle and recovery-agent registrations."""

    def test_oracle(self, protocol, locker):
        """Either party may register an oracle with a hex condition hash."""
        assert protocol.register_oracle_validation("bob", locker, "oracle-1", "deadbeef") is True
        with pytest.raises(InvalidParameter):
            protocol.register_oracle_validation("bob", locker, "oracle-1", "not-hex")
        with pytest.raises(SelfReferential):
            protocol.register_oracle_validation("alice", locker, "bob", "deadbeef")

    def test_recovery_agent(self, protocol, locker):
        """Recovery agents are third parties with a bounded delay."""
        assert protocol.register_recovery_agent("alice", locker, "ivy", 24) is True
        with pytest.raises(InvalidParameter):
            protocol.register_recovery_agent("alice", locker, "ivy", 23)
        with pytest.raises(SelfReferential):
            protocol.register_recovery_agent("alice", locker, "alice", 48)
        with pytest.raises(Unauthorized):
            protocol.register_recovery_agent("bob", locker, "ivy", 48)

    def test_party_ids_must_be_account_ids(self, protocol, locker, audit):
        """Oracle, agent and auditor must be non-empty account id strings."""
        with pytest.raises(InvalidParameter):
            protocol.register_oracle_validation("bob", locker, None, "abc")
        with pytest.raises(InvalidParameter):
            protocol.register_recovery_agent("alice", locker, 123, 48)
        with pytest.raises(InvalidParameter):
            protocol.delegate_audit("admin", locker, "", "full")
        for name in ("oracle-registered", "recovery-agent-registered", "audit-delegated"):
            assert audit.by_name(name) == []


class TestRateLimitNonceAudit:
    """Tests for rate limit, nonce and audit delegation."""

    def test_rate_limit(self, protocol, locker):
        """Controller or originator may configure a rate limit."""
        assert protocol.configure_rate_limit("admin", locker, 10, 144) is True
        with pytest.raises(InvalidParameter):
            protocol.configure_rate_limit("alice", locker, 0, 144)
        with pytest.raises(InvalidParameter):
            protocol.configure_rate_limit("alice", locker, 10, 0)

    def test_nonce(self, protocol, locker):
        """Nonces are positive 64-bit integers."""
        assert protocol.register_nonce("bob", locker, MAX_NONCE) is True
        with pytest.raises(InvalidParameter):
            protocol.register_nonce("bob", locker, 0)
        with pytest.raises(InvalidParameter):
            protocol.register_nonce("bob", locker, MAX_NONCE + 1)

    def test_audit_delegation_on_terminal_locker(self, protocol, locker):
        """Audit delegation is allowed in every status."""
        protocol.finalize_transfer("alice", locker)
        assert protocol.get_status(locker) == LockerStatus.COMPLETED
        assert protocol.delegate_audit("admin", locker, "judy", "full") is True
        with pytest.raises(InvalidParameter):
            protocol.delegate_audit("admin", locker, "judy", "everything")
        with pytest.raises(Unauthorized):
            protocol.delegate_audit("bob", locker, "judy", "full")

    def test_registrations_do_not_gate_release(self, protocol, ledger, locker):
        """A locker with every registration still finalizes normally."""
        protocol.register_multisig_requirement("alice", locker, ["dave", "erin"], 2)
        protocol.register_oracle_validation("alice", locker, "oracle-1", "abc123")
        protocol.configure_rate_limit("admin", locker, 1, 1)
        protocol.register_recovery_agent("alice", locker, "ivy", 24)
        protocol.register_nonce("alice", locker, 1)
        protocol.finalize_transfer("admin", locker)
        assert ledger.balance("bob") == 2_000
