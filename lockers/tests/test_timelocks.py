"""
Unit tests for extension, expiry, suspension, pause, graduated release,
timelock withdrawal and emergency extraction.
"""

import pytest
from dataclasses import replace

from lockers.chain.types import LockerStatus
from lockers.transactions.errors import (
    Expired,
    InvalidParameter,
    InvalidState,
    NotYetExpired,
    TimelockActive,
    Unauthorized,
)


# =============================================================================
# Lifecycle Extension & Expiry
# =============================================================================

class TestExtendLifecycle:
    """Tests for extend_lifecycle."""

    def test_extension_accumulates(self, protocol, locker):
        """Each party can push the termination height forward."""
        start = protocol.get_locker(locker).termination_height
        assert protocol.extend_lifecycle("alice", locker, 10) == start + 10
        assert protocol.extend_lifecycle("bob", locker, 20) == start + 30
        assert protocol.extend_lifecycle("admin", locker, 1) == start + 31

    def test_extension_bounds(self, protocol, locker):
        """Extensions must be in [1, max_extension]."""
        for extension in (0, -5, protocol.config.max_extension + 1):
            with pytest.raises(InvalidParameter):
                protocol.extend_lifecycle("alice", locker, extension)
        protocol.extend_lifecycle("alice", locker, protocol.config.max_extension)

    def test_stranger_cannot_extend(self, protocol, locker):
        """Only parties and the controller may extend."""
        with pytest.raises(Unauthorized):
            protocol.extend_lifecycle("carol", locker, 10)

    def test_terminal_cannot_extend(self, protocol, locker):
        """Closed lockers cannot be extended."""
        protocol.finalize_transfer("alice", locker)
        with pytest.raises(InvalidState):
            protocol.extend_lifecycle("alice", locker, 10)


class TestReclaimExpired:
    """Tests for reclaim_expired."""

    def test_reclaim_after_expiry(self, protocol, clock, ledger, locker):
        """An expired locker refunds the originator."""
        clock.advance_to(protocol.get_locker(locker).termination_height + 1)
        assert protocol.reclaim_expired("alice", locker) is True
        assert protocol.get_status(locker) == LockerStatus.EXPIRED
        assert ledger.balance("alice") == 10_000

    def test_reclaim_too_early(self, protocol, clock, locker):
        """Reclaim at the termination height is still too early."""
        clock.advance_to(protocol.get_locker(locker).termination_height)
        with pytest.raises(NotYetExpired):
            protocol.reclaim_expired("alice", locker)
        with pytest.raises(Expired):
            protocol.reclaim_expired("admin", locker)

    def test_beneficiary_cannot_reclaim(self, protocol, clock, locker):
        """Reclaim is for the originator and the controller."""
        clock.advance(5_000)
        with pytest.raises(Unauthorized):
            protocol.reclaim_expired("bob", locker)

    def test_extension_delays_reclaim(self, protocol, clock, locker):
        """Extending moves the expiry point."""
        termination = protocol.get_locker(locker).termination_height
        protocol.extend_lifecycle("bob", locker, 100)
        clock.advance_to(termination + 1)
        with pytest.raises(NotYetExpired):
            protocol.reclaim_expired("alice", locker)
        clock.advance_to(termination + 101)
        protocol.reclaim_expired("admin", locker)


# =============================================================================
# Suspension & Pause
# =============================================================================

class TestSuspendAndPause:
    """Tests for suspend and secure_pause."""

    def test_suspend_freezes(self, protocol, audit, locker):
        """Suspend moves a live locker to frozen."""
        assert protocol.suspend("bob", locker, "investigating") is True
        assert protocol.get_status(locker) == LockerStatus.FROZEN
        assert audit.by_name("locker-suspended")[0].fields["caller"] == "bob"

    def test_frozen_blocks_release(self, protocol, locker):
        """A frozen locker cannot be finalized or suspended again."""
        protocol.suspend("admin", locker)
        with pytest.raises(InvalidState):
            protocol.finalize_transfer("alice", locker)
        with pytest.raises(InvalidState):
            protocol.suspend("admin", locker)

    def test_pause_extends_termination(self, protocol, locker):
        """secure_pause adds the duration to the termination height."""
        start = protocol.get_locker(locker).termination_height
        assert protocol.secure_pause("bob", locker, 10) == start + 10
        assert protocol.get_status(locker) == LockerStatus.PAUSED

    def test_pause_bounds(self, protocol, locker):
        """Pause duration must be within [min_pause, max_pause]."""
        for duration in (protocol.config.min_pause - 1, protocol.config.max_pause + 1):
            with pytest.raises(InvalidParameter):
                protocol.secure_pause("alice", locker, duration)

    def test_pause_twice(self, protocol, locker):
        """A paused locker cannot be paused again."""
        protocol.secure_pause("alice", locker, 20)
        with pytest.raises(InvalidState):
            protocol.secure_pause("alice", locker, 20)


# =============================================================================
# High-value Paths
# =============================================================================

class TestGraduatedRelease:
    """Tests for establish_graduated_release."""

    def test_small_locker_rejected(self, protocol, locker):
        """Lockers at or below the high-value threshold cannot graduate."""
        with pytest.raises(InvalidParameter):
            protocol.establish_graduated_release("alice", locker, 10)

    def test_large_locker_graduates(self, big_protocol):
        """A high-value pending locker moves to graduated and can then be paused."""
        locker_id = big_protocol.create_locker("whale", beneficiary="bob", resource_type=1, quantity=2_000_000)
        assert big_protocol.establish_graduated_release("whale", locker_id, 25) is True
        assert big_protocol.get_status(locker_id) == LockerStatus.GRADUATED
        big_protocol.secure_pause("bob", locker_id, 100)
        assert big_protocol.get_status(locker_id) == LockerStatus.PAUSED

    def test_percentage_bounds(self, big_protocol):
        """Percentage must be in [1, max_graduated_percentage]."""
        locker_id = big_protocol.create_locker("whale", beneficiary="bob", resource_type=1, quantity=2_000_000)
        for percentage in (0, big_protocol.config.max_graduated_percentage + 1):
            with pytest.raises(InvalidParameter):
                big_protocol.establish_graduated_release("whale", locker_id, percentage)
        with pytest.raises(Unauthorized):
            big_protocol.establish_graduated_release("admin", locker_id, 10)


class TestEmergencyExtraction:
    """Tests for emergency_extraction."""

    def test_extraction_refunds_originator(self, big_protocol):
        """The controller pulls the funds; the status stays put."""
        locker_id = big_protocol.create_locker("whale", beneficiary="bob", resource_type=1, quantity=6_000_000)
        big_protocol.suspend("bob", locker_id)
        assert big_protocol.emergency_extraction("admin", locker_id) == 6_000_000

        record = big_protocol.get_locker(locker_id)
        assert record.status == LockerStatus.FROZEN
        assert record.quantity == 0
        assert big_protocol.ledger.balance("whale") == 20_000_000
        assert big_protocol.custody_consistent()

    def test_extraction_cannot_repeat(self, big_protocol):
        """Once drained, the locker falls below the threshold."""
        locker_id = big_protocol.create_locker("whale", beneficiary="bob", resource_type=1, quantity=6_000_000)
        big_protocol.emergency_extraction("admin", locker_id)
        with pytest.raises(InvalidParameter):
            big_protocol.emergency_extraction("admin", locker_id)

    def test_threshold_and_role(self, big_protocol):
        """Only the controller, and only above the emergency threshold."""
        small = big_protocol.create_locker("whale", beneficiary="bob", resource_type=1, quantity=5_000_000)
        with pytest.raises(InvalidParameter):
            big_protocol.emergency_extraction("admin", small)
        large = big_protocol.create_locker("whale", beneficiary="bob", resource_type=1, quantity=5_000_001)
        with pytest.raises(Unauthorized):
            big_protocol.emergency_extraction("whale", large)

    def test_not_after_completion(self, big_protocol):
        """Completed lockers are out of reach."""
        locker_id = big_protocol.create_locker("whale", beneficiary="bob", resource_type=1, quantity=6_000_000)
        big_protocol.finalize_transfer("whale", locker_id)
        with pytest.raises(InvalidState):
            big_protocol.emergency_extraction("admin", locker_id)


# =============================================================================
# Timelock Withdrawal
# =============================================================================

class TestTimelockWithdrawal:
    """Tests for process_timelock_withdrawal."""

    @pytest.fixture
    def withdrawal_locker(self, protocol, locker):
        record = protocol.repository.get(locker)
        protocol.repository.set(replace(record, status=LockerStatus.WITHDRAWAL_PENDING))
        return locker

    def test_unreachable_through_operations(self, protocol, locker):
        """A pending locker is not withdrawal-pending."""
        with pytest.raises(InvalidState):
            protocol.process_timelock_withdrawal("alice", locker)

    def test_delay_enforced(self, protocol, clock, withdrawal_locker):
        """Withdrawal waits for genesis + withdrawal_delay."""
        genesis = protocol.get_locker(withdrawal_locker).genesis_height
        clock.advance_to(genesis + protocol.config.withdrawal_delay - 1)
        with pytest.raises(TimelockActive):
            protocol.process_timelock_withdrawal("alice", withdrawal_locker)

    def test_withdrawal(self, protocol, clock, ledger, withdrawal_locker):
        """After the delay the originator is refunded."""
        genesis = protocol.get_locker(withdrawal_locker).genesis_height
        clock.advance_to(genesis + protocol.config.withdrawal_delay)
        assert protocol.process_timelock_withdrawal("admin", withdrawal_locker) is True
        assert protocol.get_status(withdrawal_locker) == LockerStatus.WITHDRAWN
        assert ledger.balance("alice") == 10_000
