"""
Locker Protocol

The complete public surface: lifecycle core plus disputes, timelocks and
the announce-only extension registry.
"""

from typing import Dict, Optional

from ..chain.audit import AuditLog
from ..chain.clock import HeightClock
from ..chain.ledger import CustodyLedger
from ..config import ProtocolConfig
from .disputes import DisputeOperations
from .extensions import ExtensionOperations
from .locker_lifecycle import LockerLifecycle
from .timelocks import TimelockOperations


class LockerProtocol(DisputeOperations, TimelockOperations, ExtensionOperations, LockerLifecycle):
    """Escrow lockers with dispute, timelock and administrative paths."""

    # Names callable by replayed actions (trace files, CLI). Every entry
    # takes the caller as its first argument.
    ACTIONS = (
        "create_locker",
        "accept_locker",
        "finalize_transfer",
        "repatriate",
        "originator_terminate",
        "extend_lifecycle",
        "reclaim_expired",
        "contest",
        "adjudicate",
        "suspend",
        "establish_graduated_release",
        "secure_pause",
        "process_timelock_withdrawal",
        "emergency_extraction",
        "register_multisig_requirement",
        "register_oracle_validation",
        "configure_rate_limit",
        "register_recovery_agent",
        "register_nonce",
        "delegate_audit",
        "rotate_controller",
    )

    def execute(self, action: str, caller: str, **params):
        """Dispatch a named action on behalf of a caller."""
        if action not in self.ACTIONS:
            raise ValueError(f"Unknown action: {action}")
        return getattr(self, action)(caller, **params)


def create_protocol(
    balances: Optional[Dict[str, int]] = None,
    config: Optional[ProtocolConfig] = None,
    start_height: int = 0,
) -> LockerProtocol:
    """Build a protocol with a fresh ledger, clock and audit log."""
    return LockerProtocol(
        ledger=CustodyLedger(balances),
        clock=HeightClock(start_height),
        audit=AuditLog(),
        config=config,
    )
