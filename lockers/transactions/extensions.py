"""
Extension Registry

Announce-only registrations. Each call checks the caller's role, the
locker's status and its own parameters, then writes an audit event and
nothing else: no state is stored and no other operation consults these
registrations. Enforcement, if any, happens off-protocol by whoever reads
the audit log.
"""

from typing import Sequence

from ..chain.primitives import is_hex_digest
from ..chain.types import AccountId
from .authorization import check_distinct_party
from .errors import InvalidParameter, SelfReferential
from .locker_lifecycle import require_account_id, require_int_in_range
from .transitions import Operation


MAX_SIGNERS = 10
MAX_RATE_LIMIT_OPERATIONS = 100
MAX_RATE_LIMIT_WINDOW = 1440
MIN_RECOVERY_DELAY = 24
MAX_RECOVERY_DELAY = 4320
MAX_NONCE = 2 ** 64 - 1
AUDIT_SCOPES = ("balances", "events", "full")


class ExtensionOperations:
    """Declarative registrations. Mixed into LockerProtocol."""

    def _announce(self, operation: Operation, caller: AccountId, locker_id: int, event: str, check, **fields) -> bool:
        with self._transaction(operation, caller, locker_id) as record:
            check(record)
            self.audit.append(
                event,
                height=self.height,
                locker_id=locker_id,
                caller=caller,
                **fields,
            )
            return True

    def register_multisig_requirement(
        self,
        caller: AccountId,
        locker_id: int,
        signers: Sequence[AccountId],
        threshold: int,
    ) -> bool:
        def check(record):
            if not isinstance(signers, (list, tuple)) or not 1 <= len(signers) <= MAX_SIGNERS:
                raise InvalidParameter(f"signers must be a list of 1 to {MAX_SIGNERS} accounts", locker_id=locker_id)
            if not all(isinstance(s, str) and s for s in signers):
                raise InvalidParameter("signers must be non-empty account ids", locker_id=locker_id)
            if len(set(signers)) != len(signers):
                raise InvalidParameter("signers must be unique", locker_id=locker_id)
            if self.custody_account in signers:
                raise SelfReferential("The custody account cannot be a signer", locker_id=locker_id)
            require_int_in_range("threshold", threshold, 1, len(signers))

        return self._announce(
            Operation.REGISTER_MULTISIG, caller, locker_id, "multisig-registered", check,
            signers=list(signers) if isinstance(signers, (list, tuple)) else signers,
            threshold=threshold,
        )

    def register_oracle_validation(
        self,
        caller: AccountId,
        locker_id: int,
        oracle: AccountId,
        condition_hash: str,
    ) -> bool:
        def check(record):
            require_account_id("oracle", oracle)
            check_distinct_party("Oracle", oracle, record, caller, also_excluded=[self.custody_account])
            if not is_hex_digest(condition_hash):
                raise InvalidParameter("condition_hash must be 1 to 64 hex characters", locker_id=locker_id)

        return self._announce(
            Operation.REGISTER_ORACLE, caller, locker_id, "oracle-registered", check,
            oracle=oracle,
            condition_hash=condition_hash,
        )

    def configure_rate_limit(
        self,
        caller: AccountId,
        locker_id: int,
        max_operations: int,
        window: int,
    ) -> bool:
        def check(record):
            require_int_in_range("max_operations", max_operations, 1, MAX_RATE_LIMIT_OPERATIONS)
            require_int_in_range("window", window, 1, MAX_RATE_LIMIT_WINDOW)

        return self._announce(
            Operation.CONFIGURE_RATE_LIMIT, caller, locker_id, "rate-limit-configured", check,
            max_operations=max_operations,
            window=window,
        )

    def register_recovery_agent(
        self,
        caller: AccountId,
        locker_id: int,
        agent: AccountId,
        recovery_delay: int,
    ) -> bool:
        def check(record):
            require_account_id("agent", agent)
            check_distinct_party("Recovery agent", agent, record, caller, also_excluded=[self.custody_account])
            require_int_in_range("recovery_delay", recovery_delay, MIN_RECOVERY_DELAY, MAX_RECOVERY_DELAY)

        return self._announce(
            Operation.REGISTER_RECOVERY_AGENT, caller, locker_id, "recovery-agent-registered", check,
            agent=agent,
            recovery_delay=recovery_delay,
        )

    def register_nonce(self, caller: AccountId, locker_id: int, nonce: int) -> bool:
        def check(record):
            require_int_in_range("nonce", nonce, 1, MAX_NONCE)

        return self._announce(
            Operation.REGISTER_NONCE, caller, locker_id, "nonce-registered", check,
            nonce=nonce,
        )

    def delegate_audit(self, caller: AccountId, locker_id: int, auditor: AccountId, scope: str) -> bool:
        def check(record):
            require_account_id("auditor", auditor)
            check_distinct_party("Auditor", auditor, record, caller, also_excluded=[self.custody_account])
            if scope not in AUDIT_SCOPES:
                raise InvalidParameter(f"scope must be one of {list(AUDIT_SCOPES)}, got {scope!r}", locker_id=locker_id)

        return self._announce(
            Operation.DELEGATE_AUDIT, caller, locker_id, "audit-delegated", check,
            auditor=auditor,
            scope=scope,
        )
