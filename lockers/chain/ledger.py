"""
In-memory custody ledger.

Native value lives in per-account integer balances. The protocol's custody
account is an ordinary account whose balance is the sum of every locker's
quantity. Transfers are atomic and synchronous: they either fully apply or
raise a LedgerError without touching any balance.
"""

import logging
from typing import Dict, Iterable, List, Set, Tuple

from .types import AccountId


logger = logging.getLogger(__name__)

Transfer = Tuple[AccountId, AccountId, int]


class LedgerError(Exception):
    """Base class for ledger failures."""
    pass


class InsufficientFunds(LedgerError):
    """The sender's balance does not cover the transfer."""

    def __init__(self, account: AccountId, balance: int, amount: int):
        super().__init__(f"Insufficient funds in {account}: balance {balance} < {amount}")
        self.account = account
        self.balance = balance
        self.amount = amount


class TransferRejected(LedgerError):
    """The ledger refused the transfer for a reason other than funds."""
    pass


class CustodyLedger:
    """
    Balance table with atomic single and batch transfers.

    Accounts can be frozen at the ledger level (freeze_account) to make
    the ledger reject any movement touching them, which is how callers
    exercise the core's transfer-failure path.
    """

    def __init__(self, balances: Dict[AccountId, int] = None):
        self._balances: Dict[AccountId, int] = {}
        self._frozen: Set[AccountId] = set()
        self.transfer_log: List[Transfer] = []
        for account, amount in (balances or {}).items():
            self.mint(account, amount)

    def balance(self, account: AccountId) -> int:
        """Get an account's balance (0 for unknown accounts)."""
        return self._balances.get(account, 0)

    @property
    def balances(self) -> Dict[AccountId, int]:
        return dict(self._balances)

    def total_supply(self) -> int:
        return sum(self._balances.values())

    def mint(self, account: AccountId, amount: int):
        """Credit new value to an account (setup only)."""
        if not isinstance(amount, int) or amount < 0:
            raise TransferRejected(f"Cannot mint non-positive or non-integer amount: {amount!r}")
        self._balances[account] = self.balance(account) + amount

    def freeze_account(self, account: AccountId):
        self._frozen.add(account)

    def unfreeze_account(self, account: AccountId):
        self._frozen.discard(account)

    # ─────────────────────────────────────────────────────────────────────────
    # Transfers
    # ─────────────────────────────────────────────────────────────────────────

    def transfer(self, sender: AccountId, recipient: AccountId, amount: int):
        """Move value between two accounts."""
        self.transfer_batch([(sender, recipient, amount)])

    def transfer_batch(self, transfers: Iterable[Transfer]):
        """
        Apply several transfers as one unit.

        Every leg is validated against the running balances first; if any
        leg fails nothing is applied.
        """
        legs = list(transfers)
        pending: Dict[AccountId, int] = {}

        for sender, recipient, amount in legs:
            self._validate_leg(sender, recipient, amount)
            available = pending.get(sender, self.balance(sender))
            if available < amount:
                logger.warning(
                    "Ledger rejected %s -> %s (%d): insufficient funds (%d)",
                    sender, recipient, amount, available,
                )
                raise InsufficientFunds(sender, available, amount)
            pending[sender] = available - amount
            pending[recipient] = pending.get(recipient, self.balance(recipient)) + amount

        self._balances.update(pending)
        self.transfer_log.extend(legs)

    def _validate_leg(self, sender: AccountId, recipient: AccountId, amount: int):
        if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
            raise TransferRejected(f"Transfer amount must be a positive integer: {amount!r}")
        if sender == recipient:
            raise TransferRejected(f"Sender and recipient are the same account: {sender}")
        for account in (sender, recipient):
            if account in self._frozen:
                logger.warning("Ledger rejected transfer touching frozen account %s", account)
                raise TransferRejected(f"Account is frozen: {account}")
