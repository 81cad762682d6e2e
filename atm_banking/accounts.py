"""
Account Module

An ATM account owns its balance, PIN credential and three logs: the full
ledger history (audit trail, unbounded), a bounded recent-activity log for
quick display, and a FIFO queue of pending notifications. Balance changes
happen only through the account's own operations, each of which validates
first and mutates second, so a failed call leaves no trace.
"""

from decimal import Decimal, InvalidOperation
from datetime import datetime, timezone
from dataclasses import dataclass
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional
import threading

from .currency import AmountLike, format_amount, quantize, to_amount
from .errors import (
    AuthenticationError, InsufficientFundsError, InvalidAmountError, InvalidPinError
)
from .ledger import EntryKind, LedgerEntry
from .logging_config import get_logger
from .security import PinHasher, ScryptPinHasher

PIN_LENGTH = 4
RECENT_ACTIVITY_CAPACITY = 10
RECENT_ACTIVITY_DISPLAY = 5

ZERO = Decimal('0.00')

logger = get_logger("atm.accounts")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def validate_pin(pin: str) -> None:
    """PINs are exactly PIN_LENGTH characters; digits are not enforced"""
    if not isinstance(pin, str) or len(pin) != PIN_LENGTH:
        raise InvalidPinError(f"PIN must be {PIN_LENGTH} digits!")


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a successful account operation"""
    success: bool
    message: str
    entry: Optional[LedgerEntry] = None


class Account:
    """
    Bank account held at the ATM's branch

    All mutating operations run under the account's re-entrant lock so
    concurrent callers on the same account serialize.
    """

    def __init__(
        self,
        account_id: str,
        pin: str,
        holder_name: str,
        opening_balance: AmountLike,
        hasher: Optional[PinHasher] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        validate_pin(pin)
        opening = self._parse_amount(opening_balance, "opening balance")
        if opening < ZERO:
            raise InvalidAmountError("Opening balance cannot be negative!")

        self.account_id = account_id
        self.holder_name = holder_name
        self._hasher = hasher or ScryptPinHasher()
        self._credential = self._hasher.create(pin)
        self._clock = clock or _utc_now
        self._balance = opening
        self._history: List[LedgerEntry] = []
        self._recent: Deque[str] = deque(maxlen=RECENT_ACTIVITY_CAPACITY)
        self._notifications: Deque[str] = deque()
        self._lock = threading.RLock()

        self._record(EntryKind.CREATED, opening)

    def __repr__(self) -> str:
        return f"Account({self.account_id!r}, holder={self.holder_name!r}, balance={self._balance})"

    @property
    def lock(self) -> threading.RLock:
        """Lock guarding this account's state"""
        return self._lock

    @property
    def balance(self) -> Decimal:
        return self._balance

    @property
    def pending_notifications(self) -> int:
        """Number of notifications waiting to be drained"""
        return len(self._notifications)

    # Operations

    def deposit(self, amount: AmountLike) -> OperationResult:
        """Credit the account"""
        value = self._positive_amount(amount, "deposit")
        with self._lock:
            self._balance = self._credited_balance(value, "deposit")
            entry = self._record(EntryKind.DEPOSIT, value)
            return self._notify(f"Deposit successful! New balance: {format_amount(self._balance)}", entry)

    def withdraw(self, amount: AmountLike) -> OperationResult:
        """Debit the account; no overdraft"""
        value = self._positive_amount(amount, "withdrawal")
        with self._lock:
            self._ensure_funds(value, "Insufficient funds!")
            self._balance -= value
            entry = self._record(EntryKind.WITHDRAWAL, value)
            return self._notify(f"Withdrawal successful! New balance: {format_amount(self._balance)}", entry)

    def transfer(self, amount: AmountLike, recipient_id: str) -> OperationResult:
        """
        Debit side of a transfer to ``recipient_id``

        Only this account is touched. Crediting the recipient is the
        registry's job (see ``BankRegistry.transfer_between``).
        """
        value = self._positive_amount(amount, "transfer")
        with self._lock:
            self._ensure_funds(value, "Insufficient funds for transfer!")
            self._balance -= value
            entry = self._record(EntryKind.TRANSFER_OUT, value, counterparty=recipient_id)
            return self._notify(f"Transfer successful! New balance: {format_amount(self._balance)}", entry)

    def receive_transfer(self, amount: AmountLike, sender_id: str) -> OperationResult:
        """Credit side of a transfer from ``sender_id``"""
        value = self._positive_amount(amount, "transfer")
        with self._lock:
            self._balance = self._credited_balance(value, "transfer")
            entry = self._record(EntryKind.TRANSFER_IN, value, counterparty=sender_id)
            return self._notify(
                f"Received {format_amount(value)} from {sender_id}. "
                f"New balance: {format_amount(self._balance)}",
                entry
            )

    def validate_credit(self, amount: AmountLike) -> None:
        """Check that ``receive_transfer(amount, ...)`` would succeed"""
        value = self._positive_amount(amount, "transfer")
        with self._lock:
            self._credited_balance(value, "transfer")

    def change_pin(self, old_pin: str, new_pin: str) -> OperationResult:
        """Replace the PIN after checking the current one"""
        with self._lock:
            if not self.verify_pin(old_pin):
                raise AuthenticationError("Invalid old PIN!")
            validate_pin(new_pin)
            self._credential = self._hasher.create(new_pin)
            entry = self._record(EntryKind.PIN_CHANGED, ZERO)
            return self._notify("PIN changed successfully!", entry)

    def verify_pin(self, pin: str) -> bool:
        """Constant-time PIN check"""
        if not isinstance(pin, str):
            return False
        return self._hasher.verify(self._credential, pin)

    # Read-only projections

    def history(self, newest_first: bool = True) -> List[LedgerEntry]:
        """
        Full ledger history

        Newest-first orders by timestamp descending, ties by reverse
        insertion order. Otherwise entries come back in insertion order.
        """
        with self._lock:
            entries = list(self._history)
        if newest_first:
            entries.sort(key=lambda entry: entry.sort_key, reverse=True)
        return entries

    def recent_activities(self, limit: int = RECENT_ACTIVITY_DISPLAY) -> List[str]:
        """Most recent activity lines, most-recent-first"""
        with self._lock:
            return list(self._recent)[:max(limit, 0)]

    def drain_notifications(self) -> List[str]:
        """Return and clear pending notifications in FIFO order"""
        with self._lock:
            drained = list(self._notifications)
            self._notifications.clear()
            return drained

    def to_dict(self) -> Dict[str, Any]:
        """Display projection; the credential is never included"""
        return {
            'account_id': self.account_id,
            'holder_name': self.holder_name,
            'balance': str(self._balance),
            'transactions': len(self._history),
        }

    # Internals

    @staticmethod
    def _parse_amount(amount: AmountLike, what: str) -> Decimal:
        try:
            return to_amount(amount)
        except ValueError:
            raise InvalidAmountError(f"Invalid {what} amount!")

    def _positive_amount(self, amount: AmountLike, what: str) -> Decimal:
        value = self._parse_amount(amount, what)
        if value <= ZERO:
            raise InvalidAmountError(f"Invalid {what} amount!")
        return value

    def _credited_balance(self, amount: Decimal, what: str) -> Decimal:
        """Balance after a credit; raises before anything is mutated"""
        try:
            return quantize(self._balance + amount)
        except InvalidOperation:
            raise InvalidAmountError(f"Invalid {what} amount!")

    def _ensure_funds(self, amount: Decimal, message: str) -> None:
        if amount > self._balance:
            raise InsufficientFundsError(message)

    def _record(self, kind: EntryKind, amount: Decimal, counterparty: Optional[str] = None) -> LedgerEntry:
        entry = LedgerEntry(
            kind=kind,
            amount=amount,
            timestamp=self._clock(),
            balance_after=self._balance,
            sequence=len(self._history),
            counterparty=counterparty
        )
        self._history.append(entry)
        self._recent.appendleft(entry.activity)
        logger.debug(f"{self.account_id}: {entry.activity}")
        return entry

    def _notify(self, message: str, entry: LedgerEntry) -> OperationResult:
        self._notifications.append(message)
        return OperationResult(success=True, message=message, entry=entry)
