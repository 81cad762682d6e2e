"""
Ledger Entry Module

Immutable record of one balance-affecting or informational event on an
account. Entries are append-only; ``sequence`` is the per-account creation
order and breaks ties between entries sharing a timestamp.
"""

from decimal import Decimal
from datetime import datetime
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple
from enum import Enum

from .currency import format_amount


class EntryKind(Enum):
    """Kinds of ledger entries"""
    CREATED = "created"            # Opening balance
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    TRANSFER_OUT = "transfer_out"  # Debit side of a transfer
    TRANSFER_IN = "transfer_in"    # Credit side of a settled transfer
    PIN_CHANGED = "pin_changed"    # Informational, amount is zero


@dataclass(frozen=True)
class LedgerEntry:
    """
    One immutable ledger line
    ``balance_after`` always equals the account balance right after the event
    """
    kind: EntryKind
    amount: Decimal
    timestamp: datetime
    balance_after: Decimal
    sequence: int
    counterparty: Optional[str] = None

    def __post_init__(self):
        if self.amount < 0:
            raise ValueError("Ledger entry amount cannot be negative")
        if self.balance_after < 0:
            raise ValueError("Ledger entry balance cannot be negative")

    @property
    def sort_key(self) -> Tuple[datetime, int]:
        """Chronological ordering key"""
        return (self.timestamp, self.sequence)

    @property
    def label(self) -> str:
        """Short activity label"""
        if self.kind == EntryKind.CREATED:
            return "Account Created"
        if self.kind == EntryKind.DEPOSIT:
            return "Deposit"
        if self.kind == EntryKind.WITHDRAWAL:
            return "Withdrawal"
        if self.kind == EntryKind.TRANSFER_OUT:
            return f"Transfer to {self.counterparty}"
        if self.kind == EntryKind.TRANSFER_IN:
            return f"Transfer from {self.counterparty}"
        return "PIN Changed"

    @property
    def activity(self) -> str:
        """Recent-activity line, e.g. ``Deposit - Rs.500.00``"""
        return f"{self.label} - {format_amount(self.amount)}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for display or serialization"""
        return {
            'kind': self.kind.value,
            'label': self.label,
            'amount': str(self.amount),
            'timestamp': self.timestamp.isoformat(),
            'balance_after': str(self.balance_after),
            'counterparty': self.counterparty,
            'sequence': self.sequence,
        }
