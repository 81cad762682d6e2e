"""
Pydantic schemas for API requests and responses
"""

from typing import List, Optional
from pydantic import BaseModel, Field

from ..accounts import Account, OperationResult
from ..ledger import LedgerEntry


# Account schemas
class CreateAccountRequest(BaseModel):
    account_id: str = Field(..., description="Account number (conventionally 10 digits)")
    pin: str = Field(..., description="4-digit PIN")
    holder_name: str
    opening_deposit: str = Field(..., description="Decimal amount as string")


class AccountSummary(BaseModel):
    account_id: str
    holder_name: str
    balance: str
    transactions: int

    @classmethod
    def from_account(cls, account: Account) -> 'AccountSummary':
        return cls(**account.to_dict())


# Session schemas
class LoginRequest(BaseModel):
    account_id: str
    pin: str


class SessionStatus(BaseModel):
    logged_in: bool
    account_id: Optional[str] = None
    holder_name: Optional[str] = None


# Transaction schemas
class AmountRequest(BaseModel):
    amount: str = Field(..., description="Decimal amount as string")


class TransferRequest(AmountRequest):
    to_account_id: str


class ChangePinRequest(BaseModel):
    old_pin: str
    new_pin: str


class LedgerEntryModel(BaseModel):
    kind: str
    label: str
    amount: str
    timestamp: str
    balance_after: str
    counterparty: Optional[str] = None
    sequence: int

    @classmethod
    def from_entry(cls, entry: LedgerEntry) -> 'LedgerEntryModel':
        return cls(**entry.to_dict())


class OperationResponse(BaseModel):
    success: bool
    message: str
    balance: str
    entry: Optional[LedgerEntryModel] = None

    @classmethod
    def from_result(cls, result: OperationResult, account: Account) -> 'OperationResponse':
        return cls(
            success=result.success,
            message=result.message,
            balance=str(account.balance),
            entry=LedgerEntryModel.from_entry(result.entry) if result.entry else None
        )


class MessagesResponse(BaseModel):
    messages: List[str]
