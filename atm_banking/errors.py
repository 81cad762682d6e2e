"""
Error Kinds Module

Domain exceptions raised by accounts and the registry. Every error is a
local validation failure: the account or registry that raised it is left
exactly as it was before the call. All errors derive from ValueError so
callers that only know about ValueError keep working.
"""

from typing import Optional


class ATMError(ValueError):
    """Base class for all ATM errors"""
    code = "atm_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidAmountError(ATMError):
    """Amount is zero, negative or not a number"""
    code = "invalid_amount"


class InsufficientFundsError(ATMError):
    """Debit would take the balance below zero"""
    code = "insufficient_funds"


class InvalidPinError(ATMError):
    """PIN does not have the required length"""
    code = "invalid_pin"


class AuthenticationError(ATMError):
    """PIN did not match"""
    code = "auth_failure"

    def __init__(self, message: str, attempts_remaining: Optional[int] = None):
        super().__init__(message)
        self.attempts_remaining = attempts_remaining


class AccountNotFoundError(ATMError):
    code = "account_not_found"


class AccountLockedError(ATMError):
    """Too many failed login attempts"""
    code = "account_locked"


class DuplicateAccountError(ATMError):
    code = "duplicate_account"


class DepositTooLowError(ATMError):
    """Opening deposit below the configured minimum"""
    code = "deposit_too_low"


class RecipientNotFoundError(ATMError):
    """Transfer recipient does not exist"""
    code = "recipient_not_found"


class InvalidTransferError(ATMError):
    """Transfer that can never settle, e.g. to the source account itself"""
    code = "invalid_transfer"


class AccountNotEmptyError(ATMError):
    """Account still holds funds and cannot be removed"""
    code = "account_not_empty"


class NoActiveSessionError(ATMError):
    """Operation needs a logged-in account"""
    code = "no_session"


class AdminForbiddenError(ATMError):
    """Administrator password missing or wrong"""
    code = "admin_forbidden"
