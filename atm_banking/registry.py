"""
Bank Registry Module

Owns the branch's accounts, account opening, PIN login with lockout, the
single terminal session and transfer settlement between accounts.
"""

from decimal import Decimal
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional
import hmac
import threading

from .accounts import Account, OperationResult, validate_pin
from .config import ATMConfig, SeedAccount, get_config
from .currency import AmountLike, format_amount, to_amount
from .errors import (
    AccountLockedError, AccountNotEmptyError, AccountNotFoundError, AuthenticationError,
    DepositTooLowError, DuplicateAccountError, InvalidAmountError, InvalidTransferError,
    RecipientNotFoundError
)
from .logging_config import get_logger, log_action
from .security import PinHasher, get_pin_hasher


class BankRegistry:
    """
    Registry of accounts plus login/session state for one terminal

    Thread safety: the registry lock guards the account map, the
    failed-attempt counters and the session; each account's own lock guards
    its balance. Transfers take both account locks in account-id order.
    """

    def __init__(
        self,
        config: Optional[ATMConfig] = None,
        seed_accounts: Optional[Iterable[SeedAccount]] = None,
        hasher: Optional[PinHasher] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.config = config or get_config()
        self.max_failed_attempts = self.config.max_failed_attempts
        self.minimum_opening_deposit = to_amount(self.config.minimum_opening_deposit)
        self.transfer_policy = self.config.transfer_policy
        self.logger = get_logger("atm.registry")

        self._hasher = hasher or get_pin_hasher(self.config.pin_hash_scheme)
        self._clock = clock
        self._accounts: Dict[str, Account] = {}
        self._failed_attempts: Dict[str, int] = {}
        self._current: Optional[Account] = None
        self._lock = threading.RLock()

        if seed_accounts is None:
            seed_accounts = self.config.seed_accounts
        for seed in seed_accounts:
            self._seed(seed)

    def _seed(self, seed: SeedAccount) -> None:
        """Load a startup account; seeds skip the opening-deposit minimum"""
        if seed.account_id in self._accounts:
            raise DuplicateAccountError(f"Duplicate seed account {seed.account_id}")
        self._accounts[seed.account_id] = self._new_account(
            seed.account_id, seed.pin, seed.holder_name, seed.opening_balance
        )

    def _new_account(self, account_id: str, pin: str, holder_name: str, opening: AmountLike) -> Account:
        return Account(
            account_id=account_id,
            pin=pin,
            holder_name=holder_name,
            opening_balance=opening,
            hasher=self._hasher,
            clock=self._clock
        )

    # Accounts

    def create_account(
        self,
        account_id: str,
        pin: str,
        holder_name: str,
        opening_deposit: AmountLike
    ) -> Account:
        """
        Open a new account

        Raises:
            DuplicateAccountError: account_id already registered
            InvalidPinError: PIN is not 4 characters
            DepositTooLowError: opening deposit below the configured minimum
        """
        if account_id in self._accounts:
            raise DuplicateAccountError("Account already exists!")
        validate_pin(pin)

        try:
            opening = to_amount(opening_deposit)
        except ValueError:
            raise InvalidAmountError("Invalid initial deposit amount!")
        if opening < self.minimum_opening_deposit:
            raise DepositTooLowError(
                f"Minimum initial deposit is {format_amount(self.minimum_opening_deposit)}!"
            )

        account = self._new_account(account_id, pin, holder_name, opening)
        with self._lock:
            # Re-check: another caller may have registered the id meanwhile
            if account_id in self._accounts:
                raise DuplicateAccountError("Account already exists!")
            self._accounts[account_id] = account

        log_action(
            self.logger, "info", "Account created",
            account_id=account_id, action="account_created", resource="account",
            extra={"opening_deposit": str(opening)}
        )
        return account

    def get_account(self, account_id: str) -> Account:
        """Look up an account by id"""
        account = self._accounts.get(account_id)
        if account is None:
            raise AccountNotFoundError("Account not found!")
        return account

    def list_accounts(self) -> List[Account]:
        """All accounts in registration order"""
        with self._lock:
            return list(self._accounts.values())

    def remove_account(self, account_id: str) -> Account:
        """Remove an account with a zero balance, ending its session if active"""
        with self._lock:
            account = self.get_account(account_id)
            with account.lock:
                if account.balance != Decimal('0'):
                    raise AccountNotEmptyError(
                        f"Cannot remove account with balance {format_amount(account.balance)}"
                    )
                del self._accounts[account_id]
            self._failed_attempts.pop(account_id, None)
            if self._current is account:
                self._current = None

        log_action(
            self.logger, "info", "Account removed",
            account_id=account_id, action="account_removed", resource="account"
        )
        return account

    # Authentication

    def login(self, account_id: str, pin: str) -> Account:
        """
        Authenticate and open the terminal session

        The lockout check and the counter update happen under one lock so
        concurrent attempts cannot get past the attempt limit.
        """
        with self._lock:
            account = self._accounts.get(account_id)
            if account is None:
                raise AccountNotFoundError("Account not found!")

            attempts = self._failed_attempts.get(account_id, 0)
            if attempts >= self.max_failed_attempts:
                log_action(
                    self.logger, "warning", "Login refused for locked account",
                    account_id=account_id, action="login_locked", resource="session"
                )
                raise AccountLockedError("Account locked due to too many failed attempts!")

            if not account.verify_pin(pin):
                attempts += 1
                self._failed_attempts[account_id] = attempts
                remaining = max(self.max_failed_attempts - attempts, 0)
                log_action(
                    self.logger, "warning", "Login failed",
                    account_id=account_id, action="login_failed", resource="session",
                    extra={"attempts": attempts}
                )
                raise AuthenticationError(
                    f"Invalid PIN! Attempts remaining: {remaining}",
                    attempts_remaining=remaining
                )

            self._failed_attempts[account_id] = 0
            self._current = account

        log_action(
            self.logger, "info", "Login successful",
            account_id=account_id, action="login_success", resource="session"
        )
        return account

    def logout(self) -> None:
        """End the current session, if any"""
        with self._lock:
            account = self._current
            self._current = None
        if account is not None:
            log_action(
                self.logger, "info", "Logged out",
                account_id=account.account_id, action="logout", resource="session"
            )

    @property
    def is_logged_in(self) -> bool:
        return self._current is not None

    @property
    def current_account(self) -> Optional[Account]:
        return self._current

    def failed_attempts(self, account_id: str) -> int:
        """Consecutive failed logins for an account"""
        with self._lock:
            return self._failed_attempts.get(account_id, 0)

    def unlock_account(self, account_id: str) -> None:
        """Clear the failed-attempt counter (admin action)"""
        with self._lock:
            self.get_account(account_id)
            self._failed_attempts[account_id] = 0
        log_action(
            self.logger, "info", "Account unlocked",
            account_id=account_id, action="account_unlocked", resource="session"
        )

    def verify_admin(self, password: str) -> bool:
        """Check the administrator password"""
        if not isinstance(password, str):
            return False
        return hmac.compare_digest(password.encode(), self.config.admin_password.encode())

    # Transfers

    def transfer_between(self, from_account: Account, amount: AmountLike, to_account_id: str) -> OperationResult:
        """
        Move funds from ``from_account`` to the account ``to_account_id``

        With the ``atomic`` policy the recipient must exist and both sides
        settle under both account locks, or neither does. With
        ``debit_only`` only the source is debited and nothing is credited.
        """
        if to_account_id == from_account.account_id:
            raise InvalidTransferError("Cannot transfer to the same account!")
        if self._accounts.get(from_account.account_id) is not from_account:
            raise AccountNotFoundError("Account not found!")

        if self.transfer_policy == "debit_only":
            result = from_account.transfer(amount, to_account_id)
            log_action(
                self.logger, "warning", "Transfer debited without a matching credit",
                account_id=from_account.account_id, action="transfer_debit_only", resource="transfer",
                extra={"to_account_id": to_account_id, "amount": str(result.entry.amount)}
            )
            return result

        recipient = self._accounts.get(to_account_id)
        if recipient is None:
            raise RecipientNotFoundError("Recipient account not found!")

        first, second = sorted((from_account, recipient), key=lambda acc: acc.account_id)
        with first.lock, second.lock:
            if self._accounts.get(to_account_id) is not recipient:
                raise RecipientNotFoundError("Recipient account not found!")
            # Credit must be known to succeed before the debit is applied
            recipient.validate_credit(amount)
            result = from_account.transfer(amount, to_account_id)
            recipient.receive_transfer(result.entry.amount, from_account.account_id)

        log_action(
            self.logger, "info", "Transfer settled",
            account_id=from_account.account_id, action="transfer", resource="transfer",
            extra={"to_account_id": to_account_id, "amount": str(result.entry.amount)}
        )
        return result
