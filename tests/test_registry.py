"""
Test suite for the bank registry

Tests account opening rules, login lockout, the single terminal session,
transfer settlement under both policies and concurrent access.
"""

import pytest
import threading
from decimal import Decimal

from atm_banking.config import ATMConfig, DEMO_ACCOUNTS, SeedAccount
from atm_banking.errors import (
    AccountLockedError, AccountNotEmptyError, AccountNotFoundError, AuthenticationError,
    DepositTooLowError, DuplicateAccountError, InsufficientFundsError, InvalidAmountError,
    InvalidPinError, InvalidTransferError, RecipientNotFoundError
)
from atm_banking.ledger import EntryKind
from atm_banking.registry import BankRegistry


def make_config(**overrides):
    settings = {"pin_hash_scheme": "plaintext", "seed_accounts": DEMO_ACCOUNTS}
    settings.update(overrides)
    return ATMConfig(**settings)


@pytest.fixture
def registry():
    """Registry seeded with the demo accounts"""
    return BankRegistry(make_config())


@pytest.fixture
def debit_only_registry():
    return BankRegistry(make_config(transfer_policy="debit_only"))


class TestSeeding:
    """Test startup seed data"""

    def test_demo_accounts_loaded(self, registry):
        accounts = registry.list_accounts()
        assert [a.account_id for a in accounts] == ["1234567890", "0987654321", "1111222233"]
        assert registry.get_account("0987654321").balance == Decimal('15000.00')
        assert registry.get_account("1111222233").holder_name == "Sikandar"

    def test_explicit_seed_overrides_config(self):
        registry = BankRegistry(
            make_config(),
            seed_accounts=[SeedAccount(account_id="5555555555", pin="5555", holder_name="Q", opening_balance="1")]
        )
        assert [a.account_id for a in registry.list_accounts()] == ["5555555555"]

    def test_seeds_bypass_opening_minimum(self):
        seed = SeedAccount(account_id="6666666666", pin="6666", holder_name="Tiny", opening_balance="1")
        registry = BankRegistry(make_config(), seed_accounts=[seed])

        account = registry.get_account("6666666666")
        assert account.balance == Decimal('1.00')
        assert account.balance < registry.minimum_opening_deposit

    def test_empty_seed_list(self):
        registry = BankRegistry(make_config(), seed_accounts=[])
        assert registry.list_accounts() == []

    def test_duplicate_seed_rejected(self):
        seed = SeedAccount(account_id="1", pin="1111", holder_name="A", opening_balance="0")
        with pytest.raises(DuplicateAccountError):
            BankRegistry(make_config(), seed_accounts=[seed, seed])


class TestCreateAccount:
    """Test account opening rules"""

    def test_minimum_opening_deposit(self, registry):
        with pytest.raises(DepositTooLowError, match="Minimum initial deposit is Rs.500.00!"):
            registry.create_account("2222222222", "1111", "X", 499)

        account = registry.create_account("2222222222", "1111", "X", 500)
        assert account.balance == Decimal('500.00')
        assert account.history()[0].kind == EntryKind.CREATED
        assert registry.get_account("2222222222") is account

    def test_duplicate_account(self, registry):
        with pytest.raises(DuplicateAccountError, match="Account already exists!"):
            registry.create_account("1234567890", "1111", "X", 1000)

    def test_invalid_pin(self, registry):
        with pytest.raises(InvalidPinError):
            registry.create_account("2222222222", "11", "X", 1000)
        with pytest.raises(AccountNotFoundError):
            registry.get_account("2222222222")

    def test_invalid_deposit(self, registry):
        with pytest.raises(InvalidAmountError):
            registry.create_account("2222222222", "1111", "X", "lots")

    def test_configured_minimum(self):
        registry = BankRegistry(make_config(minimum_opening_deposit="1000"), seed_accounts=[])
        with pytest.raises(DepositTooLowError):
            registry.create_account("2222222222", "1111", "X", 999)


class TestLogin:
    """Test authentication, lockout and the session"""

    def test_login_success(self, registry):
        account = registry.login("1234567890", "1234")

        assert registry.is_logged_in
        assert registry.current_account is account

    def test_unknown_account(self, registry):
        with pytest.raises(AccountNotFoundError, match="Account not found!"):
            registry.login("0000000000", "1234")
        assert not registry.is_logged_in

    def test_attempts_remaining_reported(self, registry):
        with pytest.raises(AuthenticationError) as excinfo:
            registry.login("1234567890", "0000")
        assert excinfo.value.attempts_remaining == 2
        assert str(excinfo.value) == "Invalid PIN! Attempts remaining: 2"

        with pytest.raises(AuthenticationError) as excinfo:
            registry.login("1234567890", "0000")
        assert excinfo.value.attempts_remaining == 1

    def test_lockout_after_three_failures(self, registry):
        for _ in range(3):
            with pytest.raises(AuthenticationError):
                registry.login("1234567890", "0000")

        assert registry.failed_attempts("1234567890") == 3
        with pytest.raises(AccountLockedError, match="Account locked"):
            registry.login("1234567890", "1234")
        assert not registry.is_logged_in

    def test_success_resets_counter(self, registry):
        for _ in range(2):
            with pytest.raises(AuthenticationError):
                registry.login("1234567890", "0000")

        registry.login("1234567890", "1234")
        assert registry.failed_attempts("1234567890") == 0

        # Full allowance is available again
        for _ in range(2):
            with pytest.raises(AuthenticationError):
                registry.login("1234567890", "0000")
        registry.login("1234567890", "1234")

    def test_lockout_is_per_account(self, registry):
        for _ in range(3):
            with pytest.raises(AuthenticationError):
                registry.login("1234567890", "0000")
        registry.login("0987654321", "4321")
        assert registry.current_account.account_id == "0987654321"

    def test_unlock_account(self, registry):
        for _ in range(3):
            with pytest.raises(AuthenticationError):
                registry.login("1234567890", "0000")

        registry.unlock_account("1234567890")
        registry.login("1234567890", "1234")
        assert registry.is_logged_in

    def test_unlock_unknown_account(self, registry):
        with pytest.raises(AccountNotFoundError):
            registry.unlock_account("0000000000")

    def test_new_login_replaces_session(self, registry):
        registry.login("1234567890", "1234")
        registry.login("0987654321", "4321")
        assert registry.current_account.account_id == "0987654321"

    def test_failed_login_keeps_existing_session(self, registry):
        registry.login("1234567890", "1234")
        with pytest.raises(AuthenticationError):
            registry.login("0987654321", "0000")
        assert registry.current_account.account_id == "1234567890"

    def test_logout(self, registry):
        registry.login("1234567890", "1234")
        registry.logout()
        assert not registry.is_logged_in
        assert registry.current_account is None

        # Logging out twice is harmless
        registry.logout()

    def test_changed_pin_used_for_login(self, registry):
        account = registry.login("1234567890", "1234")
        account.change_pin("1234", "9999")
        registry.logout()

        with pytest.raises(AuthenticationError):
            registry.login("1234567890", "1234")
        registry.login("1234567890", "9999")

    def test_verify_admin(self, registry):
        assert registry.verify_admin("Skp123")
        assert not registry.verify_admin("skp123")
        assert not registry.verify_admin(None)

    def test_concurrent_failures_cannot_bypass_lockout(self, registry):
        errors = []
        barrier = threading.Barrier(10)

        def attempt():
            barrier.wait()
            try:
                registry.login("1234567890", "0000")
            except (AuthenticationError, AccountLockedError) as exc:
                errors.append(type(exc))

        threads = [threading.Thread(target=attempt) for _ in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors.count(AuthenticationError) == 3
        assert errors.count(AccountLockedError) == 7
        assert registry.failed_attempts("1234567890") == 3


class TestAtomicTransfer:
    """Test transfers under the default atomic policy"""

    def test_transfer_credits_recipient(self, registry):
        sender = registry.create_account("2000000000", "1111", "A", 1000)
        recipient = registry.create_account("3000000000", "2222", "B", 500)
        recipient.withdraw(200)

        result = registry.transfer_between(sender, 200, "3000000000")

        assert sender.balance == Decimal('800.00')
        assert recipient.balance == Decimal('500.00')
        assert result.entry.kind == EntryKind.TRANSFER_OUT
        incoming = recipient.history()[0]
        assert incoming.kind == EntryKind.TRANSFER_IN
        assert incoming.counterparty == "2000000000"
        assert incoming.balance_after == Decimal('500.00')

    def test_missing_recipient_changes_nothing(self, registry):
        sender = registry.get_account("1234567890")
        before = len(sender.history())

        with pytest.raises(RecipientNotFoundError, match="Recipient account not found!"):
            registry.transfer_between(sender, 200, "9999999999")

        assert sender.balance == Decimal('10000.00')
        assert len(sender.history()) == before

    def test_insufficient_funds_changes_neither_side(self, registry):
        sender = registry.get_account("1111222233")
        recipient = registry.get_account("1234567890")

        with pytest.raises(InsufficientFundsError):
            registry.transfer_between(sender, 5000.01, "1234567890")

        assert sender.balance == Decimal('5000.00')
        assert recipient.balance == Decimal('10000.00')
        assert len(recipient.history()) == 1

    def test_recipient_overflow_changes_neither_side(self, registry):
        huge = "50000000000000000000000000"
        sender = registry.create_account("2000000000", "1111", "A", huge)
        recipient = registry.create_account("3000000000", "2222", "B", huge)

        with pytest.raises(InvalidAmountError):
            registry.transfer_between(sender, huge, "3000000000")

        assert sender.balance == Decimal(huge)
        assert recipient.balance == Decimal(huge)
        assert len(sender.history()) == 1
        assert len(recipient.history()) == 1

    def test_self_transfer_rejected(self, registry):
        sender = registry.get_account("1234567890")
        with pytest.raises(InvalidTransferError):
            registry.transfer_between(sender, 100, "1234567890")
        assert sender.balance == Decimal('10000.00')

    def test_unregistered_source_rejected(self, registry):
        sender = registry.get_account("1234567890")
        stranger = type(sender)("1234567890", "1234", "Impostor", "100")
        with pytest.raises(AccountNotFoundError):
            registry.transfer_between(stranger, 50, "0987654321")

    def test_concurrent_opposite_transfers_conserve_funds(self, registry):
        a = registry.get_account("1234567890")
        b = registry.get_account("0987654321")
        total = a.balance + b.balance

        def pump(source, target_id):
            for _ in range(50):
                registry.transfer_between(source, 10, target_id)

        threads = [
            threading.Thread(target=pump, args=(a, "0987654321")),
            threading.Thread(target=pump, args=(b, "1234567890")),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert a.balance + b.balance == total
        assert a.balance == Decimal('10000.00')
        assert len(a.history()) == 101


class TestDebitOnlyTransfer:
    """Test the policy that reproduces the one-sided transfer"""

    def test_recipient_not_credited(self, debit_only_registry):
        sender = debit_only_registry.create_account("2000000000", "1111", "A", 1000)
        recipient = debit_only_registry.create_account("3000000000", "2222", "B", 500)

        debit_only_registry.transfer_between(sender, 200, "3000000000")

        assert sender.balance == Decimal('800.00')
        assert recipient.balance == Decimal('500.00')
        assert len(recipient.history()) == 1

    def test_unknown_recipient_still_debited(self, debit_only_registry):
        sender = debit_only_registry.get_account("1234567890")
        debit_only_registry.transfer_between(sender, 200, "9999999999")
        assert sender.balance == Decimal('9800.00')
        assert sender.history()[0].counterparty == "9999999999"


class TestRemoveAccount:
    """Test account removal"""

    def test_remove_empty_account(self, registry):
        account = registry.create_account("2222222222", "1111", "X", 500)
        registry.login("2222222222", "1111")
        account.withdraw(500)

        removed = registry.remove_account("2222222222")

        assert removed is account
        assert not registry.is_logged_in
        with pytest.raises(AccountNotFoundError):
            registry.get_account("2222222222")

    def test_remove_funded_account_refused(self, registry):
        with pytest.raises(AccountNotEmptyError):
            registry.remove_account("1234567890")
        assert registry.get_account("1234567890")

    def test_removed_account_cannot_receive_transfers(self, registry):
        account = registry.create_account("2222222222", "1111", "X", 500)
        account.withdraw(500)
        registry.remove_account("2222222222")

        with pytest.raises(RecipientNotFoundError):
            registry.transfer_between(registry.get_account("1234567890"), 100, "2222222222")
