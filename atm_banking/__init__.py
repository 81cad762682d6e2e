"""
ATM Banking Core

A single-branch automated teller machine: account storage, PIN
authentication with lockout, and transaction processing with an
append-only ledger per account. All amounts use Decimal.
"""

__version__ = "1.0.0"
