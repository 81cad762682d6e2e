"""
System wiring and request dependencies
"""

from typing import Optional
from fastapi import Depends, Header, Request

from ..accounts import Account
from ..config import ATMConfig, get_config
from ..errors import AdminForbiddenError, NoActiveSessionError
from ..registry import BankRegistry


class ATMSystem:
    """ATM system with its registry initialized from configuration"""

    def __init__(self, config: Optional[ATMConfig] = None, registry: Optional[BankRegistry] = None):
        self.config = config or get_config()
        self.registry = registry or BankRegistry(self.config)


# Dependency to get the system attached to the running app
def get_atm_system(request: Request) -> ATMSystem:
    return request.app.state.system


def require_session(system: ATMSystem = Depends(get_atm_system)) -> Account:
    """Account of the active terminal session"""
    account = system.registry.current_account
    if account is None:
        raise NoActiveSessionError("No active session")
    return account


def require_admin(
    x_admin_password: Optional[str] = Header(None),
    system: ATMSystem = Depends(get_atm_system)
) -> None:
    """Reject requests without the administrator password"""
    if not x_admin_password or not system.registry.verify_admin(x_admin_password):
        raise AdminForbiddenError("Invalid admin password!")
