"""
Login and logout endpoints
"""

from fastapi import APIRouter, Depends

from .auth import ATMSystem, get_atm_system
from .schemas import LoginRequest, SessionStatus


router = APIRouter()


@router.get("", response_model=SessionStatus)
async def get_session(system: ATMSystem = Depends(get_atm_system)):
    """Current session state"""
    account = system.registry.current_account
    if account is None:
        return SessionStatus(logged_in=False)
    return SessionStatus(logged_in=True, account_id=account.account_id, holder_name=account.holder_name)


@router.post("/login")
async def login(
    request: LoginRequest,
    system: ATMSystem = Depends(get_atm_system)
):
    """Authenticate with account number and PIN"""
    account = system.registry.login(request.account_id, request.pin)
    return {
        "account_id": account.account_id,
        "message": f"Login successful! Welcome, {account.holder_name}!"
    }


@router.post("/logout")
async def logout(system: ATMSystem = Depends(get_atm_system)):
    """End the current session"""
    system.registry.logout()
    return {"message": "Logged out successfully!"}
