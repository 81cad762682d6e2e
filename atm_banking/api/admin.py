"""
Admin endpoints (account listing, lockout reset, removal)
"""

from fastapi import APIRouter, Depends

from .auth import ATMSystem, get_atm_system, require_admin
from .schemas import AccountSummary


router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/accounts")
async def list_accounts(system: ATMSystem = Depends(get_atm_system)):
    """All accounts"""
    return {
        "accounts": [
            AccountSummary.from_account(account).model_dump()
            for account in system.registry.list_accounts()
        ]
    }


@router.post("/accounts/{account_id}/unlock")
async def unlock_account(account_id: str, system: ATMSystem = Depends(get_atm_system)):
    """Reset the failed login counter"""
    system.registry.unlock_account(account_id)
    return {"account_id": account_id, "message": "Account unlocked"}


@router.delete("/accounts/{account_id}")
async def remove_account(account_id: str, system: ATMSystem = Depends(get_atm_system)):
    """Remove an empty account"""
    system.registry.remove_account(account_id)
    return {"account_id": account_id, "message": "Account removed"}
