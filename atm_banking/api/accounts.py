"""
Account opening endpoints
"""

from fastapi import APIRouter, Depends, status

from .auth import ATMSystem, get_atm_system
from .schemas import AccountSummary, CreateAccountRequest


router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_account(
    request: CreateAccountRequest,
    system: ATMSystem = Depends(get_atm_system)
):
    """Open a new account"""
    account = system.registry.create_account(
        account_id=request.account_id,
        pin=request.pin,
        holder_name=request.holder_name,
        opening_deposit=request.opening_deposit
    )
    return {
        "account": AccountSummary.from_account(account).model_dump(),
        "message": "Account created successfully!"
    }
