"""
Endpoints operating on the logged-in account
"""

from fastapi import APIRouter, Depends

from .auth import ATMSystem, get_atm_system, require_session
from .schemas import (
    AmountRequest, ChangePinRequest, LedgerEntryModel, MessagesResponse,
    OperationResponse, TransferRequest
)
from ..accounts import Account


router = APIRouter()


@router.get("/balance")
async def get_balance(account: Account = Depends(require_session)):
    """Current balance"""
    return {"account_id": account.account_id, "balance": str(account.balance)}


@router.post("/deposit", response_model=OperationResponse)
async def deposit(request: AmountRequest, account: Account = Depends(require_session)):
    """Deposit cash"""
    result = account.deposit(request.amount)
    return OperationResponse.from_result(result, account)


@router.post("/withdraw", response_model=OperationResponse)
async def withdraw(request: AmountRequest, account: Account = Depends(require_session)):
    """Withdraw cash"""
    result = account.withdraw(request.amount)
    return OperationResponse.from_result(result, account)


@router.post("/transfer", response_model=OperationResponse)
async def transfer(
    request: TransferRequest,
    account: Account = Depends(require_session),
    system: ATMSystem = Depends(get_atm_system)
):
    """Transfer to another account"""
    result = system.registry.transfer_between(account, request.amount, request.to_account_id)
    return OperationResponse.from_result(result, account)


@router.post("/pin", response_model=OperationResponse)
async def change_pin(request: ChangePinRequest, account: Account = Depends(require_session)):
    """Change the PIN"""
    result = account.change_pin(request.old_pin, request.new_pin)
    return OperationResponse.from_result(result, account)


@router.get("/history")
async def get_history(account: Account = Depends(require_session)):
    """Transaction history, newest first"""
    return {
        "account_id": account.account_id,
        "entries": [LedgerEntryModel.from_entry(entry).model_dump() for entry in account.history()]
    }


@router.get("/recent", response_model=MessagesResponse)
async def get_recent_activities(account: Account = Depends(require_session)):
    """Up to five most recent activities"""
    return MessagesResponse(messages=account.recent_activities())


@router.get("/notifications", response_model=MessagesResponse)
async def get_notifications(account: Account = Depends(require_session)):
    """Drain pending notifications"""
    return MessagesResponse(messages=account.drain_notifications())
