"""
ATM API Application Factory
"""

from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .accounts import router as accounts_router
from .admin import router as admin_router
from .auth import ATMSystem
from .session import router as session_router
from .transactions import router as transactions_router
from ..errors import ATMError, AuthenticationError


ERROR_STATUS = {
    "invalid_amount": status.HTTP_400_BAD_REQUEST,
    "insufficient_funds": status.HTTP_400_BAD_REQUEST,
    "invalid_pin": status.HTTP_400_BAD_REQUEST,
    "deposit_too_low": status.HTTP_400_BAD_REQUEST,
    "invalid_transfer": status.HTTP_400_BAD_REQUEST,
    "auth_failure": status.HTTP_401_UNAUTHORIZED,
    "no_session": status.HTTP_401_UNAUTHORIZED,
    "admin_forbidden": status.HTTP_403_FORBIDDEN,
    "account_not_found": status.HTTP_404_NOT_FOUND,
    "recipient_not_found": status.HTTP_404_NOT_FOUND,
    "duplicate_account": status.HTTP_409_CONFLICT,
    "account_not_empty": status.HTTP_409_CONFLICT,
    "account_locked": status.HTTP_423_LOCKED,
}


async def handle_atm_error(request: Request, exc: ATMError) -> JSONResponse:
    """Map domain errors to HTTP responses"""
    body = {"detail": exc.message, "error": exc.code}
    if isinstance(exc, AuthenticationError) and exc.attempts_remaining is not None:
        body["attempts_remaining"] = exc.attempts_remaining
    return JSONResponse(
        status_code=ERROR_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST),
        content=body
    )


def create_app(system: Optional[ATMSystem] = None) -> FastAPI:
    """Create and configure the FastAPI application"""
    app = FastAPI(
        title="ATM System API",
        description="Single-branch ATM: accounts, PIN login, deposits, withdrawals and transfers",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.system = system or ATMSystem()

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ATMError, handle_atm_error)

    # Include routers
    app.include_router(accounts_router, prefix="/accounts", tags=["Accounts"])
    app.include_router(session_router, prefix="/session", tags=["Session"])
    app.include_router(transactions_router, prefix="/account", tags=["Account"])
    app.include_router(admin_router, prefix="/admin", tags=["Admin"])

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "atm_api",
            "version": "1.0.0"
        }

    return app
