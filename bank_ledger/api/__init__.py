"""
Bank Ledger API Application Factory
"""

from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..system import LedgerSystem
from .deps import get_ledger_system
from .customers import router as customers_router
from .accounts import router as accounts_router
from .transactions import router as transactions_router
from .reports import router as reports_router


def create_app(system: Optional[LedgerSystem] = None) -> FastAPI:
    """
    Create and configure the FastAPI application

    Args:
        system: Ledger to serve; defaults to the process-wide instance
    """
    app = FastAPI(
        title="Bank Ledger API",
        description="In-memory banking ledger with customers, accounts and transactions",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if system is not None:
        app.dependency_overrides[get_ledger_system] = lambda: system

    app.include_router(customers_router, prefix="/customers", tags=["Customers"])
    app.include_router(accounts_router, prefix="/accounts", tags=["Accounts"])
    app.include_router(transactions_router, prefix="/transactions", tags=["Transactions"])
    app.include_router(reports_router, prefix="/reports", tags=["Reports"])

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "bank_ledger_api",
            "version": __version__
        }

    # Root endpoint
    @app.get("/")
    async def get_api_info():
        """Get API information"""
        return {
            "name": "Bank Ledger API",
            "version": __version__,
            "endpoints": {
                "docs": "/docs",
                "health": "/health",
                "customers": "/customers",
                "accounts": "/accounts",
                "transactions": "/transactions",
                "reports": "/reports/summary",
            }
        }

    return app


def run_server(host: str = "127.0.0.1", port: int = 8090, debug: bool = False):
    """Run the FastAPI server"""
    uvicorn.run(
        "bank_ledger.api:app",
        host=host,
        port=port,
        reload=debug,
        log_level="info"
    )


# Process-wide app served by run_server
app = create_app()
