"""
Bank Ledger FastAPI application.

This is the entry point for the application.
All routers and the error handlers are registered here.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from bank_ledger.config import get_settings
from bank_ledger.errors import LedgerError, StorageFailure
from bank_ledger.logging_config import setup_logging
from bank_ledger.api.health import router as health_router
from bank_ledger.api.auth import router as auth_router
from bank_ledger.api.customers import router as customers_router
from bank_ledger.api.accounts import router as accounts_router
from bank_ledger.api.stats import router as stats_router
from bank_ledger.api.reports import router as reports_router

settings = get_settings()

setup_logging(settings.LOG_LEVEL, settings.LOG_JSON)
logger = logging.getLogger("bank_ledger.main")

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Customer accounts and an atomic money-movement ledger",
)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    """Every ledger failure becomes {"error": code, "detail": reason}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error, "detail": exc.message},
    )


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    """
    A database error that escaped the services, typically on a read.

    get_db rolls the session back and reads change nothing,
    so the client may retry.
    """
    logger.error(
        "%s %s failed in storage", request.method, request.url.path,
        exc_info=exc,
        extra={"error": StorageFailure.error},
    )
    return JSONResponse(
        status_code=StorageFailure.status_code,
        content={
            "error": StorageFailure.error,
            "detail": "Storage unavailable, no changes were applied",
        },
    )


# Register routers
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(customers_router)
app.include_router(accounts_router)
app.include_router(stats_router)
app.include_router(reports_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
