from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ledger.api.endpoints import balances, transactions
from ledger.config import settings
from ledger.core.exceptions import (
    LedgerError,
    StoreError,
    StoreTimeoutError,
    TransactionNotFoundError,
)
from ledger.core.logging import app_logger
from ledger.core.middleware import RequestLoggingMiddleware
from ledger.services.ledger_store import SqlAlchemyLedgerStore


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the ledger store (and its connection pool) for the app's lifetime."""
    store = SqlAlchemyLedgerStore.from_url(
        default_timeout=settings.DB_OPERATION_TIMEOUT_SECONDS
    )
    if settings.DB_CREATE_TABLES:
        await store.create_schema()

    app.state.store = store
    app_logger.info(f"{settings.PROJECT_NAME} {settings.VERSION} started")

    try:
        yield
    finally:
        await store.close()
        app.state.store = None
        app_logger.info("Ledger store closed")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(transactions.router, prefix="/transactions", tags=["transactions"])
app.include_router(balances.router, prefix="/balance", tags=["balances"])


def status_for(exc: LedgerError) -> int:
    if isinstance(exc, TransactionNotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, StoreTimeoutError):
        return status.HTTP_504_GATEWAY_TIMEOUT
    if isinstance(exc, StoreError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_400_BAD_REQUEST


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    """Map ledger errors to HTTP responses; client errors carry their message."""
    status_code = status_for(exc)

    if isinstance(exc, StoreError):
        # Log internal details for debugging, return a generic message
        app_logger.error(
            f"{request.method} {request.url.path} failed: {exc.message} "
            f"(cause: {exc.__cause__!r})"
        )
        return JSONResponse(
            status_code=status_code,
            content={"error": "Ledger store unavailable", "code": exc.code},
        )

    return JSONResponse(
        status_code=status_code,
        content={"error": exc.message, "code": exc.code},
    )


@app.get("/")
async def root():
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
