"""
FastAPI server — wallet CRUD, sync and health over the flat-file store.

Routes delegate to WalletService; domain exceptions are turned into
{"error": ...} bodies by the handlers registered in create_app(). Every route
except /health sits behind the fault-injection middleware.
"""

from __future__ import annotations

import threading
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import APIRouter, Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend_wallettracker import __version__
from backend_wallettracker.api_server.middleware import (
    HEALTH_PATH,
    FaultConfig,
    FaultGate,
    FaultInjectionMiddleware,
)
from backend_wallettracker.config import Settings, get_settings
from backend_wallettracker.core.exceptions import WalletTrackerError
from backend_wallettracker.database import FlatFileStore
from backend_wallettracker.services import WalletService
from backend_wallettracker.tracker_logging import get_logger

logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# Request / response models
# -----------------------------------------------------------------------------


class CreateWalletRequest(BaseModel):
    """POST /wallets body. A missing address is reported as 400 by the service."""

    address: str | None = Field(None, description="Wallet address (BTC legacy or bech32)")


class WalletOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    address: str
    name: str
    icon_url: str = Field("", alias="iconURL", description="Empty until first sync")


class TransactionOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    wallet_id: str = Field(..., alias="walletId")
    date: str = Field(..., description="ISO 8601 UTC")
    balance: float = Field(..., description="Positive received, negative sent")
    confirmations: int = Field(..., ge=1)


class MessageOut(BaseModel):
    message: str


class HealthOut(BaseModel):
    status: str
    timestamp: str


# -----------------------------------------------------------------------------
# Dependencies
# -----------------------------------------------------------------------------


def get_service(request: Request) -> WalletService:
    """Dependency: the app-scoped WalletService."""
    return request.app.state.service


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------

router = APIRouter(prefix="/wallets", tags=["Wallets"])


@router.get("", response_model=list[WalletOut])
def list_wallets(service: WalletService = Depends(get_service)) -> JSONResponse:
    """Return all wallets."""
    return JSONResponse(content=[w.to_dict() for w in service.list_wallets()])


@router.post("", response_model=list[WalletOut], status_code=201)
def create_wallet(
    body: CreateWalletRequest | None = Body(None),
    service: WalletService = Depends(get_service),
) -> JSONResponse:
    """
    Add a wallet and return the entire updated list (new wallet last).
    400 when the address is missing or already tracked.
    """
    wallets = service.create_wallet(body.address if body else None)
    return JSONResponse(status_code=201, content=[w.to_dict() for w in wallets])


@router.post("/{wallet_id}/sync", response_model=list[TransactionOut], status_code=201)
def sync_wallet(wallet_id: str, service: WalletService = Depends(get_service)) -> JSONResponse:
    """Append 1-3 new transactions to the wallet and return only the new ones."""
    new_transactions = service.sync_wallet(wallet_id)
    return JSONResponse(status_code=201, content=[t.to_dict() for t in new_transactions])


@router.get("/{wallet_id}", response_model=list[TransactionOut])
def get_wallet_transactions(wallet_id: str, service: WalletService = Depends(get_service)) -> JSONResponse:
    """Return the wallet's transactions; 404 if the wallet does not exist."""
    return JSONResponse(content=[t.to_dict() for t in service.list_transactions(wallet_id)])


@router.delete("/{wallet_id}", response_model=MessageOut)
def delete_wallet(wallet_id: str, service: WalletService = Depends(get_service)) -> MessageOut:
    """Remove the wallet and all of its transactions."""
    service.delete_wallet(wallet_id)
    return MessageOut(message="Wallet deleted successfully")


def health() -> HealthOut:
    """Liveness probe; never subject to fault injection."""
    return HealthOut(status="OK", timestamp=datetime.now(timezone.utc).isoformat(timespec="milliseconds"))


# -----------------------------------------------------------------------------
# Exception handlers
# -----------------------------------------------------------------------------


def wallet_tracker_error_handler(request: Request, exc: WalletTrackerError) -> JSONResponse:
    """Domain errors → {"error": message} with the error's status code."""
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, kind=exc.kind, error=exc.message)
    else:
        logger.info("request_rejected", path=request.url.path, kind=exc.kind, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Consistent JSON error body for routing-level errors (404, 405, ...)."""
    message = "Endpoint not found" if exc.status_code == 404 else str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=exc.headers)


def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies are client errors (400), matching the rest of the API."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"Invalid request: {field} {first.get('msg', '')}".strip() if field else "Invalid request body"
    return JSONResponse(status_code=400, content={"error": message})


def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# -----------------------------------------------------------------------------
# App factory
# -----------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize (and on first run seed) the store before serving."""
    store: FlatFileStore = app.state.service.store
    seeded = store.initialize()
    logger.info(
        "api_started",
        data_dir=str(store.data_dir),
        seeded=seeded,
        fault_injection=app.state.fault_gate.config.enabled,
        failure_rate=app.state.fault_gate.config.failure_rate,
    )
    yield
    app.state.shutdown.set()
    logger.info("api_stopped")


def create_app(
    settings: Settings | None = None,
    *,
    service: WalletService | None = None,
    fault_gate: FaultGate | None = None,
    shutdown: threading.Event | None = None,
) -> FastAPI:
    """
    Build the ASGI app.

    Args:
        settings: Resolved settings; read from the environment when omitted.
        service: WalletService to serve; built over settings.data_dir when omitted.
        fault_gate: Fault gate; built from settings when omitted.
        shutdown: Token set when the process starts draining; the fault gate
            stops injecting once it is set.
    """
    settings = settings or get_settings()
    shutdown = shutdown or threading.Event()
    service = service or WalletService(FlatFileStore(settings.data_dir))
    if fault_gate is None:
        fault_gate = FaultGate(
            FaultConfig(
                enabled=settings.enable_error_simulation,
                failure_rate=settings.error_failure_rate,
            ),
            shutdown=shutdown,
        )

    app = FastAPI(
        title="Wallet Tracker Mock API",
        description="Mock crypto wallet tracker over flat JSON files, with random fault injection.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.service = service
    app.state.fault_gate = fault_gate
    app.state.shutdown = shutdown

    app.include_router(router)
    app.add_api_route(HEALTH_PATH, health, methods=["GET"], response_model=HealthOut, tags=["Health"])

    app.add_exception_handler(WalletTrackerError, wallet_tracker_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Last added runs first: CORS wraps the fault gate so injected 500s carry CORS headers
    app.add_middleware(FaultInjectionMiddleware, gate=fault_gate)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept", "Authorization"],
    )
    return app
