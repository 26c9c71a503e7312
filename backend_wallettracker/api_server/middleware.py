"""
HTTP middleware — random fault injection.

FaultInjectionMiddleware rejects a fraction of requests with a synthetic 500
before routing, so clients have to exercise their retry paths. Configuration
and the shutdown token are passed in at construction; the gate keeps no other
state.
"""

from __future__ import annotations

import random
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from backend_wallettracker.core.exceptions import SimulatedFaultError
from backend_wallettracker.tracker_logging import get_logger

logger = get_logger(__name__)

HEALTH_PATH = "/health"
SIMULATED_ERROR = "Internal server error (simulated)"
SIMULATED_MESSAGE = "This is a simulated error to test error handling"


@dataclass(frozen=True)
class FaultConfig:
    """Fault gate settings."""

    enabled: bool = True
    failure_rate: float = 0.1
    exempt_paths: tuple[str, ...] = (HEALTH_PATH,)

    def __post_init__(self) -> None:
        if not 0.0 <= self.failure_rate <= 1.0:
            raise ValueError("failure_rate must be within [0, 1]")


def simulated_fault_payload(path: str, method: str, now: datetime | None = None) -> dict[str, Any]:
    """Body of an injected 500."""
    fault = SimulatedFaultError(SIMULATED_MESSAGE)
    return {
        "error": SIMULATED_ERROR,
        "message": fault.message,
        "timestamp": (now or datetime.now(timezone.utc)).isoformat(timespec="milliseconds"),
        "path": path,
        "method": method,
    }


class FaultGate:
    """
    Decides whether a request is rejected.

    Kept separate from the ASGI middleware so the decision can be exercised
    directly (e.g. statistical tests over many draws).
    """

    def __init__(
        self,
        config: FaultConfig,
        shutdown: threading.Event | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config
        self._shutdown = shutdown or threading.Event()
        self._rng = rng or random.Random()

    @property
    def config(self) -> FaultConfig:
        return self._config

    def is_active_for(self, path: str) -> bool:
        """False when disabled, draining for shutdown, or path is exempt."""
        if not self._config.enabled or self._shutdown.is_set():
            return False
        return path not in self._config.exempt_paths

    def should_fail(self, path: str) -> bool:
        if not self.is_active_for(path):
            return False
        return self._rng.random() < self._config.failure_rate


class FaultInjectionMiddleware(BaseHTTPMiddleware):
    """Short-circuits requests the FaultGate rejects with a structured 500."""

    def __init__(self, app: ASGIApp, gate: FaultGate) -> None:
        super().__init__(app)
        self.gate = gate

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if self.gate.should_fail(path):
            logger.warning("fault_injected", method=request.method, path=path)
            return JSONResponse(
                status_code=SimulatedFaultError.status_code,
                content=simulated_fault_payload(path, request.method),
            )
        return await call_next(request)
