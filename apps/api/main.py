from __future__ import annotations

import contextlib
import logging
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

try:
    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
except Exception:  # pragma: no cover - optional dependency resolution
    FastAPIInstrumentor = None

from apps.api.routes.reminder_notifications import router as reminder_notifications_router
from apps.api.routes.reminders import router as reminders_router
from apps.api.routes.sessions import router as sessions_router
from apps.api.routes.sessions import shutdown_pollers
from apps.api.observability import init_observability
from packages.core.logging_config import configure_logging


configure_logging()

logger = logging.getLogger("medportal.api")


@contextlib.asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    yield
    stopped = shutdown_pollers()
    if stopped:
        logger.info("client_pollers_stopped count=%s", stopped)


init_observability()
app = FastAPI(title="MedPortal Reminders API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type", "x-cron-secret"],
)
if FastAPIInstrumentor is not None:
    FastAPIInstrumentor.instrument_app(app)
else:
    logger.warning(
        "OpenTelemetry instrumentation not available. "
        "Install observability dependencies to enable tracing."
    )
app.include_router(reminders_router)
app.include_router(reminder_notifications_router)
app.include_router(sessions_router)
