"""
SoundGraph API — entry point.

Startup sequence:
  1. Configure OTel tracing (→ Jaeger via OTLP)
  2. Initialise DB connection pool (TiDB)
  3. Create tables if not present
  4. Expose Prometheus /metrics endpoint

Engine errors are mapped to HTTP statuses here; the engine itself never
deals in status codes.
"""
import logging

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from soundgraph.config import settings
from soundgraph.database import init_db
from soundgraph.engine.errors import (
    EngineError,
    InconsistentState,
    InvalidArgument,
    NotFound,
    StorageFailure,
)
from soundgraph.routers import recommendations, users
from soundgraph.telemetry import instrument_app, setup_tracing

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)

# Set up tracing before the app is created so all imports are instrumented
setup_tracing()

ERROR_STATUS = {
    InvalidArgument: status.HTTP_422_UNPROCESSABLE_ENTITY,
    NotFound: status.HTTP_404_NOT_FOUND,
    StorageFailure: status.HTTP_503_SERVICE_UNAVAILABLE,
    InconsistentState: status.HTTP_409_CONFLICT,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting SoundGraph API (env=%s)", settings.environment)
    await init_db()
    logger.info("Database ready. API ready.")
    yield
    logger.info("Shutting down...")


app = FastAPI(
    title="SoundGraph API",
    description=(
        "Social graph and recommendation engine: follow graph, "
        "history-driven recommendations and auto-generated playlists."
    ),
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(EngineError)
async def engine_error_handler(request: Request, exc: EngineError):
    code = ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    if code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=code, content={"detail": exc.message})


# ── Routers ────────────────────────────────────────────────────────────────
app.include_router(users.router, prefix="/users", tags=["Users"])
app.include_router(recommendations.router, prefix="/recommendations", tags=["Recommendations"])

# ── Prometheus metrics endpoint ────────────────────────────────────────────
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)

# ── OTel FastAPI instrumentation ──────────────────────────────────────────
instrument_app(app)


@app.get("/health", tags=["Health"])
async def health():
    return {"status": "ok", "service": settings.service_name}
