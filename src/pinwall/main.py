"""
Pinwall - Main Application.

FastAPI application exposing pin interactions with feature flags.
"""

import logging
import sys
import traceback
from contextlib import asynccontextmanager
from uuid import UUID, uuid4

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pinwall import __version__
from pinwall.config import get_settings
from pinwall.core.background import get_background_tasks
from pinwall.exceptions import PinwallException, ValidationException
from pinwall.modules.pins import router as pins_router
from pinwall.observability import get_metrics_store
from pinwall.schemas import HealthResponse

# Configure standard logging
logging.basicConfig(
    level=get_settings().app_log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger("pinwall")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    logger.info(
        f"Starting Pinwall API v{__version__} "
        f"[env={settings.app_env}] "
        f"[storage={settings.storage_backend}] "
        f"[features={settings.features.to_dict()}]"
    )
    yield
    cancelled = await get_background_tasks().drain(settings.tag_catalog_drain_timeout_seconds)
    logger.info(f"Shutting down Pinwall API [cancelled_background_tasks={cancelled}]")


# Create FastAPI application
app = FastAPI(
    title="Pinwall API",
    description="Pin interactions for a social image board: save, comment, and tag shared pins.",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Middleware
# =============================================================================


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add request ID to all requests."""
    request_id = request.headers.get("X-Request-ID") or str(uuid4())
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id

    return response


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests."""
    request_id = getattr(request.state, "request_id", "unknown")
    logger.info(f"[{request_id}] {request.method} {request.url.path}")

    response = await call_next(request)

    logger.info(f"[{request_id}] {request.method} {request.url.path} -> {response.status_code}")

    return response


# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(PinwallException)
async def pinwall_exception_handler(request: Request, exc: PinwallException):
    """Handle Pinwall custom exceptions."""
    request_id_str = getattr(request.state, "request_id", None)
    request_id = None
    if request_id_str:
        try:
            request_id = UUID(request_id_str)
        except (ValueError, TypeError):
            pass

    logger.warning(f"PinwallException: {exc.code} - {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.code,
                "message": exc.message,
                "details": exc.details,
                "request_id": str(request_id) if request_id else None,
            }
        },
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Render malformed requests with the VALIDATION_ERROR body."""
    errors = [
        {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]
    return await pinwall_exception_handler(
        request, ValidationException("Invalid request", errors=errors)
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    request_id_str = getattr(request.state, "request_id", None)

    logger.error(f"Unhandled exception on {request.url.path}")
    logger.error(f"Exception type: {type(exc).__name__}")
    logger.error(f"Exception message: {str(exc)}")
    logger.error(f"Traceback:\n{traceback.format_exc()}")

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": str(exc) if get_settings().app_debug else "An unexpected error occurred",
                "request_id": request_id_str,
            }
        },
    )


# =============================================================================
# Health / Metrics
# =============================================================================


@app.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    """Health check endpoint."""
    settings = get_settings()
    return HealthResponse(
        status="healthy",
        version=__version__,
        features=settings.features.to_dict(),
        app_env=settings.app_env,
        storage_backend=settings.storage_backend,
        pending_background_tasks=get_background_tasks().pending,
    )


@app.get("/metrics", tags=["health"])
async def metrics():
    """In-process operation metrics."""
    return get_metrics_store().get_summary()


# =============================================================================
# Register Module Routers
# =============================================================================

app.include_router(pins_router)


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint redirect to docs."""
    return {"message": "Welcome to Pinwall API", "docs": "/docs"}
