"""Estate Agents Registry Backend - Main FastAPI Application

Application Lifecycle & Document Integrity Engine

Wires the public and staff routers, request correlation, CORS and the
exception handlers that render every error as a problem-detail body.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from config import settings
from database import TransientStorageError
from domain.applications import StateTransitionError

# Observability
from observability.logging_config import configure_logging
from observability.middleware import RequestIDMiddleware
from observability.router import router as observability_router

# Domain Routers
from applications.errors import InvalidTransitionError, ProblemError
from applications.router import router as applications_router
from applications.router_admin import router as admin_router

# Configure logging
configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"


def _docs_enabled() -> bool:
    return settings.ENVIRONMENT != "production"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler.

    - Startup: log environment
    - Shutdown: log shutdown
    """
    logger.info("Registry API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    yield

    logger.info("Registry API shutting down...")


# Create FastAPI application
app = FastAPI(
    title="Estate Agents Registry API",
    description="Licensing applications for estate agents and estate agency firms",
    version=API_VERSION,
    docs_url="/docs" if _docs_enabled() else None,
    redoc_url="/redoc" if _docs_enabled() else None,
    openapi_url="/openapi.json" if _docs_enabled() else None,
    lifespan=lifespan,
)


# =============================================================================
# MIDDLEWARE CONFIGURATION
# =============================================================================

# Request ID Middleware (must be first for proper correlation)
app.add_middleware(RequestIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

@app.exception_handler(ProblemError)
async def problem_exception_handler(request: Request, exc: ProblemError) -> JSONResponse:
    """Render service errors as problem-detail bodies with their own status."""
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(StateTransitionError)
async def state_transition_exception_handler(
    request: Request,
    exc: StateTransitionError
) -> JSONResponse:
    """Refused lifecycle moves are conflicts with the current status."""
    error = InvalidTransitionError(
        str(exc),
        exc.current_status.value if exc.current_status else None,
        exc.new_status.value,
    )
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Malformed bodies and query parameters: 400 with one entry per field."""
    logger.warning(
        f"Validation error on {request.method} {request.url.path}",
        extra={"method": request.method, "path": request.url.path},
    )
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg"),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ProblemError(
            code="VALIDATION_ERROR",
            title="Validation Error",
            detail="Request validation failed",
            status_code=400,
            extra={"errors": errors},
        ).to_dict(),
    )


@app.exception_handler(TransientStorageError)
async def transient_storage_exception_handler(
    request: Request,
    exc: TransientStorageError
) -> JSONResponse:
    """Retries were exhausted; the client may try again."""
    logger.error(f"Transient storage failure on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=ProblemError(
            code="TRANSIENT_FAILURE",
            title="Service Unavailable",
            detail="The request could not be completed. Please try again.",
            status_code=503,
        ).to_dict(),
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(
    request: Request,
    exc: SQLAlchemyError
) -> JSONResponse:
    """Database failures are logged in full; the client gets a generic 500."""
    logger.error(
        f"Database error on {request.method} {request.url.path}",
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ProblemError(
            code="DATABASE_ERROR",
            title="Internal Server Error",
            detail="A database error occurred. Please try again later.",
            status_code=500,
        ).to_dict(),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Anything unhandled becomes INTERNAL_ERROR."""
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}",
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ProblemError(
            code="INTERNAL_ERROR",
            title="Internal Server Error",
            detail="An unexpected error occurred. Please try again later.",
            status_code=500,
        ).to_dict(),
    )


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

# Observability (health, metrics, ready)
app.include_router(observability_router)

# Applicant-facing lifecycle
app.include_router(applications_router)

# Staff review and registry decisions
app.include_router(admin_router)


# =============================================================================
# ROOT ENDPOINTS
# =============================================================================

@app.get("/", include_in_schema=False)
async def root() -> dict[str, Any]:
    """Root endpoint - API information."""
    return {
        "name": "Estate Agents Registry API",
        "version": API_VERSION,
        "status": "running",
        "docs": "/docs" if _docs_enabled() else None,
    }


# =============================================================================
# DEVELOPMENT SERVER
# =============================================================================

if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )
