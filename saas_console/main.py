"""
Main FastAPI Application

Entry point for the SaaS admin console API.
Configures middleware, routes, error handlers, and startup/shutdown events.
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
import time
from contextlib import asynccontextmanager

from saas_console import __version__
from saas_console.config import get_settings
from saas_console.database import engine, init_db
from saas_console.middleware.team import TeamContextMiddleware
from saas_console.middleware.rate_limit import RateLimitMiddleware
from saas_console.utils.logging import setup_logging, get_logger
from saas_console.core.exceptions import (
    AuthenticationError,
    TeamAccessError
)

# Import routers
from saas_console.api.endpoints import (
    auth,
    colors,
    dashboard,
    pages,
    permissions,
    plans,
    public,
    reports,
    subscriptions,
    users
)

settings = get_settings()

# Setup logging
setup_logging(
    log_level=settings.LOG_LEVEL,
    json_format=(settings.ENVIRONMENT == "production")
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    logger.info(f"Starting application in {settings.ENVIRONMENT} mode")

    # Initialize database tables (dev only - seeders expect the schema to exist)
    if settings.ENVIRONMENT == "development":
        logger.warning("Initializing database tables (dev mode)")
        init_db()

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application")
    engine.dispose()
    logger.info("Application shutdown complete")


app = FastAPI(
    title="SaaS Admin Console",
    description="Teams, plans, roles and permissions, token balances and public report sharing",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)


# ============================================================================
# MIDDLEWARE CONFIGURATION
# ============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request timing middleware (for monitoring)
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add X-Process-Time header to track request duration."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response


app.add_middleware(TeamContextMiddleware)

# Public share viewers only
app.add_middleware(RateLimitMiddleware)


# ============================================================================
# EXCEPTION HANDLERS
# ============================================================================

@app.exception_handler(TeamAccessError)
async def team_access_error_handler(request: Request, exc: TeamAccessError):
    """
    Handle attempts to act in a team the caller does not belong to.

    The security event itself is logged where it is detected.
    """
    logger.error(
        f"TEAM ACCESS VIOLATION: {exc.detail}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "team_id": getattr(request.state, "team_id", None)
        }
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "type": "team_access_error"}
    )


@app.exception_handler(AuthenticationError)
async def authentication_error_handler(request: Request, exc: AuthenticationError):
    """Handle authentication errors."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "type": "authentication_error"},
        headers=exc.headers or {}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch-all exception handler.

    SECURITY: Don't expose internal errors in production.
    Log full details but return generic error to client.
    """
    logger.error(
        f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
        exc_info=True,
        extra={
            "path": request.url.path,
            "method": request.method,
            "team_id": getattr(request.state, "team_id", None)
        }
    )

    if settings.DEBUG:
        return JSONResponse(
            status_code=500,
            content={
                "detail": str(exc),
                "type": type(exc).__name__,
                "traceback": "See logs for traceback"
            }
        )
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "type": "internal_error"
        }
    )


# ============================================================================
# ROUTES
# ============================================================================

@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint for load balancers."""
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "version": __version__
    }


@app.get("/", tags=["root"])
async def root():
    """Root endpoint with API information."""
    return {
        "message": "SaaS Admin Console API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


# All routes live under /api/v1. The plans router owns
# /admin/permissions/available, so it goes before the registry router.
app.include_router(auth.router, prefix="/api/v1")
app.include_router(plans.router, prefix="/api/v1")
app.include_router(users.router, prefix="/api/v1")
app.include_router(colors.router, prefix="/api/v1")
app.include_router(permissions.router, prefix="/api/v1")
app.include_router(subscriptions.router, prefix="/api/v1")
app.include_router(dashboard.router, prefix="/api/v1")
app.include_router(pages.router, prefix="/api/v1")
app.include_router(reports.router, prefix="/api/v1")
app.include_router(public.router, prefix="/api/v1")


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug: {settings.DEBUG}")
    logger.info(f"Database: {settings.DATABASE_URL.split('@')[1] if '@' in settings.DATABASE_URL else 'configured'}")

    uvicorn.run(
        "saas_console.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
