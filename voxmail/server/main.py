"""
VoxMail Backend - FastAPI Application

REST API for the VoxMail client: authentication, mailbox operations and
voice command interpretation.

Usage:
    uvicorn voxmail.server.main:app --host 127.0.0.1 --port 5000 --reload

    Or run directly:
    voxmail serve
"""

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from voxmail import __version__
from voxmail.config import get_section, get_smtp_settings, load_config
from voxmail.logging_config import bind_request_context, clear_request_context, setup_logging
from voxmail.models import ErrorResponse
from voxmail.server import database, sessions
from voxmail.server.routes import api_router

setup_logging()
logger = logging.getLogger(__name__)

# Global config
config = load_config()
server_config = get_section("server", config)

# Track startup time for uptime calculation
startup_time: datetime | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    global startup_time

    logger.info("Starting VoxMail backend...")
    startup_time = datetime.now()

    database.init_db()
    expired = sessions.cleanup_expired()
    logger.info(f"Database initialized ({expired} expired sessions closed)")

    yield

    logger.info("Shutting down VoxMail backend...")


# Create FastAPI application
app = FastAPI(
    title="VoxMail API",
    description="Webmail REST API with voice command interpretation",
    version=__version__,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# Configure CORS
allowed_origins = server_config.get(
    "allowed_origins", ["http://localhost:3000", "http://127.0.0.1:3000"]
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """Tag every log line of a request with a request id."""
    clear_request_context()
    bind_request_context(request_id=uuid.uuid4().hex[:12], path=request.url.path)
    try:
        return await call_next(request)
    finally:
        clear_request_context()


# =============================================================================
# Health Check Endpoint
# =============================================================================


@app.get("/api/health", tags=["health"])
async def health_check():
    """Check system health status."""
    services = {}

    try:
        conn = database.get_connection()
        conn.execute("SELECT 1")
        conn.close()
        services["database"] = "healthy"
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        services["database"] = "unhealthy"

    services["mail"] = "configured" if get_smtp_settings(config).configured else "store_only"

    overall = "healthy" if services["database"] == "healthy" else "degraded"
    return {
        "status": overall,
        "version": __version__,
        "timestamp": datetime.now().isoformat(),
        "uptimeSeconds": get_uptime_seconds(),
        "services": services,
    }


# =============================================================================
# Error Handlers
# =============================================================================


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with consistent format."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail), code=f"HTTP_{exc.status_code}").model_dump(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request body/query validation failures."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            error=f"{location}: {message}" if location else message,
            code="VALIDATION_ERROR",
            details={"errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors]},
        ).model_dump(),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error="Internal server error", code="INTERNAL_ERROR").model_dump(),
    )


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(api_router)


# =============================================================================
# Utility Functions
# =============================================================================


def get_uptime_seconds() -> int:
    """Get server uptime in seconds."""
    if startup_time is None:
        return 0
    delta = datetime.now() - startup_time
    return int(delta.total_seconds())


# =============================================================================
# Main Entry Point
# =============================================================================


def run(host: str | None = None, port: int | None = None, reload: bool = False) -> None:
    import uvicorn

    uvicorn.run(
        "voxmail.server.main:app",
        host=host or server_config.get("host", "127.0.0.1"),
        port=port or int(server_config.get("port", 5000)),
        reload=reload,
        log_level="info",
    )


if __name__ == "__main__":
    run(reload=True)
