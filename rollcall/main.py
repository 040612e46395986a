"""Main FastAPI application."""
import os

import psutil
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from rollcall.api.deps import get_db
from rollcall.api.v1.router import api_router
from rollcall.core.config import settings
from rollcall.core.errors import AttendanceError
from rollcall.core.logging_config import get_logger, setup_logging
from rollcall.core.rate_limit import limiter
from rollcall.middleware import LoggingMiddleware

setup_logging(level=settings.LOG_LEVEL, json_logs=settings.ENVIRONMENT == "production")
logger = get_logger(__name__)

# Validate production configuration after logging is configured
if settings.ENVIRONMENT == "production":
    settings.validate_production_config()

logger.info(
    "application_starting",
    app_title=settings.APP_TITLE,
    app_version=settings.APP_VERSION,
    environment=settings.ENVIRONMENT,
)

app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(LoggingMiddleware)


@app.middleware("http")
async def add_api_version_header(request: Request, call_next):
    """Add X-API-Version header to all responses for version tracking."""
    response = await call_next(request)
    response.headers["X-API-Version"] = settings.APP_VERSION
    return response


# Bearer tokens, no cookies
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-API-Version"],
)


def _error_body(message: str, code: str) -> dict:
    return {"success": False, "message": message, "error": {"code": code, "message": message}}


def _jsonable_errors(errors):
    # ctx may hold exception instances
    return [{k: v for k, v in error.items() if k in ("type", "loc", "msg")} for error in errors]


@app.exception_handler(AttendanceError)
async def attendance_error_handler(request: Request, exc: AttendanceError):
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, exc.code))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    content = _error_body(message, f"http_{exc.status_code}")
    content["detail"] = exc.detail
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request")
    else:
        message = "Invalid request"
    content = _error_body(message, "validation_error")
    content["detail"] = _jsonable_errors(errors)
    return JSONResponse(status_code=422, content=content)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled_exception", exception_type=type(exc).__name__)
    return JSONResponse(status_code=500, content=_error_body("Internal server error", "internal_error"))


app.include_router(api_router)


@app.get("/health")
async def health_check(db: Session = Depends(get_db)):
    """
    Health check endpoint.

    Returns:
        - status: "healthy" or "unhealthy"
        - database: connection status and pool metrics
        - memory: process memory usage
        - environment: current environment setting

    Returns 503 if the database is unreachable.
    """
    from rollcall.db.session import engine

    health_status = {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "version": settings.APP_VERSION,
        "database": {"status": "connected"},
    }

    pool = engine.pool
    if hasattr(pool, "size"):
        health_status["database"]["pool"] = {
            "size": pool.size(),
            "checked_in": pool.checkedin(),
            "checked_out": pool.checkedout(),
            "overflow": pool.overflow(),
        }

    try:
        process = psutil.Process(os.getpid())
        memory_info = process.memory_info()
        health_status["memory"] = {
            "rss_mb": round(memory_info.rss / 1024 / 1024, 2),
            "vms_mb": round(memory_info.vms / 1024 / 1024, 2),
            "percent": round(process.memory_percent(), 2),
        }
    except Exception as e:
        logger.warning("health_check_memory_error", error=str(e))
        health_status["memory"] = {"error": "unable to read"}

    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        health_status["status"] = "unhealthy"
        health_status["database"]["status"] = f"error: {str(e)}"
        logger.error("health_check_failed", error=str(e))
        raise HTTPException(status_code=503, detail=health_status)

    return health_status
