"""
FastAPI application for Almoxarifado.

To run: uvicorn almoxarifado.main:app --reload
"""
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from almoxarifado.core.config import Settings, settings, get_settings
from almoxarifado.core.database import init_db, close_db, check_db_connection, utcnow
from almoxarifado.api.v1 import api_router
from almoxarifado.error_handlers import (
    AppException,
    app_exception_handler,
    validation_exception_handler,
    sqlalchemy_exception_handler,
    generic_exception_handler
)
from almoxarifado.logging_config import get_logger
from almoxarifado.middleware import (
    limiter,
    RequestLoggingMiddleware,
    rate_limit_exceeded_handler,
    http_exception_handler
)
from almoxarifado.schemas.dashboard import HealthCheck

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {'Development' if settings.debug else 'Production'}")

    # Production schemas come from Alembic migrations
    if settings.debug:
        logger.info("Debug mode: initializing database tables")
        init_db()

    yield

    logger.info("Shutting down application")
    close_db()


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Almoxarifado - stock ledger, equipment loans and audit trail",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan
)

app.state.limiter = limiter

# Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(RequestLoggingMiddleware)

# Exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Include API routers
app.include_router(api_router)


@app.get("/")
def root(config: Settings = Depends(get_settings)):
    """Root endpoint with API information."""
    return {
        "app": config.app_name,
        "version": config.app_version,
        "status": "running",
        "docs": "/docs" if config.debug else "disabled",
        "api_v1": "/api/v1"
    }


@app.get("/health", response_model=HealthCheck)
def health_check():
    """Public liveness check including database connectivity."""
    database_ok = check_db_connection()
    return HealthCheck(
        status="healthy" if database_ok else "degraded",
        version=settings.app_version,
        database="ok" if database_ok else "unavailable",
        timestamp=utcnow()
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "almoxarifado.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
