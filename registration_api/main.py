"""
Conference Registration API - Main Application Entry Point

A capacity-bounded event registration service demonstrating:
- Global duplicate detection on normalized email and phone
- Per-event capacity enforcement over a key-value store
- Best-effort Mailchimp forwarding that never blocks registration
- Structured logging with request correlation
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from registration_api.core.config import get_settings
from registration_api.core.exceptions import RegistrationError
from registration_api.core.logging import setup_logging, get_logger
from registration_api.core.metrics import metrics_endpoint
from registration_api.api.router import api_router
from registration_api.api.middleware import RequestLoggingMiddleware
from registration_api.api.dependencies import get_store, reset_store
from registration_api.infrastructure.redis_client import close_redis
from registration_api.schemas.registration import ErrorResponse

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        storage=settings.STORAGE_BACKEND,
        admission_guard=settings.ADMISSION_GUARD,
        capacity=settings.EVENT_CAPACITY,
    )

    store = await get_store()
    stats = await store.stats()
    if stats.get("status") == "error":
        logger.warning("storage_unavailable", **stats)
    else:
        logger.info("storage_ready", **stats)

    if not settings.mailchimp_configured:
        logger.warning("newsletter_disabled", message="Mailchimp secrets missing, forwarding skipped")

    yield

    await close_redis()
    reset_store()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Conference registration API with duplicate detection and capacity limits",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router)


def _envelope(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@app.exception_handler(RegistrationError)
async def registration_error_handler(request: Request, exc: RegistrationError):
    return _envelope(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.info("request_body_invalid", errors=len(exc.errors()))
    return _envelope(400, "invalid request body")


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled_error", error=str(exc))
    return _envelope(500, "server error, please try again later")


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    store = await get_store()
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "storage": await store.stats(),
        "newsletter": "enabled" if settings.mailchimp_configured else "disabled",
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
