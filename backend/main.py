# ruff: noqa: E402
# E402 disabled: load_dotenv() must run before other imports for Sentry DSN

import time
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

import sentry_sdk
from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from core.correlation import (
    CORRELATION_HEADER,
    generate_correlation_id,
    get_correlation_id,
    resolve_correlation_id,
    set_correlation_id,
)
from core.logging_config import configure_logging
from core.sentry_config import init_sentry
from helpers.rate_limiter import limiter
from helpers.security_headers import SecurityHeadersMiddleware
from models.config import settings
from models.exceptions import (
    AuthenticationException,
    BusinessRuleException,
    ConflictException,
    DomainException,
    NotFoundException,
    PermissionDeniedException,
    UpstreamServiceException,
    ValidationException,
)
from repositories.database import Base, engine
from routers import (
    admin_router,
    comments_router,
    complaints_router,
    config_router,
    feedback_router,
    upload_router,
    users_router,
    votes_router,
    webhooks_router,
)

# Initialize Sentry before the app so startup errors are captured
init_sentry()

configure_logging(
    settings.ENVIRONMENT, log_dir=settings.LOG_DIR, file_logging=settings.LOG_TO_FILE
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler.

    - Optionally create tables when `AUTO_CREATE_DB` is enabled (development).
      Otherwise the schema is managed by Alembic.
    """
    if settings.AUTO_CREATE_DB:
        logger.info(
            "AUTO_CREATE_DB enabled; creating database tables via SQLAlchemy create_all()"
        )
        Base.metadata.create_all(bind=engine)
    else:
        logger.info("AUTO_CREATE_DB disabled; skipping automatic create_all()")

    logger.info(f"{settings.PROJECT_NAME} API started ({settings.ENVIRONMENT})")
    yield
    logger.info(f"{settings.PROJECT_NAME} API stopped")


app = FastAPI(title=f"{settings.PROJECT_NAME} API", lifespan=lifespan)

# Attach rate limiter to app
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Inject correlation ID into request context and Sentry."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Process request with correlation ID tracking."""
        # Reuse the frontend's id when it looks sane
        correlation_id = resolve_correlation_id(request.headers.get(CORRELATION_HEADER))
        set_correlation_id(correlation_id)

        sentry_sdk.set_tag("correlation_id", correlation_id)

        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log all incoming requests with performance monitoring."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Process request and log timing information."""
        start_time = time.perf_counter()

        client_host = request.client.host if request.client else "unknown"
        logger.info(f"Request: {request.method} {request.url.path} from {client_host}")

        response = await call_next(request)

        duration = time.perf_counter() - start_time
        logger.info(
            f"Response: {request.method} {request.url.path} "
            f"status={response.status_code} duration={duration:.3f}s"
        )

        if duration > settings.SLOW_REQUEST_THRESHOLD:
            logger.warning(
                f"Slow request: {request.method} {request.url.path} "
                f"took {duration:.2f}s (threshold: {settings.SLOW_REQUEST_THRESHOLD}s)"
            )

        response.headers["X-Response-Time"] = f"{duration:.3f}s"
        return response


# Middleware runs in reverse order - security headers wrap everything
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(CorrelationIdMiddleware)
app.add_middleware(RequestLoggingMiddleware)

# In development, allow all origins for mobile/network testing
cors_origins = ["*"] if settings.ENVIRONMENT == "development" else settings.CORS_ORIGINS
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True if settings.ENVIRONMENT != "development" else False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(
    status_code: int,
    message: str,
    correlation_id: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "correlation_id": correlation_id},
        headers=headers,
    )


def _log_domain_error(label: str, request: Request, exc: DomainException) -> None:
    sentry_sdk.set_tag("correlation_id", exc.correlation_id)
    sentry_sdk.set_tag("exception_type", exc.__class__.__name__)
    logger.warning(
        f"{label}: {exc.message}",
        correlation_id=exc.correlation_id,
        exception_type=exc.__class__.__name__,
        path=str(request.url.path),
    )


# Global unhandled exception handler (returns generic 500 and logs details)
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch all unhandled exceptions with full Sentry capture."""
    correlation_id = get_correlation_id() or generate_correlation_id()

    sentry_sdk.set_tag("correlation_id", correlation_id)
    sentry_sdk.capture_exception(exc)

    # repr() escapes curly braces that loguru would treat as placeholders
    logger.exception(
        f"Unhandled exception: {exc!r}",
        correlation_id=correlation_id,
        path=str(request.url.path),
        method=request.method,
    )

    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", correlation_id
    )


# Centralized exception handlers
@app.exception_handler(NotFoundException)
async def not_found_exception_handler(
    request: Request, exc: NotFoundException
) -> JSONResponse:
    _log_domain_error("Not found", request, exc)
    return _error_response(status.HTTP_404_NOT_FOUND, exc.message, exc.correlation_id)


@app.exception_handler(ValidationException)
async def validation_exception_handler(
    request: Request, exc: ValidationException
) -> JSONResponse:
    _log_domain_error("Validation error", request, exc)
    return _error_response(status.HTTP_400_BAD_REQUEST, exc.message, exc.correlation_id)


@app.exception_handler(PermissionDeniedException)
async def permission_denied_exception_handler(
    request: Request, exc: PermissionDeniedException
) -> JSONResponse:
    _log_domain_error("Permission denied", request, exc)
    return _error_response(status.HTTP_403_FORBIDDEN, exc.message, exc.correlation_id)


@app.exception_handler(AuthenticationException)
async def authentication_exception_handler(
    request: Request, exc: AuthenticationException
) -> JSONResponse:
    """Handle authentication exceptions with Sentry integration."""
    _log_domain_error("Authentication failed", request, exc)
    return _error_response(
        status.HTTP_401_UNAUTHORIZED,
        exc.message,
        exc.correlation_id,
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(BusinessRuleException)
async def business_rule_exception_handler(
    request: Request, exc: BusinessRuleException
) -> JSONResponse:
    _log_domain_error("Business rule violation", request, exc)
    return _error_response(status.HTTP_400_BAD_REQUEST, exc.message, exc.correlation_id)


@app.exception_handler(ConflictException)
async def conflict_exception_handler(
    request: Request, exc: ConflictException
) -> JSONResponse:
    _log_domain_error("Conflict", request, exc)
    return _error_response(status.HTTP_409_CONFLICT, exc.message, exc.correlation_id)


@app.exception_handler(UpstreamServiceException)
async def upstream_service_exception_handler(
    request: Request, exc: UpstreamServiceException
) -> JSONResponse:
    """Upstream failures are ours to fix, so they are captured in Sentry."""
    _log_domain_error("Upstream service failure", request, exc)
    sentry_sdk.capture_exception(exc)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message, exc.correlation_id
    )


@app.exception_handler(DomainException)
async def domain_exception_handler(
    request: Request, exc: DomainException
) -> JSONResponse:
    """Fallback for domain exceptions without a dedicated handler."""
    _log_domain_error("Domain error", request, exc)
    return _error_response(status.HTTP_400_BAD_REQUEST, exc.message, exc.correlation_id)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report the first invalid field as a 400."""
    correlation_id = get_correlation_id() or generate_correlation_id()
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", message)
        if location:
            message = f"{location}: {message}"

    logger.warning(
        f"Request validation failed: {message}",
        correlation_id=correlation_id,
        path=str(request.url.path),
    )
    return _error_response(status.HTTP_400_BAD_REQUEST, message, correlation_id)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    correlation_id = get_correlation_id() or generate_correlation_id()
    return _error_response(
        exc.status_code,
        str(exc.detail),
        correlation_id,
        headers=getattr(exc, "headers", None),
    )


app.include_router(complaints_router.router, prefix="/api")
app.include_router(votes_router.router, prefix="/api")
app.include_router(comments_router.router, prefix="/api")
app.include_router(feedback_router.router, prefix="/api")
app.include_router(users_router.router, prefix="/api")
app.include_router(admin_router.router, prefix="/api")
app.include_router(upload_router.router, prefix="/api")
app.include_router(webhooks_router.router, prefix="/api")
app.include_router(config_router.router, prefix="/api")


@app.get("/")
def root() -> dict:
    return {"message": f"Welcome to {settings.PROJECT_NAME} API"}


@app.get("/api/health")
def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy"}
