# This project was developed with assistance from AI tools.
"""FastAPI application entry point."""

import logging
import uuid
from contextlib import asynccontextmanager

from db import get_db_service
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from . import __version__
from .admin import setup_admin
from .core.config import settings
from .integrations import IntegrationError
from .integrations.status import log_integration_status
from .middleware.pii import PIIMaskingMiddleware
from .routes import (
    admin,
    analytics,
    attachments,
    bulk,
    calculator,
    comments,
    deals,
    funding,
    health,
    integrations,
    investor,
    notifications,
    offers,
    underwriting,
    users,
)
from .schemas.error import ErrorResponse, FieldError
from .services.errors import (
    DomainValidationError,
    DuplicateFundingRequestError,
    InvalidTransitionError,
    PermissionDeniedError,
)
from .services.storage import init_storage_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application startup/shutdown lifecycle."""
    log_integration_status()
    init_storage_service(settings)
    yield
    await get_db_service().close()


app = FastAPI(
    title="DealFlow API",
    description="Real-estate deal pipeline: submission, underwriting, offers and funding",
    version=__version__,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

# PII masking -- runs after CORS, masks seller contact details for investors
app.add_middleware(PIIMaskingMiddleware)

# Client IP from X-Forwarded-For, only when the peer is a configured proxy
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=settings.FORWARDED_ALLOW_IPS)

_HTTP_STATUS_TITLES: dict[int, str] = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    409: "Conflict",
    413: "Payload Too Large",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    502: "Bad Gateway",
}


def _build_error(status_code: int, detail: str, request_id: str, **extra) -> ErrorResponse:
    return ErrorResponse(
        title=_HTTP_STATUS_TITLES.get(status_code, "Error"),
        status=status_code,
        detail=detail,
        request_id=request_id,
        **extra,
    )


def _error_response(request: Request, status_code: int, detail: str, **extra) -> JSONResponse:
    request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
    body = _build_error(status_code, detail, request_id, **extra)
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Convert HTTPException to RFC 7807 Problem Details."""
    return _error_response(request, exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Convert Pydantic validation errors to Problem Details with per-field messages."""
    errors = [
        FieldError(field=".".join(str(part) for part in err["loc"]), message=err["msg"])
        for err in exc.errors()
    ]
    detail = "; ".join(f"{e.field}: {e.message}" for e in errors) or "Invalid request"
    return _error_response(request, 422, detail, errors=errors)


@app.exception_handler(PermissionDeniedError)
async def permission_denied_handler(request: Request, exc: PermissionDeniedError):
    return _error_response(request, 403, str(exc))


@app.exception_handler(InvalidTransitionError)
async def invalid_transition_handler(request: Request, exc: InvalidTransitionError):
    return _error_response(request, 409, str(exc))


@app.exception_handler(DuplicateFundingRequestError)
async def duplicate_funding_handler(request: Request, exc: DuplicateFundingRequestError):
    return _error_response(request, 409, str(exc))


@app.exception_handler(DomainValidationError)
async def domain_validation_handler(request: Request, exc: DomainValidationError):
    return _error_response(request, 422, str(exc))


@app.exception_handler(IntegrationError)
async def integration_error_handler(request: Request, exc: IntegrationError):
    """A configured provider failed; the caller sees 502 with the provider named."""
    logger.warning("Integration %s failed: %s", exc.provider, exc.message)
    return _error_response(request, 502, str(exc), provider=exc.provider)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all for unhandled exceptions -- log and return 500."""
    request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
    logger.exception("Unhandled exception (request_id=%s)", request_id)
    body = _build_error(500, "An unexpected error occurred.", request_id)
    return JSONResponse(status_code=500, content=body.model_dump())


# Include routers
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(deals.router, prefix="/api/deals", tags=["deals"])
app.include_router(underwriting.router, prefix="/api/deals", tags=["underwriting"])
app.include_router(bulk.router, prefix="/api/bulk", tags=["bulk"])
app.include_router(calculator.router, prefix="/api", tags=["calculator"])
app.include_router(comments.router, prefix="/api", tags=["comments"])
app.include_router(attachments.router, prefix="/api", tags=["attachments"])
app.include_router(funding.router, prefix="/api", tags=["funding"])
app.include_router(offers.router, prefix="/api", tags=["offers"])
app.include_router(users.router, prefix="/api", tags=["users"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["notifications"])
app.include_router(investor.router, prefix="/api/investor", tags=["investor"])
app.include_router(analytics.router, prefix="/api/analytics", tags=["analytics"])
app.include_router(integrations.router, prefix="/api/integrations", tags=["integrations"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])

# Setup SQLAdmin dashboard at /admin
setup_admin(app)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint"""
    return {"message": "Welcome to DealFlow API"}
