"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shared.config import get_settings
from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ChatGateError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)

from .models.errors import ErrorResponse
from .routes import access, admin, auth, health, users, webhooks

logger = logging.getLogger(__name__)

# Checked in order; the first matching base class wins
ERROR_STATUS_CODES: list[tuple[type[ChatGateError], int]] = [
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (ExternalServiceError, status.HTTP_502_BAD_GATEWAY),
]


def status_code_for(error: ChatGateError) -> int:
    for error_class, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_class):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def chatgate_error_handler(request: Request, exc: ChatGateError) -> JSONResponse:
    """Render module exceptions as ErrorResponse bodies."""
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")

    body = ErrorResponse(
        error=exc.__class__.__name__,
        detail=exc.message,
        code=exc.code,
        details=exc.details,
    )
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


def configure_logging(log_level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs startup and shutdown logic.
    """
    # Startup
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} on {settings.host}:{settings.port}")
    if settings.access_lookup_failure_policy == "fail_open":
        logger.warning(
            "Access lookup failure policy is fail_open: principals get access "
            "whenever the subscription lookup fails"
        )
    if not settings.payment_webhook_token:
        logger.warning("PAYMENT_WEBHOOK_TOKEN not set, webhook signatures are not verified")
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        description="Subscription-gated access, provisioning and payment webhooks for the chat app",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.add_exception_handler(ChatGateError, chatgate_error_handler)

    # Register routes
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(access.router, prefix="/api/access", tags=["access"])
    app.include_router(admin.router, prefix="/api/admin", tags=["admin"])
    app.include_router(webhooks.router, prefix="/api/webhooks", tags=["webhooks"])

    return app


# Application instance for uvicorn
app = create_app()
