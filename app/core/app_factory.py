from __future__ import annotations

import logging
import sqlite3
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncIterator, Dict, Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from .config import Settings
from .container import ApplicationContainer
from .logging import configure_logging
from ..application.services.message_service import MessageService
from ..application.services.verification_service import VerificationService
from ..infrastructure.persistence.sqlite import SQLitePersistence
from ..presentation.api.routers import auth as auth_router
from ..presentation.api.routers import messages as messages_router
from ..services.account_service import AccountService
from ..services.email_service import EmailService

logger = logging.getLogger(__name__)


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()

    app = FastAPI(title="True Feedback", lifespan=_create_lifespan(settings))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)

    app.include_router(auth_router.router)
    app.include_router(messages_router.router)

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"ok": True}

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
        else:
            message = "Invalid request"
        return JSONResponse(
            status_code=HTTP_400_BAD_REQUEST,
            content={"success": False, "message": message},
        )

    @app.exception_handler(sqlite3.Error)
    async def database_exception_handler(request: Request, exc: sqlite3.Error):
        logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=HTTP_503_SERVICE_UNAVAILABLE,
            content={"success": False, "message": "Database unavailable"},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": "Internal server error"},
        )


def _create_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()
        persistence = SQLitePersistence(settings.database_path)
        email_service = EmailService(
            smtp_host=settings.smtp_host,
            smtp_port=settings.smtp_port,
            smtp_username=settings.smtp_username,
            smtp_password=settings.smtp_password,
            from_email=settings.smtp_from_email,
            from_name=settings.smtp_from_name,
            frontend_base_url=settings.frontend_base_url,
        )
        verification_service = VerificationService(
            persistence,
            email_service,
            code_ttl=timedelta(minutes=settings.verify_code_ttl_minutes),
        )
        account_service = AccountService(
            persistence,
            verification_service,
            jwt_secret=settings.jwt_secret,
            jwt_algorithm=settings.jwt_algorithm,
            jwt_expiration_hours=settings.jwt_expiration_hours,
        )
        message_service = MessageService(persistence)

        container = ApplicationContainer(
            settings=settings,
            persistence=persistence,
            email_service=email_service,
            verification_service=verification_service,
            account_service=account_service,
            message_service=message_service,
        )

        app.state.container = container  # type: ignore[attr-defined]
        logger.info("Database ready at %s", settings.database_path)

        try:
            yield
        finally:
            persistence.close()

    return lifespan
