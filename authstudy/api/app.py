"""FastAPI application factory with lifespan management."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from authstudy import __version__
from authstudy.api.routers import health, protected, public
from authstudy.core.auth import TokenVerifier
from authstudy.core.config import Settings, get_settings
from authstudy.core.database import Database
from authstudy.core.errors import AuthError
from authstudy.core.logging import configure_logging, get_logger
from authstudy.schemas.api import ErrorOut

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    settings: Settings = app.state.settings
    configure_logging(settings)
    database: Database = app.state.database
    logger.info("Starting Auth0 Study API", debug=settings.app_debug, database=repr(database))

    # Warm up the pool; a dead database only disables user sync
    if not await database.ping():
        logger.warning("Starting without database, users will not be provisioned")

    yield

    await database.dispose()
    logger.info("Auth0 Study API stopped")


def _error_response(
    status_code: int, error: str, message: str, headers: dict[str, str] | None = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorOut(error=error, message=message).model_dump(),
        headers=headers,
    )


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
        logger.info(
            "Token rejected", path=request.url.path, kind=exc.kind, reason=exc.message
        )
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return _error_response(exc.status_code, exc.kind, exc.message, headers)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        # Unmatched route or method
        if exc.status_code in (404, 405):
            return _error_response(
                404, "Not Found", f"Cannot {request.method} {request.url.path}"
            )
        return _error_response(
            exc.status_code,
            str(exc.detail),
            str(exc.detail),
            getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _error_response(422, "Validation Error", str(exc.errors()))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error", method=request.method, path=request.url.path)
        return _error_response(500, "Internal Server Error", "Something went wrong")


def create_app(
    settings: Settings | None = None,
    database: Database | None = None,
    verifier: TokenVerifier | None = None,
) -> FastAPI:
    """Build the application.

    The storage handle and token verifier are built from settings unless the
    caller injects its own (tests pass an SQLite database and a verifier
    preloaded with a local JWKS).
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Auth0 Study API",
        description="Protected API with just-in-time user provisioning",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database or Database.from_settings(settings)
    app.state.verifier = verifier or TokenVerifier.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.info(
            "Request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
        )
        return response

    _register_error_handlers(app)

    api_prefix = "/api"
    app.include_router(health.router, prefix=api_prefix)
    app.include_router(public.router, prefix=api_prefix)
    app.include_router(protected.router, prefix=api_prefix)

    return app


app = create_app()
