"""FastAPI application entry point."""

from contextlib import asynccontextmanager
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from slowapi.errors import RateLimitExceeded

from toursite.api.main import api_router
from toursite.api.routes import pages, sitemap
from toursite.auth.middleware import CMSGateMiddleware
from toursite.core.config import settings
from toursite.core.db import create_db_and_tables
from toursite.core.exceptions import AppException, RateLimitError
from toursite.core.logging import bind_request_context, get_logger, setup_logging
from toursite.core.rate_limit import limiter
from toursite.i18n import (
    PRIMARY_LOCALE,
    LocaleMiddleware,
    RoutingConfigProvider,
    get_locale,
    init_translations,
    translate,
)

setup_logging()
logger = get_logger(__name__)

_STATIC_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}
HSTS_POLICY = "max-age=31536000; includeSubDomains; preload"


def operation_id(route: APIRoute) -> str:
    """OpenAPI operation ids as ``{tag}-{route name}``."""
    return f"{route.tags[0]}-{route.name}" if route.tags else route.name


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    init_translations()

    # SQLite has no migrations; build the schema directly
    if settings.SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
        create_db_and_tables()

    logger.info(
        "application_startup",
        environment=settings.ENVIRONMENT,
        debug=settings.DEBUG,
        multi_language=app.state.routing_provider.get().enable_multi_language,
        translation_provider_configured=bool(settings.DEEPL_API_KEY),
    )

    yield

    logger.info("application_shutdown")


def _error_response(
    status_code: int, content: dict, locale: str, clear_cookie: bool = False
) -> JSONResponse:
    response = JSONResponse(
        status_code=status_code,
        content=content,
        headers={"Content-Language": locale},
    )
    if clear_cookie:
        response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return response


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        docs_url=f"{settings.API_PREFIX}/docs",
        redoc_url=f"{settings.API_PREFIX}/redoc",
        lifespan=lifespan,
        generate_unique_id_function=operation_id,
    )

    routing_provider = RoutingConfigProvider(
        settings.ROUTING_CONFIG_PATH, settings.ROUTING_CONFIG_TTL_SECONDS
    )
    app.state.routing_provider = routing_provider

    app.state.limiter = limiter

    @app.exception_handler(AppException)
    async def app_exception_handler(
        request: Request, exc: AppException
    ) -> JSONResponse:
        """Handle all AppException subclasses with consistent JSON format.

        Translates error messages based on the request locale.
        """
        locale = get_locale()

        translated_message = exc.message
        if exc.message_key:
            translated_message = translate(exc.message_key, locale, **exc.params)

        logger.warning(
            "app_exception",
            error_code=exc.error_code,
            message=exc.message,
            translated_message=translated_message,
            locale=locale,
            status_code=exc.status_code,
            details=exc.details,
            path=str(request.url.path),
        )

        content = exc.to_dict()
        content["message"] = translated_message
        return _error_response(
            exc.status_code, content, locale, clear_cookie=exc.clear_session_cookie
        )

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(
        request: Request, exc: RateLimitExceeded
    ) -> JSONResponse:
        return await app_exception_handler(
            request, RateLimitError(f"Rate limit exceeded: {exc.detail}")
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Malformed request bodies and parameters are client errors (400)."""
        locale = get_locale()
        errors = [
            {
                "field": ".".join(str(part) for part in error.get("loc", ())),
                "message": error.get("msg", ""),
            }
            for error in exc.errors()
        ]
        summary = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
        logger.info(
            "request_validation_failed", path=str(request.url.path), errors=errors
        )
        return _error_response(
            400,
            {
                "error_code": "VALIDATION_ERROR",
                "message": translate(
                    "error_validation_with_message", locale, message=summary
                ),
                "details": {"errors": errors},
                "message_key": "error_validation_with_message",
            },
            locale,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        locale = get_locale()
        logger.exception(
            "unhandled_exception",
            path=str(request.url.path),
            error_type=type(exc).__name__,
        )
        return _error_response(
            500,
            {
                "error_code": "INTERNAL_ERROR",
                "message": translate("error_internal", locale),
                "details": {},
                "message_key": "error_internal",
            },
            locale,
        )

    @app.middleware("http")
    async def tag_response(request: Request, call_next):
        """Request id for log correlation plus the static response headers."""
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        bind_request_context(request_id, method=request.method, path=request.url.path)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        response.headers.update(_STATIC_HEADERS)
        # Pages differ per negotiated language
        response.headers.setdefault("Vary", "Accept-Language")
        if settings.ENVIRONMENT == "production":
            response.headers["Strict-Transport-Security"] = HSTS_POLICY
        return response

    if settings.all_cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.all_cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=[
                "Content-Type",
                "X-Request-ID",
                "Accept",
                "Accept-Language",
                "Origin",
                "X-Requested-With",
            ],
            expose_headers=["X-Request-ID", "Content-Language"],
        )
        logger.info("cors_configured", origins=settings.all_cors_origins)

    app.include_router(api_router, prefix=settings.API_PREFIX)
    app.include_router(sitemap.public_router)

    @app.get("/health", tags=["health"])
    async def root_health():
        """Root health check endpoint."""
        return {"status": "ok", "service": settings.PROJECT_NAME}

    # Catch-all language routes go last
    app.include_router(pages.router)

    # CMS pages need a session cookie before anything renders
    app.add_middleware(
        CMSGateMiddleware,
        cookie_name=settings.SESSION_COOKIE_NAME,
        login_path=settings.CMS_LOGIN_PATH,
    )

    # Outermost: resolves the language for every request, including redirects
    app.add_middleware(
        LocaleMiddleware,
        routing_provider=routing_provider,
        default_locale=PRIMARY_LOCALE,
    )

    return app


app = create_app()
