import logging

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from sqlmodel import SQLModel
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware

from app.api.deps import Services
from app.api.main import api_router
from app.core.config import settings
from app.core.gateway import (
    GatewayDispatcher,
    GatewayError,
    GatewayMiddleware,
    IdentityProvider,
    JwtIdentityProvider,
    OwnershipRegistry,
    RemoteIdentityProvider,
    RouteClassifier,
    SessionVerifier,
    error_response,
)
from app.core.gateway.composer import QueryComposer
from app.core.generation import GeminiIdeaGenerator, IdeaGenerator
from app.core.store import SqlTableStore, TableStore

_logger = logging.getLogger(__name__)


def custom_generate_unique_id(route: APIRoute) -> str:
    return f"{route.tags[0]}-{route.name}"


if settings.SENTRY_DSN and settings.ENVIRONMENT != "local":
    sentry_sdk.init(dsn=str(settings.SENTRY_DSN), enable_tracing=True)


# ---------------------------------------------------------------------------
# Collaborators: built once per process, injected into the gateway
# ---------------------------------------------------------------------------


def build_identity_provider() -> IdentityProvider:
    if settings.AUTH_PROVIDER == "remote":
        return RemoteIdentityProvider(
            settings.AUTH_PROVIDER_URL or "",
            settings.SESSION_COOKIE_NAME,
            api_key=settings.AUTH_PROVIDER_API_KEY,
            timeout=settings.AUTH_PROVIDER_TIMEOUT_SECONDS,
        )
    return JwtIdentityProvider(settings.SESSION_COOKIE_NAME)


def build_generator() -> IdeaGenerator:
    return GeminiIdeaGenerator(
        settings.GEMINI_API_KEY,
        model=settings.GEMINI_MODEL,
        base_url=settings.GEMINI_API_URL,
        timeout=settings.GEMINI_TIMEOUT_SECONDS,
        fallback=settings.GENERATION_FALLBACK_ENABLED,
    )


def build_store() -> SqlTableStore:
    from app.core.db import engine

    return SqlTableStore(engine, SQLModel.metadata)


def create_app(
    *,
    store: TableStore | None = None,
    identity_provider: IdentityProvider | None = None,
    generator: IdeaGenerator | None = None,
) -> FastAPI:
    """
    Application factory. Route and ownership configuration are validated here,
    so a misconfigured gateway fails at startup rather than per request.
    """
    store = store if store is not None else build_store()
    registry = OwnershipRegistry.from_config(settings.GATEWAY_RESOURCE_TABLES)
    registry.validate(store)
    classifier = RouteClassifier(
        settings.GATEWAY_PUBLIC_ROUTES,
        settings.GATEWAY_PROTECTED_API_ROUTES,
        settings.GATEWAY_AUTH_PAGES,
    )
    dispatcher = GatewayDispatcher(
        classifier,
        SessionVerifier(identity_provider or build_identity_provider()),
        sign_in_path=settings.SIGN_IN_PATH,
        dashboard_path=settings.DASHBOARD_PATH,
    )

    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        generate_unique_id_function=custom_generate_unique_id,
    )
    app.state.services = Services(
        composer=QueryComposer(store, registry),
        generator=generator or build_generator(),
        engine=store.engine if isinstance(store, SqlTableStore) else None,
    )

    # -----------------------------------------------------------------------
    # Exception handlers: every error leaves as {"error": "..."}
    # -----------------------------------------------------------------------

    @app.exception_handler(GatewayError)
    async def gateway_exception_handler(
        request: Request, exc: GatewayError
    ) -> JSONResponse:
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Return 400 with a human-readable message instead of raw Pydantic errors."""
        messages = []
        for err in exc.errors():
            loc = " → ".join(str(l) for l in err.get("loc", []) if l != "body")
            msg = err.get("msg", "Invalid value")
            messages.append(f"{loc}: {msg}" if loc else msg)
        return error_response(400, "; ".join(messages))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all for unhandled exceptions: log and return 500 with a safe message."""
        _logger.exception(
            "Unhandled exception on %s %s", request.method, request.url.path
        )
        detail = "Internal server error"
        if settings.ENVIRONMENT == "local":
            detail = f"Internal server error: {exc}"
        return error_response(500, detail)

    # Gateway first, CORS outermost so preflight requests never hit the gateway.
    app.add_middleware(GatewayMiddleware, dispatcher=dispatcher)
    if settings.all_cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.all_cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(api_router, prefix="/api")
    return app


app = create_app()
