"""
Name: FastAPI Application Factory

Responsibilities:
  - Build the FastAPI application from explicit Settings and Container
  - Open the pool and verify connectivity before serving traffic
  - Install middleware, exception handlers and routers
  - Expose the health check endpoint

Collaborators:
  - container.py: build_container(settings)
  - routes.router: employee CRUD
  - auth_routes.router: login/logout/protected/reset-password
  - middleware, security, rate_limit: cross-cutting concerns

Constraints:
  - No module-level app: uvicorn runs create_app with --factory
  - Startup fails (non-zero exit) when the database is unreachable

Notes:
  - Middleware order matters: SecurityHeaders -> RequestContext -> RateLimit
    -> routes, so even 429 responses carry security headers and a request id
  - /healthz is exempt from rate limiting
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request

from .auth_routes import router as auth_router
from .config import Settings, get_settings
from .container import Container, build_container
from .exception_handlers import register_exception_handlers
from .exceptions import DatabaseError
from .logger import logger, set_log_level
from .middleware import RequestContextMiddleware
from .rate_limit import RateLimitMiddleware
from .routes import router
from .security import SecurityHeadersMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle. Opens and verifies the pool."""
    container: Container = app.state.container
    settings = container.settings
    database = container.database

    if database is not None:
        try:
            database.open()
            database.ping()
        except DatabaseError as exc:
            logger.error(
                "Error connecting to PostgreSQL database",
                extra={"error_id": exc.error_id, "error_message": exc.message},
            )
            database.close()
            raise RuntimeError("Database unreachable at startup") from exc
        logger.info("Connected to PostgreSQL database")

    logger.info(
        "Employee API starting up",
        extra={
            "app_env": settings.app_env,
            "port": settings.port,
            "auth_enabled": settings.auth_enabled,
            "session_backend": settings.session_backend,
            "rate_limit_max_requests": settings.rate_limit_max_requests,
            "db_pool_min": settings.db_pool_min_size,
            "db_pool_max": settings.db_pool_max_size,
        },
    )
    yield

    if database is not None:
        database.close()
    logger.info("Employee API shutting down")


def create_app(
    settings: Optional[Settings] = None, container: Optional[Container] = None
) -> FastAPI:
    """
    R: Compose the application.

    Args:
        settings: Validated configuration (default: get_settings())
        container: Wired dependencies (default: build_container(settings))
    """
    if container is None:
        settings = settings or get_settings()
        container = build_container(settings)
    settings = container.settings
    set_log_level(settings.log_level)

    app = FastAPI(
        title="Employee Records API",
        version="1.0.0",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "employees", "description": "Employee records (CRUD)"},
            {"name": "auth", "description": "Cookie sessions and password reset"},
        ],
    )
    app.state.container = container

    # R: Middleware order (last added = outermost)
    if container.rate_limiter is not None:
        app.add_middleware(
            RateLimitMiddleware,
            limiter=container.rate_limiter,
            trust_proxy=settings.rate_limit_trust_proxy,
        )
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(SecurityHeadersMiddleware, is_production=settings.is_production())

    register_exception_handlers(app)

    app.include_router(router)
    if settings.auth_enabled:
        app.include_router(auth_router)

    @app.get("/healthz", tags=["health"])
    def healthz(request: Request):
        """
        R: Health check for monitoring/orchestration.

        Returns:
            ok: True if the database answers (or none is configured)
            db: "connected", "disconnected" or "disabled"
            request_id: Correlation ID for this request
        """
        database = request.app.state.container.database
        result = {"ok": True, "db": "disabled"}
        if database is not None:
            try:
                database.ping()
                result.update(db="connected", pool=database.stats())
            except DatabaseError as exc:
                logger.warning(
                    "Health check: DB unavailable", extra={"error": exc.message}
                )
                result.update(ok=False, db="disconnected")
        result["request_id"] = getattr(request.state, "request_id", None)
        return result

    return app
