"""
Name: Dependency Container

Responsibilities:
  - Wire the database pool, repository, session manager and rate limiter
  - Expose them to route handlers through FastAPI dependencies

Collaborators:
  - config.py: Settings
  - infrastructure: Database, repositories, session store
  - main.py: create_app(settings, container)

Constraints:
  - Manual DI (no library like dependency-injector)
  - No module-level singletons: the container lives on app.state

Notes:
  - Tests build a Container around InMemoryEmployeeRepository and no Database
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from .config import Settings
from .domain.repositories import EmployeeRepository
from .infrastructure.db import Database
from .infrastructure.repositories import PostgresEmployeeRepository
from .infrastructure.session_store import create_session_store
from .rate_limit import FixedWindowRateLimiter
from .sessions import SessionManager


@dataclass
class Container:
    """
    R: Everything a request handler may need.

    Attributes:
        settings: Validated configuration
        database: Pool owned by the app lifespan (None when not using Postgres)
        employee_repository: Employee persistence
        sessions: Cookie session manager
        rate_limiter: Per-client limiter (None disables rate limiting)
    """

    settings: Settings
    database: Optional[Database]
    employee_repository: EmployeeRepository
    sessions: SessionManager
    rate_limiter: Optional[FixedWindowRateLimiter] = None


def build_session_manager(settings: Settings) -> SessionManager:
    return SessionManager(
        store=create_session_store(settings),
        secret=settings.session_secret,
        cookie_name=settings.session_cookie_name,
        ttl_seconds=settings.session_ttl_seconds,
        secure=settings.is_production(),
    )


def build_rate_limiter(settings: Settings) -> Optional[FixedWindowRateLimiter]:
    if settings.rate_limit_max_requests <= 0:
        return None
    return FixedWindowRateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )


def build_container(settings: Settings) -> Container:
    """R: Production wiring (pool is created closed; the lifespan opens it)."""
    database = Database(settings)
    return Container(
        settings=settings,
        database=database,
        employee_repository=PostgresEmployeeRepository(database),
        sessions=build_session_manager(settings),
        rate_limiter=build_rate_limiter(settings),
    )


# FastAPI dependencies
def get_container(request: Request) -> Container:
    return request.app.state.container


def get_employee_repository(request: Request) -> EmployeeRepository:
    return get_container(request).employee_repository


def get_session_manager(request: Request) -> SessionManager:
    return get_container(request).sessions
