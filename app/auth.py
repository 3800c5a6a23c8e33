"""
Name: Session Authentication and Role Guards

Responsibilities:
  - Hash and verify passwords using Argon2
  - Validate login credentials without revealing which part failed
  - Resolve the session cookie to the current Employee once per request
  - Provide FastAPI dependencies for authentication and exact-role checks

Collaborators:
  - sessions.py: signed cookie <-> session store
  - container.py: repository and session manager per app
  - error_responses.py: unauthorized / forbidden / LoginRedirect

Constraints:
  - Every login failure is the same 401 (no account enumeration)
  - Roles are compared by equality; admin does not satisfy manager
  - Never log passwords, digests or session tokens

Notes:
  - With AUTH_ENABLED=false the guards let every request through
"""

import secrets
from typing import Any, Callable, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from fastapi import Depends, Request
from starlette.concurrency import run_in_threadpool

from .container import get_container, get_employee_repository, get_session_manager
from .context import employee_id_var
from .domain.entities import Employee, EmployeeRole
from .domain.repositories import EmployeeRepository
from .error_responses import LoginRedirect, forbidden, unauthorized
from .exceptions import NotFoundError
from .logger import logger
from .sessions import SessionManager

# R: Largest id a PostgreSQL integer column can hold
MAX_EMPLOYEE_ID = 2_147_483_647

_password_hasher = PasswordHasher()

# R: Verified against when no real digest exists, so every failure costs one Argon2 run
_DUMMY_PASSWORD_HASH = _password_hasher.hash(secrets.token_urlsafe(32))


def hash_password(password: str) -> str:
    """R: Hash a password using Argon2."""
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """R: Verify password against stored hash (no hash never verifies)."""
    if not password_hash:
        return False
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def parse_employee_id(value: Any) -> Optional[int]:
    """R: Accept a positive integer or its decimal string form."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        employee_id = value
    elif isinstance(value, str) and value.strip().isdigit():
        employee_id = int(value.strip())
    else:
        return None
    if employee_id < 1 or employee_id > MAX_EMPLOYEE_ID:
        return None
    return employee_id


def authenticate_employee(
    repository: EmployeeRepository, employee_id: Any, password: Any
) -> Optional[Employee]:
    """R: Employee for valid credentials, None for every kind of failure."""
    parsed_id = parse_employee_id(employee_id)
    candidate = password if isinstance(password, str) else ""

    employee: Optional[Employee] = None
    if parsed_id is not None:
        try:
            employee = repository.get_by_id(parsed_id)
        except NotFoundError:
            employee = None

    stored_hash = employee.password_hash if employee is not None else None
    matched = verify_password(candidate, stored_hash or _DUMMY_PASSWORD_HASH)
    if employee is None or not stored_hash or not candidate or not matched:
        return None
    return employee


def is_authenticated(employee: Optional[Employee]) -> bool:
    return employee is not None


def has_role(employee: Optional[Employee], role: EmployeeRole | str) -> bool:
    """R: Exact role match; anonymous never matches."""
    return employee is not None and employee.role == EmployeeRole(role)


def can_view_employee(viewer: Optional[Employee], target_id: int) -> bool:
    """R: Admins and managers see everyone, employees see themselves."""
    if viewer is None:
        return False
    if viewer.role in (EmployeeRole.ADMIN, EmployeeRole.MANAGER):
        return True
    return viewer.id == target_id


def _load_session_employee(
    request: Request, sessions: SessionManager, repository: EmployeeRepository
) -> Optional[Employee]:
    loaded = sessions.load(request)
    if loaded is None:
        return None

    token, employee_id = loaded
    try:
        return repository.get_by_id(employee_id)
    except NotFoundError:
        logger.info(
            "Session refers to a deleted employee, destroying it",
            extra={"session_employee_id": employee_id},
        )
        sessions.destroy(token)
        return None


async def get_session_employee(
    request: Request,
    sessions: SessionManager = Depends(get_session_manager),
    repository: EmployeeRepository = Depends(get_employee_repository),
) -> Optional[Employee]:
    """
    R: FastAPI dependency resolving the current Employee (None if anonymous).

    The store and repository are blocking, so the lookup runs in the
    threadpool; the context var is set here so handler logs carry the id.
    """
    employee = await run_in_threadpool(
        _load_session_employee, request, sessions, repository
    )
    request.state.employee = employee
    if employee is not None:
        employee_id_var.set(str(employee.id))
    return employee


def _auth_enabled(request: Request) -> bool:
    return get_container(request).settings.auth_enabled


def require_authenticated(redirect_to: Optional[str] = None) -> Callable:
    """
    FastAPI dependency that requires a logged-in employee.

    Anonymous callers get a 302 to redirect_to when set, else 401.
    """

    async def dependency(
        request: Request,
        employee: Optional[Employee] = Depends(get_session_employee),
    ) -> Optional[Employee]:
        if not _auth_enabled(request):
            return employee
        if not is_authenticated(employee):
            if redirect_to:
                raise LoginRedirect(redirect_to)
            raise unauthorized()
        return employee

    return dependency


def require_role(role: EmployeeRole | str) -> Callable:
    """
    FastAPI dependency that requires an exact role.

    Usage:
        @router.get("/employees")
        def list_employees(_: Employee = Depends(require_role("admin"))):
            ...
    """
    required_role = EmployeeRole(role)

    async def dependency(
        request: Request,
        employee: Optional[Employee] = Depends(get_session_employee),
    ) -> Optional[Employee]:
        if not _auth_enabled(request):
            return employee
        if not has_role(employee, required_role):
            logger.warning(
                "Role check failed",
                extra={
                    "required_role": required_role.value,
                    "actual_role": employee.role.value if employee else None,
                },
            )
            raise forbidden("Forbidden")
        return employee

    return dependency
