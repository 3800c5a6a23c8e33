"""
Name: Auth Routes (Sessions)

Responsibilities:
  - Handle login/logout with cookie sessions
  - Expose /protected as the browser-facing authenticated page
  - Let admins reset any employee's password

Notes:
  - Only mounted when AUTH_ENABLED=true
  - Argon2 hashing runs in the threadpool (sync endpoints)
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Request, Response
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field

from .auth import (
    MAX_EMPLOYEE_ID,
    authenticate_employee,
    hash_password,
    require_authenticated,
    require_role,
)
from .container import get_employee_repository, get_session_manager
from .domain.entities import Employee, EmployeeRole
from .domain.repositories import EmployeeRepository
from .error_responses import OPENAPI_ERROR_RESPONSES, unauthorized
from .logger import logger
from .routes import EmployeeRes, to_employee_response
from .sessions import SessionManager

router = APIRouter(tags=["auth"])


class LoginRequest(BaseModel):
    # R: Loosely typed so that every malformed credential is a plain 401
    model_config = ConfigDict(extra="ignore")

    employeeId: Any = None
    password: Any = None


class LoginResponse(BaseModel):
    message: str
    user: EmployeeRes


class MessageResponse(BaseModel):
    message: str


class ResetPasswordRequest(BaseModel):
    employeeId: int = Field(..., ge=1, le=MAX_EMPLOYEE_ID)
    newPassword: str = Field(..., min_length=1, max_length=512)


@router.post("/login", response_model=LoginResponse, responses=OPENAPI_ERROR_RESPONSES)
def login(
    request: Request,
    response: Response,
    payload: Any = Body(default=None),
    repository: EmployeeRepository = Depends(get_employee_repository),
    sessions: SessionManager = Depends(get_session_manager),
):
    # R: Non-object bodies (arrays, strings, form data) fail like bad credentials
    req = (
        LoginRequest.model_validate(payload)
        if isinstance(payload, dict)
        else LoginRequest()
    )
    employee = authenticate_employee(repository, req.employeeId, req.password)
    if employee is None:
        logger.warning("Login failed")
        raise unauthorized("Authentication failed")

    sessions.start(request, response, employee.id)
    logger.info("Login succeeded", extra={"target_employee_id": employee.id})
    return LoginResponse(
        message="Login successful", user=to_employee_response(employee)
    )


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    response: Response,
    sessions: SessionManager = Depends(get_session_manager),
):
    sessions.end(request, response)
    return MessageResponse(message="Logout successful")


@router.get("/protected", response_class=PlainTextResponse)
def protected(
    _employee: Employee = Depends(require_authenticated(redirect_to="/login")),
):
    return "You are authenticated!"


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    responses=OPENAPI_ERROR_RESPONSES,
)
def reset_password(
    req: ResetPasswordRequest,
    repository: EmployeeRepository = Depends(get_employee_repository),
    _admin: Employee = Depends(require_role(EmployeeRole.ADMIN)),
):
    updated = repository.reset_password(req.employeeId, hash_password(req.newPassword))
    if not updated:
        # R: Reported as success so the endpoint does not confirm which ids exist
        logger.warning(
            "Password reset matched no employee",
            extra={"target_employee_id": req.employeeId},
        )
    else:
        logger.info("Password reset", extra={"target_employee_id": req.employeeId})
    return MessageResponse(message="Password reset successfully")
