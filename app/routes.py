"""
Name: Employee API Controllers

Responsibilities:
  - Expose CRUD endpoints for the employees table
  - Validate request shape (numeric id, required fields) with Pydantic
  - Apply the list and detail access rules when sessions are enabled

Collaborators:
  - container: employee repository provider
  - auth: session employee and role guards

Constraints:
  - Synchronous endpoints: FastAPI runs them in its threadpool
  - password_hash never appears in a response model

Notes:
  - This module stays thin (controllers only); domain errors are mapped
    to HTTP by exception_handlers
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Request
from pydantic import BaseModel, ConfigDict, Field

from .auth import MAX_EMPLOYEE_ID, can_view_employee, get_session_employee, require_role
from .container import get_container, get_employee_repository
from .domain.entities import Employee, EmployeeRole
from .domain.repositories import EmployeeRepository
from .error_responses import OPENAPI_ERROR_RESPONSES, forbidden, not_found
from .logger import logger

router = APIRouter(prefix="/employees", tags=["employees"])

EmployeeId = Annotated[int, Path(ge=-MAX_EMPLOYEE_ID - 1, le=MAX_EMPLOYEE_ID)]


class EmployeeIn(BaseModel):
    """R: Body for create and full update (all fields required)."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    department: str = Field(..., min_length=1)


class EmployeeRes(BaseModel):
    id: int
    name: str
    email: str
    department: str
    role: EmployeeRole


class DeleteEmployeeRes(BaseModel):
    message: str
    deletedEmployee: EmployeeRes


def to_employee_response(employee: Employee) -> EmployeeRes:
    return EmployeeRes(**employee.public_dict())


@router.get(
    "",
    response_model=list[EmployeeRes],
    responses=OPENAPI_ERROR_RESPONSES,
)
def list_employees(
    repository: EmployeeRepository = Depends(get_employee_repository),
    _role: Optional[Employee] = Depends(require_role(EmployeeRole.ADMIN)),
):
    return [to_employee_response(employee) for employee in repository.list_all()]


@router.get(
    "/{employee_id}",
    response_model=EmployeeRes,
    responses=OPENAPI_ERROR_RESPONSES,
)
def get_employee(
    request: Request,
    employee_id: EmployeeId,
    repository: EmployeeRepository = Depends(get_employee_repository),
    viewer: Optional[Employee] = Depends(get_session_employee),
):
    employee = repository.get_by_id(employee_id)

    if get_container(request).settings.auth_enabled and not can_view_employee(
        viewer, employee.id
    ):
        logger.warning(
            "Employee detail access denied",
            extra={"target_employee_id": employee.id},
        )
        raise forbidden("Forbidden")

    return to_employee_response(employee)


@router.post(
    "",
    response_model=EmployeeRes,
    status_code=201,
    responses=OPENAPI_ERROR_RESPONSES,
)
def create_employee(
    req: EmployeeIn,
    repository: EmployeeRepository = Depends(get_employee_repository),
):
    employee = repository.create(req.name, req.email, req.department)
    logger.info("Employee created", extra={"target_employee_id": employee.id})
    return to_employee_response(employee)


@router.put(
    "/{employee_id}",
    response_model=EmployeeRes,
    responses=OPENAPI_ERROR_RESPONSES,
)
def update_employee(
    req: EmployeeIn,
    employee_id: EmployeeId,
    repository: EmployeeRepository = Depends(get_employee_repository),
):
    employee = repository.update(employee_id, req.name, req.email, req.department)
    return to_employee_response(employee)


@router.delete(
    "/{employee_id}",
    response_model=DeleteEmployeeRes,
    responses=OPENAPI_ERROR_RESPONSES,
)
def delete_employee(
    employee_id: EmployeeId,
    repository: EmployeeRepository = Depends(get_employee_repository),
):
    employee = repository.delete(employee_id)
    logger.info("Employee deleted", extra={"target_employee_id": employee.id})
    return DeleteEmployeeRes(
        message="Employee deleted successfully",
        deletedEmployee=to_employee_response(employee),
    )


@router.post("/{employee_id}", include_in_schema=False)
def post_to_employee(employee_id: str):
    # R: Creation goes through POST /employees; this path is not a resource
    raise not_found("Resource", f"POST /employees/{employee_id}")
