"""
Name: PostgreSQL Employee Repository

Responsibilities:
  - CRUD over the employees table, one statement per operation
  - Map database rows into Employee records
  - Translate empty results and constraint violations into domain errors

Collaborators:
  - infrastructure.db.Database: pooled query execution
  - domain.entities: Employee, EmployeeRole

Constraints:
  - Parameterized SQL only (%s placeholders)
  - No transactions: concurrent updates are last-writer-wins
"""

from typing import Any, List, Optional

from ...domain.entities import Employee, EmployeeRole
from ...exceptions import ConflictError, DatabaseError, NotFoundError, ValidationError
from ...logger import logger
from ..db import Database, UniqueViolationError

_EMPLOYEE_COLUMNS = "id, name, email, department, role, password_hash"


def _row_to_employee(row: dict[str, Any]) -> Employee:
    try:
        role = EmployeeRole(row["role"])
    except ValueError as exc:
        raise DatabaseError(f"Invalid employee role in database: {row['role']}") from exc

    return Employee(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        department=row["department"],
        role=role,
        password_hash=row["password_hash"],
    )


def _require_fields(**fields: Optional[str]) -> None:
    missing = [name for name, value in fields.items() if not (value or "").strip()]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


class PostgresEmployeeRepository:
    """R: EmployeeRepository backed by the shared connection pool."""

    def __init__(self, db: Database):
        self._db = db

    def list_all(self) -> List[Employee]:
        rows = self._db.query(f"SELECT {_EMPLOYEE_COLUMNS} FROM employees")
        return [_row_to_employee(row) for row in rows]

    def get_by_id(self, employee_id: int) -> Employee:
        rows = self._db.query(
            f"SELECT {_EMPLOYEE_COLUMNS} FROM employees WHERE id = %s",
            (employee_id,),
        )
        if not rows:
            raise NotFoundError(f"Employee {employee_id} not found")
        return _row_to_employee(rows[0])

    def find_by_email(self, email: str) -> Optional[Employee]:
        rows = self._db.query(
            f"SELECT {_EMPLOYEE_COLUMNS} FROM employees WHERE email = %s",
            (email,),
        )
        return _row_to_employee(rows[0]) if rows else None

    def create(
        self,
        name: str,
        email: str,
        department: str,
        *,
        role: Optional[EmployeeRole] = None,
        password_hash: Optional[str] = None,
    ) -> Employee:
        _require_fields(name=name, email=email, department=department)
        role = role or EmployeeRole.EMPLOYEE

        try:
            rows = self._db.query(
                f"""
                INSERT INTO employees (name, email, department, role, password_hash)
                VALUES (%s, %s, %s, %s, %s)
                RETURNING {_EMPLOYEE_COLUMNS}
                """,
                (name, email, department, role.value, password_hash),
            )
        except UniqueViolationError as exc:
            logger.warning("Employee create rejected: duplicate email")
            raise ConflictError("An employee with this email already exists") from exc

        if not rows:
            raise DatabaseError("Employee creation failed: no row returned")
        return _row_to_employee(rows[0])

    def update(
        self, employee_id: int, name: str, email: str, department: str
    ) -> Employee:
        _require_fields(name=name, email=email, department=department)

        try:
            rows = self._db.query(
                f"""
                UPDATE employees
                SET name = %s, email = %s, department = %s
                WHERE id = %s
                RETURNING {_EMPLOYEE_COLUMNS}
                """,
                (name, email, department, employee_id),
            )
        except UniqueViolationError as exc:
            logger.warning(
                "Employee update rejected: duplicate email",
                extra={"target_employee_id": employee_id},
            )
            raise ConflictError("An employee with this email already exists") from exc

        if not rows:
            raise NotFoundError(f"Employee {employee_id} not found")
        return _row_to_employee(rows[0])

    def delete(self, employee_id: int) -> Employee:
        rows = self._db.query(
            f"DELETE FROM employees WHERE id = %s RETURNING {_EMPLOYEE_COLUMNS}",
            (employee_id,),
        )
        if not rows:
            raise NotFoundError(f"Employee {employee_id} not found")
        return _row_to_employee(rows[0])

    def reset_password(self, employee_id: int, password_hash: str) -> bool:
        rows = self._db.query(
            "UPDATE employees SET password_hash = %s WHERE id = %s RETURNING id",
            (password_hash, employee_id),
        )
        return bool(rows)
