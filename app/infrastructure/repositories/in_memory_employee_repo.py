"""
Name: In-Memory Employee Repository

Responsibilities:
  - Same contract as PostgresEmployeeRepository, held in a dict
  - Enforce email uniqueness the way the UNIQUE constraint does

Notes:
  - Backs the unit tests and local runs without a database
  - Ids come from a monotonically increasing counter and are never reused
"""

import itertools
import threading
from dataclasses import replace
from typing import Dict, List, Optional

from ...domain.entities import Employee, EmployeeRole
from ...exceptions import ConflictError, NotFoundError, ValidationError


class InMemoryEmployeeRepository:
    def __init__(self) -> None:
        self._employees: Dict[int, Employee] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    @staticmethod
    def _require_fields(**fields: Optional[str]) -> None:
        missing = [name for name, value in fields.items() if not (value or "").strip()]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    def _check_email_free(self, email: str, exclude_id: Optional[int] = None) -> None:
        for employee in self._employees.values():
            if employee.email == email and employee.id != exclude_id:
                raise ConflictError("An employee with this email already exists")

    def list_all(self) -> List[Employee]:
        with self._lock:
            return [replace(e) for e in self._employees.values()]

    def get_by_id(self, employee_id: int) -> Employee:
        with self._lock:
            employee = self._employees.get(employee_id)
            if employee is None:
                raise NotFoundError(f"Employee {employee_id} not found")
            return replace(employee)

    def find_by_email(self, email: str) -> Optional[Employee]:
        with self._lock:
            for employee in self._employees.values():
                if employee.email == email:
                    return replace(employee)
            return None

    def create(
        self,
        name: str,
        email: str,
        department: str,
        *,
        role: Optional[EmployeeRole] = None,
        password_hash: Optional[str] = None,
    ) -> Employee:
        self._require_fields(name=name, email=email, department=department)
        with self._lock:
            self._check_email_free(email)
            employee = Employee(
                id=next(self._ids),
                name=name,
                email=email,
                department=department,
                role=role or EmployeeRole.EMPLOYEE,
                password_hash=password_hash,
            )
            self._employees[employee.id] = employee
            return replace(employee)

    def update(
        self, employee_id: int, name: str, email: str, department: str
    ) -> Employee:
        self._require_fields(name=name, email=email, department=department)
        with self._lock:
            current = self._employees.get(employee_id)
            if current is None:
                raise NotFoundError(f"Employee {employee_id} not found")
            self._check_email_free(email, exclude_id=employee_id)
            updated = replace(current, name=name, email=email, department=department)
            self._employees[employee_id] = updated
            return replace(updated)

    def delete(self, employee_id: int) -> Employee:
        with self._lock:
            employee = self._employees.pop(employee_id, None)
            if employee is None:
                raise NotFoundError(f"Employee {employee_id} not found")
            return employee

    def reset_password(self, employee_id: int, password_hash: str) -> bool:
        with self._lock:
            employee = self._employees.get(employee_id)
            if employee is None:
                return False
            self._employees[employee_id] = replace(employee, password_hash=password_hash)
            return True
