"""
Name: Domain Repository Interfaces

Responsibilities:
  - Define the contract for employee persistence
  - Keep route handlers independent of PostgreSQL

Collaborators:
  - domain.entities: Employee, EmployeeRole
  - Implementations in infrastructure.repositories

Constraints:
  - Pure interface (Protocol), no implementation
  - Missing rows raise NotFoundError, duplicate emails raise ConflictError

Notes:
  - Using typing.Protocol for structural subtyping (duck typing)
  - The in-memory implementation backs the unit tests
"""

from typing import List, Optional, Protocol

from .entities import Employee, EmployeeRole


class EmployeeRepository(Protocol):
    """R: Interface for employee persistence."""

    def list_all(self) -> List[Employee]:
        """R: Every employee, in whatever order the store yields them."""
        ...

    def get_by_id(self, employee_id: int) -> Employee:
        """
        R: Fetch one employee.

        Raises:
            NotFoundError: No employee has this id
        """
        ...

    def find_by_email(self, email: str) -> Optional[Employee]:
        """R: Employee with this email, None when absent."""
        ...

    def create(
        self,
        name: str,
        email: str,
        department: str,
        *,
        role: Optional[EmployeeRole] = None,
        password_hash: Optional[str] = None,
    ) -> Employee:
        """
        R: Insert an employee and return it with its assigned id.

        Raises:
            ValidationError: A required field is empty
            ConflictError: The email is already taken
        """
        ...

    def update(
        self, employee_id: int, name: str, email: str, department: str
    ) -> Employee:
        """
        R: Overwrite name, email and department (role and password untouched).

        Raises:
            ValidationError: A required field is empty
            NotFoundError: No employee has this id
            ConflictError: The email belongs to another employee
        """
        ...

    def delete(self, employee_id: int) -> Employee:
        """
        R: Remove an employee and return the removed record.

        Raises:
            NotFoundError: No employee has this id
        """
        ...

    def reset_password(self, employee_id: int, password_hash: str) -> bool:
        """R: Store a new digest. Returns False when the id matched nothing."""
        ...
