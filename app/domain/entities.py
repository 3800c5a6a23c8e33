"""
Name: Domain Entities

Responsibilities:
  - Define the Employee record and the closed set of roles
  - Provide type safety for the domain layer

Collaborators:
  - None (pure domain layer, no external dependencies)

Constraints:
  - No dependencies on infrastructure or frameworks
  - password_hash never leaves the service (see public_dict)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class EmployeeRole(str, Enum):
    """R: Roles are compared by exact match; there is no hierarchy."""

    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


@dataclass
class Employee:
    """
    R: A stored employee.

    Attributes:
        id: Integer primary key assigned by the store
        name: Display name
        email: Unique address
        department: Department name
        role: Authorization role (defaults to employee in the store)
        password_hash: argon2 digest, None until a password is set
    """

    id: int
    name: str
    email: str
    department: str
    role: EmployeeRole = EmployeeRole.EMPLOYEE
    password_hash: Optional[str] = None

    def public_dict(self) -> dict[str, Any]:
        """R: Representation safe to return to clients."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "department": self.department,
            "role": self.role.value,
        }
