"""Domain layer: employee entity and repository contract."""

from .entities import Employee, EmployeeRole
from .repositories import EmployeeRepository

__all__ = ["Employee", "EmployeeRole", "EmployeeRepository"]
