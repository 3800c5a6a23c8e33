"""Employee repository implementations."""

from .in_memory_employee_repo import InMemoryEmployeeRepository
from .postgres_employee_repo import PostgresEmployeeRepository

__all__ = ["InMemoryEmployeeRepository", "PostgresEmployeeRepository"]
