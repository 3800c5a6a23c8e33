"""Infra DB: pool + typed errors."""

from .errors import (
    DatabaseConnectionError,
    DatabasePoolError,
    PoolNotOpenError,
    UniqueViolationError,
)
from .pool import Database

__all__ = [
    "Database",
    "DatabasePoolError",
    "PoolNotOpenError",
    "DatabaseConnectionError",
    "UniqueViolationError",
]
