"""
Name: Typed Pool/Connectivity Errors

Responsibilities:
  - Avoid generic RuntimeErrors from the pool layer
  - Let repositories tell a constraint violation from a connectivity failure
"""

from ...exceptions import DatabaseError


class DatabasePoolError(DatabaseError):
    """Base for pool lifecycle errors."""


class PoolNotOpenError(DatabasePoolError):
    """The pool was used before open() or after close()."""


class DatabaseConnectionError(DatabasePoolError):
    """A connection could not be acquired or validated in time."""


class UniqueViolationError(DatabaseError):
    """A statement violated a UNIQUE constraint."""
