"""
Name: Admin Bootstrap Script

Responsibilities:
  - Create an employee with a password and role (idempotent on email)
  - Hash passwords with Argon2
  - Store the employee through the same repository the API uses

Notes:
  - HTTP creation never sets a password, so the first admin comes from here
  - Reads DATABASE_URL (or DB_URL) via Settings
"""

from __future__ import annotations

import argparse
import getpass
import os
import sys

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from app.auth import hash_password  # noqa: E402
from app.config import get_settings  # noqa: E402
from app.domain.entities import Employee, EmployeeRole  # noqa: E402
from app.domain.repositories import EmployeeRepository  # noqa: E402
from app.exceptions import ConflictError  # noqa: E402
from app.infrastructure.db import Database  # noqa: E402
from app.infrastructure.repositories import PostgresEmployeeRepository  # noqa: E402


def _prompt(label: str) -> str:
    value = input(f"{label}: ").strip()
    if not value:
        raise SystemExit(f"{label} is required.")
    return value


def _prompt_password() -> str:
    password = getpass.getpass("Password: ")
    if not password:
        raise SystemExit("Password is required.")
    confirm = getpass.getpass("Confirm password: ")
    if password != confirm:
        raise SystemExit("Passwords do not match.")
    return password


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create an employee that can log in (idempotent on email)."
    )
    parser.add_argument("--name", help="Display name")
    parser.add_argument("--email", help="Email (unique)")
    parser.add_argument("--department", help="Department")
    parser.add_argument(
        "--password",
        help="Password (omit to be prompted securely)",
    )
    parser.add_argument(
        "--role",
        default=EmployeeRole.ADMIN.value,
        choices=[role.value for role in EmployeeRole],
        help="Employee role (default: admin)",
    )
    return parser.parse_args(argv)


def create_employee(
    repository: EmployeeRepository,
    *,
    name: str,
    email: str,
    department: str,
    password: str,
    role: EmployeeRole,
) -> tuple[Employee, bool]:
    """R: (employee, created). An existing email is left untouched."""
    existing = repository.find_by_email(email)
    if existing is not None:
        return existing, False
    try:
        employee = repository.create(
            name,
            email,
            department,
            role=role,
            password_hash=hash_password(password),
        )
    except ConflictError:
        # Created concurrently between the lookup and the insert
        existing = repository.find_by_email(email)
        if existing is None:
            raise
        return existing, False
    return employee, True


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    name = args.name or _prompt("Name")
    email = (args.email or _prompt("Email")).strip()
    department = args.department or _prompt("Department")
    password = args.password or _prompt_password()

    database = Database(get_settings())
    database.open()
    try:
        employee, created = create_employee(
            PostgresEmployeeRepository(database),
            name=name,
            email=email,
            department=department,
            password=password,
            role=EmployeeRole(args.role),
        )
    finally:
        database.close()

    if created:
        print(
            f"Created employee: id={employee.id} email={email} role={employee.role.value}"
        )
    else:
        print(
            "Employee already exists: "
            f"id={employee.id} email={email} role={employee.role.value}"
        )


if __name__ == "__main__":
    main()
