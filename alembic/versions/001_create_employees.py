"""Create employees table.

Revision ID: 001_create_employees
Revises:
Create Date: 2026-10-17

"""

from alembic import op
import sqlalchemy as sa

revision: str = "001_create_employees"
down_revision: str | None = None
branch_labels: str | None = None
depends_on: str | None = None


def upgrade() -> None:
    op.create_table(
        "employees",
        sa.Column("id", sa.Integer, sa.Identity(always=False), primary_key=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("email", sa.Text, nullable=False, unique=True),
        sa.Column("department", sa.Text, nullable=False),
        sa.Column(
            "role",
            sa.Text,
            nullable=False,
            server_default=sa.text("'employee'"),
        ),
        # R: NULL until an admin sets a password
        sa.Column("password_hash", sa.Text, nullable=True),
    )
    op.create_check_constraint(
        "ck_employees_role",
        "employees",
        "role IN ('admin', 'manager', 'employee')",
    )


def downgrade() -> None:
    op.drop_constraint("ck_employees_role", "employees", type_="check")
    op.drop_table("employees")
