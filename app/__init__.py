"""Employee Records API: FastAPI service over a PostgreSQL employees table."""
