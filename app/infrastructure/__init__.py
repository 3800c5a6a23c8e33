"""Infrastructure: database pool, repositories, session storage."""
