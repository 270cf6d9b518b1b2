"""Infrastructure: persistence (SQLAlchemy) and security."""
