"""Persistence: database handle, ORM models, repositories."""
