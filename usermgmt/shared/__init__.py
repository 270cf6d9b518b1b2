"""Shared cross-cutting helpers: enums, request context, logging, utils."""
