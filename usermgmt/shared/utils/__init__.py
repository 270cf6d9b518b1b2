"""Utility helpers (datetime, generators)."""
