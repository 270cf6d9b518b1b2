"""Core: configuration and process lifecycle."""
