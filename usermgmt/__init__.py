"""User management backend: accounts, roles, credentials and audit log."""
