"""ID and token generators."""

import secrets

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()

# 48 random bytes -> 64 url-safe characters.
TOKEN_BYTES = 48


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2) for primary keys."""
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def generate_token(nbytes: int = TOKEN_BYTES) -> str:
    """Return an unguessable url-safe token for sessions and refresh/reset links."""
    return secrets.token_urlsafe(nbytes)
