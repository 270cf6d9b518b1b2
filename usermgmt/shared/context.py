"""Request context management using contextvars.

Provides async-safe storage for request-scoped data such as the current
actor and client metadata. The HTTP layer (not part of this package) sets
it after authentication; the audit recorder reads it as a fallback.

Usage:
    set_current_user(user_id="user123", ip_address="10.0.0.1")
    ctx = get_actor_context()
"""

from contextvars import ContextVar
from dataclasses import dataclass

from usermgmt.shared.enums import ActorType

_current_user_id: ContextVar[str | None] = ContextVar("current_user_id", default=None)
_current_actor_type: ContextVar[ActorType] = ContextVar(
    "current_actor_type", default=ActorType.SYSTEM
)
_current_ip_address: ContextVar[str | None] = ContextVar(
    "current_ip_address", default=None
)
_current_user_agent: ContextVar[str | None] = ContextVar(
    "current_user_agent", default=None
)


@dataclass(frozen=True)
class ActorContext:
    """Immutable snapshot of the current actor context."""

    user_id: str | None
    actor_type: ActorType
    ip_address: str | None = None
    user_agent: str | None = None


def set_current_user(
    user_id: str | None,
    actor_type: ActorType = ActorType.USER,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> None:
    """Set the current actor for this task.

    Raises:
        ValueError: If actor_type is USER and user_id is None or empty.
    """
    if actor_type == ActorType.USER and not user_id:
        raise ValueError("user_id is required when actor_type is USER")
    _current_user_id.set(user_id)
    _current_actor_type.set(actor_type)
    _current_ip_address.set(ip_address)
    _current_user_agent.set(user_agent)


def clear_current_user() -> None:
    """Reset the context to the anonymous system actor."""
    _current_user_id.set(None)
    _current_actor_type.set(ActorType.SYSTEM)
    _current_ip_address.set(None)
    _current_user_agent.set(None)


def get_actor_context() -> ActorContext:
    """Return a snapshot of the current actor context."""
    return ActorContext(
        user_id=_current_user_id.get(),
        actor_type=_current_actor_type.get(),
        ip_address=_current_ip_address.get(),
        user_agent=_current_user_agent.get(),
    )
