"""Verified actor identity and role checks.

Credentials are verified upstream; requests reach us with the actor's id
and role already established in the ``X-Actor-Id`` / ``X-Actor-Role``
headers. This module only enforces what each role may do.
"""
import enum
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, Request

from app.errors import AuthorizationError


class Role(str, enum.Enum):
    client = "client"
    manager = "manager"
    admin = "admin"


STAFF_ROLES = frozenset({Role.manager, Role.admin})


@dataclass(frozen=True)
class Actor:
    actor_id: int
    role: Role
    origin: Optional[str] = None  # network address the request came from

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES


def require_staff(actor: Actor, action: str) -> None:
    if not actor.is_staff:
        raise AuthorizationError(f"Only admin and manager may {action}")


def require_owner_or_staff(actor: Actor, client_id: int, action: str) -> None:
    """Clients may only touch their own events; staff may touch any."""
    if not actor.is_staff and actor.actor_id != client_id:
        raise AuthorizationError(f"Not authorized to {action} for this event")


def get_actor(
    request: Request,
    x_actor_id: int = Header(..., description="Verified actor id"),
    x_actor_role: str = Header(..., description="Verified actor role"),
) -> Actor:
    """FastAPI dependency — builds the Actor for the current request."""
    try:
        role = Role(x_actor_role)
    except ValueError:
        raise AuthorizationError(f"Unknown role: {x_actor_role}")
    origin = request.client.host if request.client else None
    return Actor(actor_id=x_actor_id, role=role, origin=origin)
