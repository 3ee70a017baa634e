"""Actors acting on orders and the role checks shared by all writers."""

from dataclasses import dataclass
from enum import Enum

from ordering.errors import Forbidden


class ActorRole(Enum):
    CUSTOMER = "customer"
    DELIVERY = "delivery"
    ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    id: str
    role: ActorRole

    @property
    def is_admin(self) -> bool:
        return self.role == ActorRole.ADMIN


def parse_role(raw: str | None) -> ActorRole:
    """Parse a role once at the boundary; unknown roles are never guessed."""
    try:
        return ActorRole(raw)
    except ValueError:
        raise Forbidden(f"Unknown actor role: {raw!r}", role=raw) from None


def require_role(actor: Actor, *allowed: ActorRole) -> None:
    if actor.role not in allowed:
        raise Forbidden(
            f"Role {actor.role.value} may not perform this action",
            actor_id=actor.id,
            role=actor.role.value,
        )
