"""Caller identity as supplied by the upstream auth layer."""

from fastapi import Header

from ordering.actors import Actor, parse_role
from ordering.errors import Forbidden


def get_actor(
    x_actor_id: str = Header(default=""),
    x_actor_role: str = Header(default=""),
) -> Actor:
    """FastAPI dependency: the authenticated caller of this request."""
    if not x_actor_id.strip():
        raise Forbidden("Missing caller identity")
    return Actor(id=x_actor_id.strip(), role=parse_role(x_actor_role.strip().lower()))
