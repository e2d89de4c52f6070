"""Caller identity.

Authentication happens upstream; the gateway forwards the authenticated user
id in the ``X-User-Id`` header. This module only resolves it to an actor.
"""

from fastapi import Header

from taskdesk.exceptions import AuthenticationError
from taskdesk.models.users import Actor
from taskdesk.services.users import resolve_actor

ACTOR_HEADER = "X-User-Id"


def get_current_actor(x_user_id: str | None = Header(default=None)) -> Actor:
    actor = resolve_actor(x_user_id)
    if actor is None:
        raise AuthenticationError(f"Missing or unknown {ACTOR_HEADER} header. Not authorized.")
    return actor
