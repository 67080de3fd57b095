"""
Blog API — Authorization Guard
================================

What:  Decides whether an authenticated identity may perform an action on a
       resource owned by some user.
How:   A pure function of (identity, owner id, action). Reads are open to any
       identity; updates and deletes require identity.id == owner id.
Who:   Called by post and comment services before every mutation.

The guard never touches the database. Callers load the resource first, so a
missing resource is a 404 and an existing one owned by someone else is a 403.
"""

import logging
from enum import Enum

from app.exceptions import AuthorizationError
from app.services.auth_service import Identity

logger = logging.getLogger(__name__)


class Action(str, Enum):
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


class Decision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


def authorize(identity: Identity, owner_id: int, action: Action) -> Decision:
    if action is Action.READ:
        return Decision.ALLOW
    if identity.id == owner_id:
        return Decision.ALLOW
    return Decision.DENY


def ensure_allowed(identity: Identity, owner_id: int, action: Action, resource: str) -> None:
    """
    Raise AuthorizationError unless `identity` may perform `action`.

    Args:
        identity:  the authenticated caller
        owner_id:  user id that owns the resource
        action:    what the caller wants to do
        resource:  resource name used in the error message ("post", "comment")
    """
    if authorize(identity, owner_id, action) is Decision.DENY:
        logger.info(
            "Denied %s on %s owned by user %s to user %s",
            action.value, resource, owner_id, identity.id,
        )
        raise AuthorizationError(
            resource=resource,
            action=action.value,
            context={"owner_id": owner_id, "user_id": identity.id},
        )
