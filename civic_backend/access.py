"""
Access control gate.

``authorize`` answers allow/deny for (actor, resource, action) and never raises;
``ensure_allowed`` is the caller-side conversion of a deny into
AuthorizationError.

| Resource     | Read                      | Create        | Update          | Delete          |
|--------------|---------------------------|---------------|-----------------|-----------------|
| report       | anyone                    | authenticated | admin or owner  | admin or owner  |
| department   | active: anyone, else admin| admin         | admin           | admin           |
| notification | recipient or admin        | admin         | recipient/admin | recipient/admin |
| user         | admin                     | -             | -               | -               |
"""

from enum import Enum
from typing import Any, Optional

from civic_backend.authentication.schemas import UserRole
from civic_backend.errors import AuthorizationError


class Resource(str, Enum):
    REPORT = "report"
    DEPARTMENT = "department"
    NOTIFICATION = "notification"
    USER = "user"


class Action(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


def role_of(actor: Any) -> Optional[UserRole]:
    if actor is None:
        return None
    try:
        return UserRole(getattr(actor, "role", None))
    except ValueError:
        return None


def is_admin(actor: Any) -> bool:
    return role_of(actor) == UserRole.ADMIN


def is_owner(actor: Any, owner_id: Optional[str]) -> bool:
    return actor is not None and owner_id is not None and getattr(actor, "user_id", None) == owner_id


def authorize(actor: Any, resource: Resource, action: Action,
              owner_id: Optional[str] = None, active: bool = True) -> bool:
    """
    ``owner_id`` is the report submitter or the notification recipient;
    ``active`` only matters for department reads.
    """
    admin = is_admin(actor)
    authenticated = role_of(actor) is not None

    if resource == Resource.REPORT:
        if action == Action.READ:
            return True
        if action == Action.CREATE:
            return authenticated
        return admin or is_owner(actor, owner_id)

    if resource == Resource.DEPARTMENT:
        if action == Action.READ:
            return active or admin
        return admin

    if resource == Resource.NOTIFICATION:
        if action == Action.CREATE:
            return admin
        return admin or is_owner(actor, owner_id)

    if resource == Resource.USER:
        return admin and action == Action.READ

    return False


def ensure_allowed(actor: Any, resource: Resource, action: Action,
                   owner_id: Optional[str] = None, active: bool = True,
                   message: Optional[str] = None) -> None:
    if not authorize(actor, resource, action, owner_id=owner_id, active=active):
        raise AuthorizationError(message or f"You are not authorized to {action.value} this {resource.value}")
