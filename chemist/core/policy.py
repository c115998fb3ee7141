# =========================================================
# ACCESS POLICY
#
# One capability matrix: (role, resource, action) -> scope.
#
# ALL  - any record of the resource
# OWN  - only records owned by the caller (e.g. sales rung up
#        under the cashier's own identity)
#
# Anything missing from POLICY is denied.
# =========================================================

import logging
from enum import Enum

from chemist.core.exceptions import NotPermittedError

logger = logging.getLogger(__name__)


class Role(str, Enum):
    ADMIN = "admin"
    CASHIER = "cashier"


class Resource(str, Enum):
    MEDICINES = "medicines"
    SUPPLIERS = "suppliers"
    INTAKE_BATCHES = "intake_batches"
    SALES = "sales"
    SALE_ITEMS = "sale_items"
    ADMIN_SETTINGS = "admin_settings"
    USERS = "users"
    REPORTS = "reports"


class Action(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class Scope(str, Enum):
    ALL = "all"
    OWN = "own"


def _grant_all(role: Role) -> dict:
    return {
        (role, resource, action): Scope.ALL
        for resource in Resource
        for action in Action
    }


POLICY: dict[tuple[Role, Resource, Action], Scope] = {
    **_grant_all(Role.ADMIN),

    (Role.CASHIER, Resource.MEDICINES, Action.READ): Scope.ALL,
    (Role.CASHIER, Resource.MEDICINES, Action.UPDATE): Scope.ALL,

    (Role.CASHIER, Resource.SALES, Action.READ): Scope.ALL,
    (Role.CASHIER, Resource.SALES, Action.CREATE): Scope.OWN,

    (Role.CASHIER, Resource.SALE_ITEMS, Action.READ): Scope.ALL,
    (Role.CASHIER, Resource.SALE_ITEMS, Action.CREATE): Scope.OWN,

    (Role.CASHIER, Resource.REPORTS, Action.READ): Scope.ALL,
}

# Writable fields where a grant is narrower than the whole record.
# Grants missing here may write every field.
FIELD_POLICY: dict[tuple[Role, Resource, Action], frozenset] = {
    (Role.CASHIER, Resource.MEDICINES, Action.UPDATE): frozenset({"quantity"}),
}


def is_allowed(role, resource, action, owner_id=None, user_id=None) -> bool:
    try:
        key = (Role(role), Resource(resource), Action(action))
    except ValueError:
        return False

    scope = POLICY.get(key)

    if scope is None:
        return False

    if scope is Scope.OWN:
        return owner_id is not None and owner_id == user_id

    return True


def has_grant(role, resource, action) -> bool:
    # Any scope at all; ownership is checked once the record is known
    try:
        return (Role(role), Resource(resource), Action(action)) in POLICY
    except ValueError:
        return False


def _label(value) -> str:
    return getattr(value, "value", value)


def authorize(user, resource, action, owner_id=None, scoped=True):
    if user is None or not getattr(user, "is_active", True):
        logger.warning(f"Denied {_label(action)} on {_label(resource)}: inactive or missing user")
        raise NotPermittedError()

    if scoped:
        allowed = is_allowed(user.role, resource, action, owner_id=owner_id, user_id=user.id)
    else:
        allowed = has_grant(user.role, resource, action)

    if not allowed:
        logger.warning(
            f"Denied {_label(action)} on {_label(resource)} "
            f"for user {user.id} ({_label(user.role)})"
        )
        raise NotPermittedError()


def permissions_for(role) -> list[dict]:
    try:
        role = Role(role)
    except ValueError:
        return []

    return [
        {"resource": resource.value, "action": action.value, "scope": scope.value}
        for (granted_role, resource, action), scope in POLICY.items()
        if granted_role is role
    ]


def authorize_fields(user, resource, action, fields):
    allowed = FIELD_POLICY.get((Role(user.role), Resource(resource), Action(action)))

    if allowed is None:
        return

    denied = set(fields) - allowed
    if denied:
        logger.warning(
            f"Denied {_label(action)} of {sorted(denied)} on {_label(resource)} for user {user.id}"
        )
        raise NotPermittedError()
