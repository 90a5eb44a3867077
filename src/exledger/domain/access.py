"""Role checks for actions offered to the current actor.

The ledger computation itself is role-agnostic; these predicates only gate
writes such as editing or deleting recorded exchanges.
"""

from exledger.domain.entities import Actor, Role
from exledger.domain.errors import PermissionDeniedError, permission_denied

SUPERVISOR_ROLES = frozenset({Role.OWNER, Role.MANAGER})

# Grantable to staff so a senior cashier can correct or remove cash days.
MANAGE_CASH_DAYS = "manage_cash_days"


def is_active(actor: Actor) -> bool:
    """Pending accounts are awaiting approval and may not record anything."""
    return actor.role is not Role.PENDING


def has_permission(actor: Actor, permission: str) -> bool:
    """Owners and managers hold every permission; others need an explicit grant."""
    if actor.role in SUPERVISOR_ROLES:
        return True
    return permission in actor.permissions


def can_edit_transactions(actor: Actor) -> bool:
    return actor.role in SUPERVISOR_ROLES


def can_delete_transactions(actor: Actor) -> bool:
    return actor.role is Role.OWNER


def can_settle_staff(actor: Actor) -> bool:
    return actor.role in SUPERVISOR_ROLES


def can_manage_cash_days(actor: Actor) -> bool:
    return is_active(actor) and has_permission(actor, MANAGE_CASH_DAYS)


def require(actor: Actor, allowed: bool, action: str) -> None:
    """Raise PermissionDeniedError unless ``allowed``."""
    if not allowed:
        raise PermissionDeniedError(permission_denied(actor.role.value, action))


def require_active(actor: Actor, action: str) -> None:
    require(actor, is_active(actor), action)
