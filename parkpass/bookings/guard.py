from enum import Enum
from typing import FrozenSet, Optional

from parkpass.auth.schemas import Actor, AdminRole
from parkpass.bookings.errors import BookingError, DenialReason, ErrorCode

class Action(str, Enum):
    """Actions the authorization guard knows about"""
    VIEW = "view"
    MARK_USED = "mark_used"
    CANCEL = "cancel"
    DELETE = "delete"
    SEARCH = "search"
    ANALYTICS = "analytics"
    UPDATE_PARK = "update_park"
    MANAGE_CATALOG = "manage_catalog"
    MANAGE_USERS = "manage_users"

TICKET_ACTIONS = frozenset({Action.VIEW, Action.MARK_USED, Action.CANCEL, Action.DELETE})

ROLE_PERMISSIONS = {
    AdminRole.SUPER_ADMIN.value: frozenset(Action),
    AdminRole.PARK_ADMIN.value: TICKET_ACTIONS | {Action.SEARCH, Action.ANALYTICS, Action.UPDATE_PARK},
    AdminRole.TICKET_CHECKER.value: TICKET_ACTIONS,
}

# Roles whose reach is limited to their assigned parks
PARK_SCOPED_ROLES = frozenset({AdminRole.PARK_ADMIN.value, AdminRole.TICKET_CHECKER.value})

def _denied(action: Action, reason: DenialReason, park_id: Optional[int] = None) -> BookingError:
    context = {"action": action.value}
    if park_id is not None:
        context["park_id"] = park_id
    return BookingError(code=ErrorCode.PERMISSION_DENIED, reason=reason, context=context)

def authorize(actor: Optional[Actor], park_id: Optional[int], action: Action) -> Optional[BookingError]:
    """Decide whether ``actor`` may perform ``action`` on a park's records.

    ``park_id`` is the park owning the ticket (or park) being acted on, or
    None for actions that are not tied to one park. Returns None when
    allowed. Must be called before any state transition is applied.
    """
    if actor is None:
        return _denied(action, DenialReason.ROLE_NOT_PERMITTED, park_id)

    if action not in ROLE_PERMISSIONS.get(actor.role, frozenset()):
        return _denied(action, DenialReason.ROLE_NOT_PERMITTED, park_id)

    if actor.role in PARK_SCOPED_ROLES and park_id is not None and park_id not in actor.assigned_parks:
        return _denied(action, DenialReason.DIFFERENT_PARK, park_id)

    return None

def visible_park_ids(actor: Actor) -> Optional[FrozenSet[int]]:
    """Parks whose bookings the actor may list; None means every park"""
    if actor.role in PARK_SCOPED_ROLES:
        return frozenset(actor.assigned_parks)
    return None
