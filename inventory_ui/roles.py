"""
inventory_ui/roles.py

Role-based visibility for the property views.

Everything here is a pure function of the actor's role (and, for row actions,
of the row itself). Callers recompute on every render; nothing is cached, so a
role change is reflected on the very next rerun.

Pure Python logic - no Streamlit imports, no network access.
"""

from typing import FrozenSet, List, Optional, Tuple

try:
    from inventory_ui.models import Property, Role
except ModuleNotFoundError:
    from models import Property, Role


# ============================================================================
# Action names
# ============================================================================

class Action:
    """Row and page level controls that can be shown."""
    ASSIGN = "assign"
    REASSIGN = "reassign"
    EDIT = "edit"
    DELETE = "delete"
    ADD = "add"
    CHANGE_LOCATION = "change_location"
    VIEW_DETAILS = "view_details"
    EXPORT_REPORT = "export_report"
    REVIEW_REASSIGNMENTS = "review_reassignments"


# ============================================================================
# Role to capability mapping
# ============================================================================

ROLE_ACTIONS: dict[str, FrozenSet[str]] = {
    Role.STAFF.value: frozenset({
        Action.VIEW_DETAILS,
    }),
    Role.PROPERTY_CUSTODIAN.value: frozenset({
        Action.ASSIGN,
        Action.REASSIGN,
        Action.CHANGE_LOCATION,
        Action.VIEW_DETAILS,
        Action.EXPORT_REPORT,
    }),
    Role.ADMIN.value: frozenset({
        Action.ASSIGN,
        Action.REASSIGN,
        Action.EDIT,
        Action.DELETE,
        Action.ADD,
        Action.CHANGE_LOCATION,
        Action.VIEW_DETAILS,
        Action.EXPORT_REPORT,
    }),
    Role.MASTER_ADMIN.value: frozenset({
        Action.ASSIGN,
        Action.REASSIGN,
        Action.EDIT,
        Action.DELETE,
        Action.ADD,
        Action.CHANGE_LOCATION,
        Action.VIEW_DETAILS,
        Action.EXPORT_REPORT,
        Action.REVIEW_REASSIGNMENTS,
    }),
    # Diagnostic role: sees everything, changes nothing
    Role.DEVELOPER.value: frozenset({
        Action.VIEW_DETAILS,
    }),
}

PRIVILEGED_ROLES = frozenset({
    Role.PROPERTY_CUSTODIAN.value,
    Role.ADMIN.value,
    Role.MASTER_ADMIN.value,
    Role.DEVELOPER.value,
})

# Column key -> header label. Order is display order.
BASE_COLUMNS: List[Tuple[str, str]] = [
    ("property_no", "Property No."),
    ("description", "Description"),
    ("quantity", "Qty"),
    ("value", "Value"),
    ("serial_no", "Serial No."),
    ("category", "Category"),
]


def _role_value(role) -> str:
    if role is None:
        return ""
    if isinstance(role, Role):
        return role.value
    return str(role).lower()


def allowed_actions(role) -> FrozenSet[str]:
    """All actions a role may ever see. Unknown roles get nothing."""
    return ROLE_ACTIONS.get(_role_value(role), frozenset())


def can(role, action: str) -> bool:
    return action in allowed_actions(role)


def is_privileged(role) -> bool:
    """Privileged actors see the whole collection; everyone else only their own items."""
    return _role_value(role) in PRIVILEGED_ROLES


def assignable_role(role) -> Optional[Role]:
    """
    Which users an actor may hand properties to.

    Custodians assign to staff; admins and master admins assign to custodians.
    """
    value = _role_value(role)
    if value == Role.PROPERTY_CUSTODIAN.value:
        return Role.STAFF
    if value in (Role.ADMIN.value, Role.MASTER_ADMIN.value):
        return Role.PROPERTY_CUSTODIAN
    return None


def visible_columns(role) -> List[Tuple[str, str]]:
    """Columns of the property table for a role."""
    columns = list(BASE_COLUMNS)
    value = _role_value(role)
    if value == Role.STAFF.value:
        columns.append(("location_detail", "Location"))
        return columns
    columns.extend([
        ("assigned_to", "Assigned To"),
        ("assigned_department", "Department"),
        ("location_detail", "Location"),
    ])
    if value in PRIVILEGED_ROLES:
        columns.append(("reassignment_status", "Status"))
    return columns


def row_actions(role, prop: Property) -> FrozenSet[str]:
    """
    Controls shown for one property row.

    Staff never see mutating controls. Assign is offered for unassigned rows
    and reassign for assigned ones.
    """
    allowed = allowed_actions(role)
    shown = set()
    if Action.VIEW_DETAILS in allowed:
        shown.add(Action.VIEW_DETAILS)
    if prop.is_assigned:
        if Action.REASSIGN in allowed:
            shown.add(Action.REASSIGN)
    elif Action.ASSIGN in allowed:
        shown.add(Action.ASSIGN)
    for action in (Action.EDIT, Action.DELETE, Action.CHANGE_LOCATION):
        if action in allowed:
            shown.add(action)
    return frozenset(shown)


def reassign_disabled(role, prop: Property) -> bool:
    """
    A custodian cannot start another reassignment while one is pending for
    the row; admins can still act on it.
    """
    return _role_value(role) == Role.PROPERTY_CUSTODIAN.value and prop.has_pending_reassignment


# ============================================================================
# Account management
# ============================================================================

MANAGEABLE_ROLES: dict[str, Tuple[Role, ...]] = {
    Role.MASTER_ADMIN.value: (Role.ADMIN, Role.PROPERTY_CUSTODIAN, Role.STAFF),
    Role.ADMIN.value: (Role.PROPERTY_CUSTODIAN, Role.STAFF),
    Role.PROPERTY_CUSTODIAN.value: (Role.STAFF,),
}


def manageable_roles(role) -> Tuple[Role, ...]:
    """Account roles an actor may list and create."""
    return MANAGEABLE_ROLES.get(_role_value(role), ())
