# inventory_ui/dashboard.py
# Role dashboards: pick the stats endpoint for the actor and parse it

from __future__ import annotations

from typing import Optional, Union

try:
    from inventory_ui.api_client import ApiClient, validate_payload
    from inventory_ui.models import AdminStats, CustodianStats, Role, StaffStats, User
except ModuleNotFoundError:
    from api_client import ApiClient, validate_payload
    from models import AdminStats, CustodianStats, Role, StaffStats, User


DashboardStats = Union[AdminStats, CustodianStats, StaffStats]

STATS_ENDPOINTS = {
    Role.ADMIN: ("/dashboard/admin-stats", AdminStats),
    Role.MASTER_ADMIN: ("/dashboard/admin-stats", AdminStats),
    Role.PROPERTY_CUSTODIAN: ("/dashboard/custodian-stats", CustodianStats),
    Role.STAFF: ("/dashboard/staff-stats", StaffStats),
}

CONDITION_BADGES = {
    "excellent": "🟢 Excellent",
    "good": "🔵 Good",
    "fair": "🟡 Fair",
    "poor": "🟠 Poor",
}


def fetch_stats(client: ApiClient, actor: User) -> Optional[DashboardStats]:
    """
    Load the dashboard for the actor's role. Roles without a dashboard get None.

    Raises:
        ApiError: If the stats request fails or the stats are malformed
    """
    entry = STATS_ENDPOINTS.get(actor.role)
    if entry is None:
        return None
    path, model = entry
    body = client.request(path)
    raw = body.get("data") if isinstance(body, dict) else None
    return validate_payload(model, raw or {})


def condition_badge(condition: Optional[str]) -> str:
    safe = (condition or "unknown").lower()
    return CONDITION_BADGES.get(safe, "⚪ Unknown")


def format_money(value: Optional[float]) -> str:
    if value is None:
        return "-"
    return f"₱{value:,.2f}"
