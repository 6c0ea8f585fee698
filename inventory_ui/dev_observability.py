# inventory_ui/dev_observability.py
# DEV-only state observability for the inventory frontend's session state

from __future__ import annotations

import hashlib
import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

# Keys whose values never appear in the debug panel
SENSITIVE_KEYS = {
    "password",
    "new_password",
    "login_password",
    "register_password",
    "cookie",
    "session",
    "token",
    "secret",
}

MAX_EVENTS = 100


def redact_value(key: str, value: Any) -> Any:
    """
    Redact sensitive values.
    - Sensitive key names: "[REDACTED]"
    - Email-looking strings: keep the domain only
    - Everything else unchanged
    """
    key_lower = key.lower()
    if any(sensitive in key_lower for sensitive in SENSITIVE_KEYS):
        return "[REDACTED]"
    if isinstance(value, str) and "@" in value and "email" in key_lower:
        return f"…@{value.split('@', 1)[1]}"
    return value


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def describe_row_states(row_states: Dict[int, Any]) -> Dict[str, str]:
    """Row id -> state class name, e.g. {"12": "Editing"}."""
    return {str(pid): type(state).__name__ for pid, state in sorted(row_states.items())}


def compute_state_fingerprint(session_state: dict) -> str:
    """
    Stable fingerprint of the navigation-relevant state.

    Includes the page, auth status, actor id/role, open row states and add
    mode. Never includes drafts, emails or credentials.

    Returns:
        First 12 chars of a SHA256 hex digest
    """
    fingerprint_data = {
        "nav_page": session_state.get("nav_page"),
        "auth_status": session_state.get("auth_status"),
        "actor_id": session_state.get("actor_id"),
        "actor_role": session_state.get("actor_role"),
        "row_states": session_state.get("row_states") or {},
        "add_mode": bool(session_state.get("add_mode")),
        "detail_property_id": session_state.get("detail_property_id"),
    }
    json_str = json.dumps(fingerprint_data, sort_keys=True, default=str)
    return hashlib.sha256(json_str.encode()).hexdigest()[:12]


def detect_state_changes(session_state: dict) -> Tuple[bool, Optional[str], str]:
    """
    Returns:
        (changed, old_fingerprint, new_fingerprint)
    """
    new_fingerprint = compute_state_fingerprint(session_state)
    old_fingerprint = session_state.get("_debug_last_fingerprint")
    if old_fingerprint is None:
        return True, None, new_fingerprint
    return new_fingerprint != old_fingerprint, old_fingerprint, new_fingerprint


def update_fingerprint(session_state: dict) -> None:
    session_state["_debug_last_fingerprint"] = compute_state_fingerprint(session_state)
    session_state["_debug_last_change_time"] = now_iso()


def track_event(session_state: dict, event_name: str, details: Optional[Dict[str, Any]] = None) -> None:
    """
    Append an event to the session timeline (redacted, capped at MAX_EVENTS).

    Args:
        session_state: Streamlit session_state (or any dict)
        event_name: Short name, e.g. "assign_done"
        details: Optional context; sensitive keys are redacted
    """
    events = session_state.setdefault("_dev_events", [])
    event: Dict[str, Any] = {"ts": now_iso(), "name": event_name}
    if details:
        event["details"] = {k: redact_value(k, v) for k, v in details.items()}
    events.append(event)
    if len(events) > MAX_EVENTS:
        session_state["_dev_events"] = events[-MAX_EVENTS:]


def get_recent_events(session_state: dict, limit: int = 30) -> List[Dict[str, Any]]:
    """Most recent events first."""
    events = session_state.get("_dev_events", [])
    return list(reversed(events[-limit:]))


def clear_debug_history(session_state: dict) -> None:
    """Clear the timeline without touching app state."""
    if "_dev_events" in session_state:
        session_state["_dev_events"] = []


def snapshot_state(session_state: dict, keys_of_interest: List[str]) -> Dict[str, Any]:
    snapshot = {}
    for key in keys_of_interest:
        if key in session_state:
            snapshot[key] = {"exists": True, "value": redact_value(key, session_state[key])}
        else:
            snapshot[key] = {"exists": False}
    return snapshot


def export_snapshot_json(session_state: dict, keys_of_interest: List[str]) -> str:
    """Full diagnostic snapshot as indented JSON."""
    changed, old_fp, new_fp = detect_state_changes(session_state)
    export = {
        "timestamp": now_iso(),
        "state": snapshot_state(session_state, keys_of_interest),
        "recent_events": get_recent_events(session_state, limit=50),
        "change_detection": {
            "changed_since_last": changed,
            "old_fingerprint": old_fp,
            "new_fingerprint": new_fp,
            "last_change_time": session_state.get("_debug_last_change_time"),
        },
    }
    return json.dumps(export, indent=2, default=str)
