# inventory_ui/test_dev_observability.py
# Unit tests for DEV state observability module

import json
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from inventory_ui.dev_observability import (
    clear_debug_history,
    compute_state_fingerprint,
    describe_row_states,
    detect_state_changes,
    export_snapshot_json,
    get_recent_events,
    redact_value,
    snapshot_state,
    track_event,
    update_fingerprint,
)
from inventory_ui.models import PropertyDraft
from inventory_ui.row_state import Assigning, Editing


def test_redact_sensitive_keys():
    """Sensitive keys should be fully redacted."""
    assert redact_value("password", "secret123") == "[REDACTED]"
    assert redact_value("login_password", "hunter2") == "[REDACTED]"
    assert redact_value("session_cookie", "abc") == "[REDACTED]"
    assert redact_value("new_password", "n3w") == "[REDACTED]"


def test_redact_email_keeps_domain():
    assert redact_value("email", "sam@example.com") == "…@example.com"


def test_non_sensitive_keys():
    """Non-sensitive keys should pass through unchanged."""
    assert redact_value("nav_page", "Properties") == "Properties"
    assert redact_value("actor_role", "admin") == "admin"


def test_track_event_with_details():
    ss = {}
    track_event(ss, "login_success", {"email": "sam@example.com", "password": "pw", "role": "staff"})

    event = ss["_dev_events"][0]
    assert event["name"] == "login_success"
    assert event["details"] == {"email": "…@example.com", "password": "[REDACTED]", "role": "staff"}


def test_track_event_truncation():
    """Event list should truncate to last 100 events."""
    ss = {}
    for i in range(150):
        track_event(ss, f"event_{i}")

    assert len(ss["_dev_events"]) == 100
    assert ss["_dev_events"][0]["name"] == "event_50"


def test_recent_events_newest_first():
    ss = {}
    for name in ("a", "b", "c"):
        track_event(ss, name)

    assert [e["name"] for e in get_recent_events(ss, limit=2)] == ["c", "b"]


def test_clear_debug_history_keeps_app_state():
    ss = {"nav_page": "Properties"}
    track_event(ss, "x")

    clear_debug_history(ss)

    assert ss["_dev_events"] == []
    assert ss["nav_page"] == "Properties"


def test_snapshot_state():
    ss = {"nav_page": "Dashboard", "login_password": "pw"}

    snapshot = snapshot_state(ss, ["nav_page", "login_password", "missing"])

    assert snapshot["nav_page"] == {"exists": True, "value": "Dashboard"}
    assert snapshot["login_password"]["value"] == "[REDACTED]"
    assert snapshot["missing"] == {"exists": False}


def test_describe_row_states():
    states = {7: Editing(PropertyDraft()), 2: Assigning(selection=1)}
    assert describe_row_states(states) == {"2": "Assigning", "7": "Editing"}


def test_fingerprint_tracks_row_state_changes():
    ss = {"nav_page": "Properties", "auth_status": "authenticated", "row_states": {}}
    before = compute_state_fingerprint(ss)

    ss["row_states"] = {"1": "Editing"}

    assert compute_state_fingerprint(ss) != before


def test_fingerprint_ignores_unrelated_keys():
    ss = {"nav_page": "Properties"}
    before = compute_state_fingerprint(ss)

    ss["login_email"] = "sam@example.com"

    assert compute_state_fingerprint(ss) == before


def test_detect_and_update_fingerprint():
    ss = {"nav_page": "Login"}
    changed, old_fp, new_fp = detect_state_changes(ss)
    assert changed and old_fp is None

    update_fingerprint(ss)
    changed, old_fp, _ = detect_state_changes(ss)
    assert not changed
    assert old_fp == new_fp

    ss["nav_page"] = "Dashboard"
    assert detect_state_changes(ss)[0]


def test_export_snapshot_json():
    ss = {"nav_page": "Approvals"}
    track_event(ss, "routing_state", {"page": "Approvals"})

    exported = json.loads(export_snapshot_json(ss, ["nav_page"]))

    assert exported["state"]["nav_page"]["value"] == "Approvals"
    assert exported["recent_events"][0]["name"] == "routing_state"
    assert exported["change_detection"]["changed_since_last"] is True
