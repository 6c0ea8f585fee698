# inventory_ui/app.py
# Property Inventory – listing, assignment, approvals and accounts
#
# Run from repo root: streamlit run inventory_ui/app.py
# Or from the package folder: streamlit run app.py

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pandas as pd
import streamlit as st

# Import environment config (robust fallback for different run contexts)
try:
    from inventory_ui.config import (
        ENABLE_DEBUG_UI, ENV, IS_DEV, IS_LOCAL, PENDING_APPROVALS_POLL_SECONDS, get_api_base_url,
    )
except ModuleNotFoundError:
    from config import (
        ENABLE_DEBUG_UI, ENV, IS_DEV, IS_LOCAL, PENDING_APPROVALS_POLL_SECONDS, get_api_base_url,
    )

try:
    from inventory_ui.accounts import AccountManager, AccountNotFound
    from inventory_ui.api_client import ApiClient, ApiError, error_text
    from inventory_ui.approvals import PendingApprovalsCounter, ReassignmentQueue
    from inventory_ui.auth import ENTRY_PAGE, HOME_PAGE, SessionContext
    from inventory_ui.dashboard import condition_badge, fetch_stats, format_money
    from inventory_ui.details import CONDITION_OPTIONS, CORE_FIELDS, DETAIL_FIELDS, PropertyDetailsEditor
    from inventory_ui.models import AdminStats, Category, CustodianStats, Property, Role, StaffStats
    from inventory_ui.notices import NoticeBoard
    from inventory_ui.reports import ReportExporter
    from inventory_ui.roles import Action, can, manageable_roles, visible_columns
    from inventory_ui.row_state import Assigning, ConfirmingDelete, ConfirmingReassign, Editing
    from inventory_ui.store import PropertyStore
    from inventory_ui.table_controller import PropertyTableController
except ModuleNotFoundError:
    from accounts import AccountManager, AccountNotFound
    from api_client import ApiClient, ApiError, error_text
    from approvals import PendingApprovalsCounter, ReassignmentQueue
    from auth import ENTRY_PAGE, HOME_PAGE, SessionContext
    from dashboard import condition_badge, fetch_stats, format_money
    from details import CONDITION_OPTIONS, CORE_FIELDS, DETAIL_FIELDS, PropertyDetailsEditor
    from models import AdminStats, Category, CustodianStats, Property, Role, StaffStats
    from notices import NoticeBoard
    from reports import ReportExporter
    from roles import Action, can, manageable_roles, visible_columns
    from row_state import Assigning, ConfirmingDelete, ConfirmingReassign, Editing
    from store import PropertyStore
    from table_controller import PropertyTableController

# Import DEV-only observability tools
if IS_DEV:
    try:
        from inventory_ui.dev_observability import (
            track_event, snapshot_state, get_recent_events, clear_debug_history,
            export_snapshot_json, detect_state_changes, update_fingerprint, describe_row_states,
        )
    except ModuleNotFoundError:
        from dev_observability import (
            track_event, snapshot_state, get_recent_events, clear_debug_history,
            export_snapshot_json, detect_state_changes, update_fingerprint, describe_row_states,
        )

st.set_page_config(page_title="Property Inventory", page_icon="📦", layout="wide")

# --------------------------------------------------------------------
# DEV Observability - Keys to track
# --------------------------------------------------------------------

KEYS_OF_INTEREST = [
    "nav_page",
    "auth_status",
    "actor_id",
    "actor_role",
    "row_states",
    "add_mode",
    "detail_property_id",
    "report_file",
    "_clear_prefixes",
]

PUBLIC_PAGES = (ENTRY_PAGE, "Register")

DRAFT_FIELDS = [
    ("property_no", "Property No."),
    ("description", "Description"),
    ("quantity", "Quantity"),
    ("value", "Value"),
    ("serial_no", "Serial No."),
]
CATEGORY_OPTIONS = [""] + [c.value for c in Category]

TOAST_ICONS = {"success": "✅", "error": "❌", "warning": "⚠️", "info": "ℹ️"}

# --------------------------------------------------------------------
# State helpers
# --------------------------------------------------------------------


def init_state() -> None:
    ss = st.session_state

    # One client per browser session: its cookie jar carries the server session
    if "session_ctx" not in ss:
        ss["session_ctx"] = SessionContext(ApiClient())
    ss.setdefault("notices", NoticeBoard())

    # Navigation - default is decided in main() from the auth state
    ss.setdefault("nav_page", None)
    ss.setdefault("detail_property_id", None)
    ss.setdefault("report_file", None)
    ss.setdefault("_clear_prefixes", [])


init_state()

ss = st.session_state


def session() -> SessionContext:
    return ss["session_ctx"]


def notices() -> NoticeBoard:
    return ss["notices"]


def client() -> ApiClient:
    return session().client


# --------------------------------------------------------------------
# Navigation helper (single source of truth)
# --------------------------------------------------------------------

def go_to(page: str) -> None:
    """
    Deterministic navigation helper - the only way pages change.

    Sets ss["nav_page"] and immediately triggers st.rerun().
    """
    st.session_state["nav_page"] = page
    st.rerun()


def dev_event(name: str, details: Optional[Dict[str, Any]] = None) -> None:
    if IS_DEV:
        track_event(ss, name, details)


def clear_widgets(prefix: str) -> None:
    """
    Forget widget values starting with `prefix` on the next run.

    Streamlit owns widget keys once created, so they are popped before any
    widget is instantiated (see apply_pending_clears).
    """
    ss["_clear_prefixes"].append(prefix)


def apply_pending_clears() -> None:
    prefixes = ss.get("_clear_prefixes") or []
    if not prefixes:
        return
    for key in [k for k in list(ss.keys()) if isinstance(k, str) and k.startswith(tuple(prefixes))]:
        ss.pop(key, None)
    ss["_clear_prefixes"] = []


def show_notices() -> None:
    """Render every resolved notice as a toast."""
    for notice in notices().drain():
        if notice.kind == "loading":
            continue
        st.toast(notice.message, icon=TOAST_ICONS.get(notice.kind))


# --------------------------------------------------------------------
# Per-actor objects (created after sign-in, dropped on sign-out)
# --------------------------------------------------------------------

def get_table() -> PropertyTableController:
    actor = session().identity
    table: Optional[PropertyTableController] = ss.get("table")
    if table is None or table.store.actor.id != actor.id:
        if table is not None:
            table.store.close()
        store = PropertyStore(client(), actor)
        table = PropertyTableController(client(), store, notices(), on_event=dev_event)
        ss["table"] = table
    if not table.store.loaded:
        with st.spinner("Loading properties..."):
            table.load()
    return table


def get_counter() -> PendingApprovalsCounter:
    actor = session().identity
    counter: Optional[PendingApprovalsCounter] = ss.get("pending_counter")
    if counter is None or counter.actor is None or actor is None or counter.actor.id != actor.id:
        if counter is not None:
            counter.close()
        counter = PendingApprovalsCounter(client(), actor)
        ss["pending_counter"] = counter
    return counter


def get_exporter() -> ReportExporter:
    if "report_exporter" not in ss:
        ss["report_exporter"] = ReportExporter(client(), notices())
    return ss["report_exporter"]


def drop_actor_state() -> None:
    """Tear down everything tied to the signed-in actor."""
    table = ss.pop("table", None)
    if table is not None:
        table.store.close()
    counter = ss.pop("pending_counter", None)
    if counter is not None:
        counter.close()
    for key in ("report_exporter", "approvals_queue", "details_editor"):
        ss.pop(key, None)
    ss["detail_property_id"] = None
    ss["report_file"] = None


def sync_observable_state() -> None:
    """Mirror the objects' state into plain keys for the DEV fingerprint."""
    ctx = session()
    ss["auth_status"] = ctx.status
    ss["actor_id"] = ctx.identity.id if ctx.identity else None
    ss["actor_role"] = ctx.role.value if ctx.role else None
    table = ss.get("table")
    if table is not None and IS_DEV:
        ss["row_states"] = describe_row_states(table.rows.active())
        ss["add_mode"] = table.add_mode
    else:
        ss["row_states"] = {}
        ss["add_mode"] = False


# --------------------------------------------------------------------
# Sidebar
# --------------------------------------------------------------------

@st.fragment(run_every=PENDING_APPROVALS_POLL_SECONDS)
def render_pending_badge() -> None:
    """Interval trigger for the pending approvals count."""
    counter = ss.get("pending_counter")
    if counter is None or not counter.enabled:
        return
    count = counter.tick()
    if count:
        st.warning(f"🔔 {count} pending reassignment request{'s' if count != 1 else ''}")
    else:
        st.caption("No pending reassignment requests")


def nav_pages_for(role: Optional[Role]) -> List[str]:
    pages = ["Dashboard", "Properties"]
    if can(role, Action.REVIEW_REASSIGNMENTS):
        pages.append("Approvals")
    if manageable_roles(role):
        pages.append("Accounts")
    return pages


def render_sidebar() -> None:
    ctx = session()
    with st.sidebar:
        st.markdown("## 📦 Property Inventory")

        try:
            api_base = get_api_base_url()
            if IS_LOCAL:
                st.caption(f"**API:** {api_base}")
            else:
                from urllib.parse import urlparse
                parsed = urlparse(api_base)
                st.caption(f"**API:** {parsed.netloc or api_base}")
            st.caption(f"**Environment:** {ENV}")
        except (RuntimeError, ValueError) as e:
            st.error(f"⚠️ API config error: {str(e)[:60]}")

        if not ctx.is_authenticated:
            st.caption("_Not logged in_")
            return

        user = ctx.identity
        st.info(f"Logged in as: **{user.name}** ({user.role.value.replace('_', ' ').title()})")
        if user.department:
            st.caption(f"Department: {user.department}")

        render_pending_badge()

        st.markdown("---")
        current = ss.get("nav_page")
        for page in nav_pages_for(ctx.role):
            label = page
            if page == "Approvals":
                count = get_counter().count
                if count:
                    label = f"Approvals ({count})"
            if st.button(
                label,
                key=f"nav_{page}",
                use_container_width=True,
                type="primary" if page == current else "secondary",
            ):
                go_to(page)

        st.markdown("---")
        if st.button("🚪 Logout", key="logout_btn", use_container_width=True):
            drop_actor_state()
            dev_event("logout", {"user_id": user.id})
            go_to(ctx.logout())

        if ENABLE_DEBUG_UI:
            render_debug_panel()


def render_debug_panel() -> None:
    st.markdown("---")
    with st.expander("🔎 State Debug (DEV)", expanded=False):
        st.caption("DEV-only diagnostics for session state debugging")

        st.markdown("##### Navigation State")
        st.text(f"nav_page: {ss.get('nav_page', 'NONE')}")
        st.text(f"auth_status: {ss.get('auth_status')}")
        st.text(f"actor_role: {ss.get('actor_role')}")

        changed, old_fp, new_fp = detect_state_changes(ss)
        st.markdown("##### Change Detection")
        st.text(f"Changed since last: {'✅ Yes' if changed else '❌ No'}")
        st.text(f"Current fingerprint: {new_fp}")
        if old_fp:
            st.text(f"Previous fingerprint: {old_fp}")
        st.text(f"Last change: {ss.get('_debug_last_change_time', 'never')}")

        st.markdown("##### Current State")
        snapshot = snapshot_state(ss, KEYS_OF_INTEREST)
        for key in KEYS_OF_INTEREST:
            entry = snapshot[key]
            if entry["exists"]:
                value_str = str(entry["value"])
                if len(value_str) > 50:
                    value_str = value_str[:50] + "..."
                st.text(f"{key}: {value_str}")
            else:
                st.text(f"{key}: (not set)")

        st.markdown("##### Recent Events")
        events = get_recent_events(ss, limit=30)
        if events:
            for evt in events[:10]:
                details_str = f" | {evt['details']}" if "details" in evt else ""
                st.caption(f"{evt['ts'][-12:-4]} - {evt['name']}{details_str}")
        else:
            st.caption("No events recorded yet")

        col_copy, col_clear = st.columns(2)
        with col_copy:
            if st.button("📋 Copy Snapshot", key="dev_copy_snapshot", use_container_width=True):
                st.text_area("Snapshot JSON (copy this)", export_snapshot_json(ss, KEYS_OF_INTEREST), height=200)
        with col_clear:
            if st.button("🗑️ Clear History", key="dev_clear_history", use_container_width=True):
                clear_debug_history(ss)
                st.rerun()


# --------------------------------------------------------------------
# Login / Register
# --------------------------------------------------------------------

def render_login() -> None:
    ctx = session()
    st.header("Login")
    if ctx.last_error:
        st.error(ctx.last_error)

    with st.form("login_form"):
        email = st.text_input("Email", key="login_email")
        password = st.text_input("Password", type="password", key="login_password")
        submitted = st.form_submit_button("Login")

    if submitted:
        error = ctx.sign_in(email, password)
        if error:
            st.error(error)
            return
        dev_event("login_success", {"email": email, "role": ctx.role.value})
        clear_widgets("login_")
        go_to(HOME_PAGE)

    st.divider()
    if st.button("Create an account", key="goto_register"):
        go_to("Register")


def render_register() -> None:
    ctx = session()
    st.header("Register New Account")

    with st.form("register_form"):
        name = st.text_input("Full name", key="register_name")
        email = st.text_input("Email", key="register_email")
        password = st.text_input("Password", type="password", key="register_password")
        department = st.text_input("Department (optional)", key="register_department")
        submitted = st.form_submit_button("Register")

    if submitted:
        extra = {"department": department.strip()} if department.strip() else None
        error = ctx.sign_up(name, email, password, extra)
        if error:
            st.error(error)
            return
        notices().success("register", "Registration successful! Please log in.")
        clear_widgets("register_")
        go_to(ENTRY_PAGE)

    st.divider()
    if st.button("Back to login", key="goto_login"):
        go_to(ENTRY_PAGE)


# --------------------------------------------------------------------
# Dashboard
# --------------------------------------------------------------------

def render_dashboard() -> None:
    actor = session().identity
    st.markdown(f"## 👋 Welcome, {actor.name}")

    try:
        with st.spinner("Loading dashboard..."):
            stats = fetch_stats(client(), actor)
    except ApiError as e:
        st.error(error_text(e, "Failed to load dashboard."))
        return

    if stats is None:
        st.info("No dashboard for this role. Use the Properties page.")
        return

    if isinstance(stats, AdminStats):
        col1, col2, col3, col4 = st.columns(4)
        col1.metric("Total Properties", stats.total_properties)
        col2.metric("Total Asset Value", format_money(stats.total_asset_value))
        col3.metric("Users", stats.total_users)
        col4.metric("Pending Approvals", stats.pending_approvals)

        left, right = st.columns(2)
        with left:
            st.markdown("### By Department")
            if stats.properties_by_department:
                df = pd.DataFrame([d.model_dump() for d in stats.properties_by_department])
                df["department"] = df["department"].fillna("Unassigned")
                st.bar_chart(df.set_index("department")["count"])
            else:
                st.caption("No data yet")
        with right:
            st.markdown("### By Category")
            if stats.assets_by_category:
                df = pd.DataFrame([c.model_dump() for c in stats.assets_by_category])
                df["category"] = df["category"].fillna("Uncategorized")
                st.bar_chart(df.set_index("category")["count"])
            else:
                st.caption("No data yet")

        st.markdown("### Recent Activity")
        if stats.recent_activity:
            st.dataframe(
                pd.DataFrame([a.model_dump() for a in stats.recent_activity]),
                use_container_width=True,
                column_config={
                    "type": "Type",
                    "description": "Description",
                    "user_name": "User",
                    "timestamp": "When",
                },
                hide_index=True,
            )
        else:
            st.caption("No recent activity")

    elif isinstance(stats, CustodianStats):
        col1, col2, col3 = st.columns(3)
        col1.metric("Properties in Department", stats.properties_in_department)
        col2.metric("Value of Assets", format_money(stats.value_of_assets))
        col3.metric("Staff in Department", stats.staff_in_department)

        st.markdown("### Recently Updated")
        if stats.recent_properties:
            st.dataframe(
                pd.DataFrame([p.model_dump() for p in stats.recent_properties]),
                use_container_width=True,
                column_config={
                    "id": None,
                    "property_no": "Property No.",
                    "description": "Description",
                    "delegated_to": "Delegated To",
                    "last_updated": "Last Updated",
                },
                hide_index=True,
            )
        else:
            st.caption("No properties yet")

    elif isinstance(stats, StaffStats):
        st.metric("Items Assigned to You", stats.assigned_items_count)
        if stats.assigned_items:
            rows = [
                {
                    "Property No.": item.property_no,
                    "Description": item.description,
                    "Condition": condition_badge(item.condition),
                    "Date Assigned": item.date_assigned or "-",
                }
                for item in stats.assigned_items
            ]
            st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
        else:
            st.info("No items are assigned to you yet.")


# --------------------------------------------------------------------
# Properties
# --------------------------------------------------------------------

def cell_text(prop: Property, key: str) -> str:
    value = getattr(prop, key)
    if key == "value":
        return format_money(value)
    if key == "category":
        return value.value if value else "-"
    if key == "reassignment_status":
        return "⏳ Pending" if value else ""
    if value is None or value == "":
        return "-"
    return str(value)


def render_draft_inputs(prefix: str, draft, columns) -> Dict[str, str]:
    """Text inputs for a PropertyDraft; returns the typed values by field."""
    values: Dict[str, str] = {}
    for (name, label), col in zip(DRAFT_FIELDS, columns):
        with col:
            values[name] = st.text_input(label, value=getattr(draft, name), key=f"{prefix}{name}")
    with columns[len(DRAFT_FIELDS)]:
        current = draft.category if draft.category in CATEGORY_OPTIONS else ""
        values["category"] = st.selectbox(
            "Category",
            options=CATEGORY_OPTIONS,
            index=CATEGORY_OPTIONS.index(current),
            format_func=lambda c: c or "-- None --",
            key=f"{prefix}category",
        )
    return values


def render_add_row(table: PropertyTableController) -> None:
    if not can(table.role, Action.ADD):
        return
    if not table.add_mode:
        if st.button("➕ Add Property", key="add_open"):
            table.start_add()
            clear_widgets("add_field_")
            st.rerun()
        return

    with st.container(border=True):
        st.markdown("**New Property**")
        cols = st.columns(len(DRAFT_FIELDS) + 1)
        values = render_draft_inputs("add_field_", table.add_draft, cols)
        save_col, cancel_col, _ = st.columns([1, 1, 6])
        with save_col:
            if st.button("💾 Save", key="add_save", type="primary", disabled=table.add_busy):
                for name, value in values.items():
                    table.set_add_field(name, value)
                if table.save_add():
                    clear_widgets("add_field_")
                st.rerun()
        with cancel_col:
            if st.button("Cancel", key="add_cancel"):
                table.cancel_add()
                clear_widgets("add_field_")
                st.rerun()


def render_row_actions(table: PropertyTableController, prop: Property) -> None:
    pid = prop.id
    controls = table.controls(pid)
    buttons = [
        (Action.VIEW_DETAILS, "🔍 Details"),
        (Action.ASSIGN, "👤 Assign"),
        (Action.REASSIGN, "🔁 Reassign"),
        (Action.EDIT, "✏️ Edit"),
        (Action.DELETE, "🗑️ Delete"),
    ]
    shown = [(action, label) for action, label in buttons if action in controls]
    if not shown:
        return
    cols = st.columns(len(shown))
    for (action, label), col in zip(shown, cols):
        with col:
            clicked = st.button(label, key=f"{action}_{pid}", disabled=not controls[action], use_container_width=True)
        if not clicked:
            continue
        if action == Action.VIEW_DETAILS:
            ss["detail_property_id"] = pid
            go_to("Property Details")
        elif action in (Action.ASSIGN, Action.REASSIGN):
            table.start_assign(pid)
            clear_widgets(f"assign_sel_{pid}")
        elif action == Action.EDIT:
            table.start_edit(pid)
            clear_widgets(f"edit_{pid}_")
        elif action == Action.DELETE:
            table.request_delete(pid)
        st.rerun()

    if prop.has_pending_reassignment and not controls.get(Action.REASSIGN, True):
        st.caption("⏳ Reassignment pending approval")


def render_location_picker(table: PropertyTableController, prop: Property) -> None:
    pid = prop.id
    if Action.CHANGE_LOCATION not in table.controls(pid):
        return
    with st.popover("📍 Location", disabled=table.is_busy(pid)):
        known = table.store.locations
        choice = st.selectbox(
            "Existing location",
            options=[""] + known,
            format_func=lambda loc: loc or "-- Type a new one below --",
            key=f"loc_pick_{pid}",
        )
        typed = st.text_input("New location", key=f"loc_new_{pid}")
        if st.button("Update", key=f"loc_save_{pid}"):
            table.update_location(pid, typed or choice)
            clear_widgets(f"loc_new_{pid}")
            st.rerun()


def render_property_row(table: PropertyTableController, prop: Property, columns) -> None:
    pid = prop.id
    state = table.state_of(pid)

    with st.container(border=True):
        if isinstance(state, Editing):
            cols = st.columns(len(DRAFT_FIELDS) + 1)
            values = render_draft_inputs(f"edit_{pid}_", state.draft, cols)
            save_col, cancel_col, _ = st.columns([1, 1, 6])
            with save_col:
                if st.button("💾 Save", key=f"edit_save_{pid}", type="primary", disabled=table.is_busy(pid)):
                    for name, value in values.items():
                        table.set_draft_field(pid, name, value)
                    table.save_edit(pid)
                    st.rerun()
            with cancel_col:
                if st.button("Cancel", key=f"edit_cancel_{pid}"):
                    table.cancel_edit(pid)
                    st.rerun()
            return

        cols = st.columns(len(columns))
        for (key, label), col in zip(columns, cols):
            with col:
                st.caption(label)
                st.write(cell_text(prop, key))

        if isinstance(state, Assigning):
            render_assign_selector(table, prop, state)
        elif isinstance(state, ConfirmingReassign):
            st.warning(table.reassign_prompt(pid))
            yes_col, no_col, _ = st.columns([1, 1, 6])
            with yes_col:
                if st.button("Confirm", key=f"reassign_yes_{pid}", type="primary", disabled=table.is_busy(pid)):
                    table.confirm_reassign(pid)
                    st.rerun()
            with no_col:
                if st.button("Cancel", key=f"reassign_no_{pid}"):
                    table.cancel_reassign(pid)
                    st.rerun()
        elif isinstance(state, ConfirmingDelete):
            st.warning(table.delete_prompt(pid))
            yes_col, no_col, _ = st.columns([1, 1, 6])
            with yes_col:
                if st.button("Delete", key=f"delete_yes_{pid}", type="primary", disabled=table.is_busy(pid)):
                    table.confirm_delete(pid)
                    st.rerun()
            with no_col:
                if st.button("Cancel", key=f"delete_no_{pid}"):
                    table.cancel_delete(pid)
                    st.rerun()
        else:
            actions_col, location_col = st.columns([5, 1])
            with actions_col:
                render_row_actions(table, prop)
            with location_col:
                render_location_picker(table, prop)


def render_assign_selector(table: PropertyTableController, prop: Property, state: Assigning) -> None:
    pid = prop.id
    users = table.store.users
    options: List[Optional[int]] = [None] + [u.id for u in users]
    names = {u.id: f"{u.name} ({u.department or 'no department'})" for u in users}
    index = options.index(state.selection) if state.selection in options else 0

    sel_col, ok_col, cancel_col = st.columns([4, 1, 1])
    with sel_col:
        picked = st.selectbox(
            "Assign to" if not prop.is_assigned else "Reassign to",
            options=options,
            index=index,
            format_func=lambda uid: "-- Select --" if uid is None else names.get(uid, f"User #{uid}"),
            key=f"assign_sel_{pid}",
        )
    if picked != state.selection:
        table.select_user(pid, picked)
    with ok_col:
        if st.button("Confirm", key=f"assign_ok_{pid}", type="primary", disabled=table.is_busy(pid)):
            outcome = table.confirm_assign(pid)
            if outcome is not None:
                get_counter().on_focus()
            st.rerun()
    with cancel_col:
        if st.button("Cancel", key=f"assign_cancel_{pid}"):
            table.cancel_assign(pid)
            st.rerun()


def clear_report() -> None:
    ss["report_file"] = None


def render_report_export(table: PropertyTableController) -> None:
    if not can(table.role, Action.EXPORT_REPORT):
        return
    exporter = get_exporter()
    report = ss.get("report_file")
    if report is None:
        if st.button("📄 Export Report", key="report_export", disabled=exporter.in_flight):
            with st.spinner("Generating report..."):
                ss["report_file"] = exporter.export()
            st.rerun()
    else:
        st.download_button(
            "⬇️ Download Report",
            report.data,
            file_name=report.filename,
            mime=report.mime,
            key="report_download",
            on_click=clear_report,
        )


def render_pager(table: PropertyTableController) -> None:
    meta = table.store.meta
    if meta.page_count <= 1:
        return
    prev_col, label_col, next_col = st.columns([1, 2, 1])
    with prev_col:
        if st.button("◀ Previous", key="page_prev", disabled=meta.page <= 1):
            table.load(page=meta.page - 1)
            st.rerun()
    with label_col:
        st.caption(f"Page {meta.page} of {meta.page_count} · {meta.total_count} properties")
    with next_col:
        if st.button("Next ▶", key="page_next", disabled=meta.page >= meta.page_count):
            table.load(page=meta.page + 1)
            st.rerun()


def render_properties() -> None:
    table = get_table()
    role = table.role

    header_col, export_col = st.columns([4, 1])
    with header_col:
        title = "## 📦 Properties" if role != Role.STAFF else "## 📦 My Assigned Properties"
        st.markdown(title)
    with export_col:
        render_report_export(table)

    render_add_row(table)

    if not table.store.loaded:
        st.error("Failed to load properties.")
        if st.button("🔄 Retry", key="properties_retry"):
            st.rerun()
        return

    if not table.store.items:
        st.info("No properties to show.")
        return

    columns = visible_columns(role)
    for prop in table.store.items:
        render_property_row(table, prop, columns)

    render_pager(table)


# --------------------------------------------------------------------
# Property details
# --------------------------------------------------------------------

def render_property_details() -> None:
    pid = ss.get("detail_property_id")
    if pid is None:
        go_to("Properties")

    editor: Optional[PropertyDetailsEditor] = ss.get("details_editor")
    if editor is None or editor.property_id != pid:
        editor = PropertyDetailsEditor(client(), pid, notices())
        with st.spinner("Loading property details..."):
            loaded = editor.load()
        if not loaded:
            notices().error("details-load", editor.error)
            ss["detail_property_id"] = None
            go_to("Properties")
        ss["details_editor"] = editor

    record = editor.record
    if st.button("← Back to properties", key="details_back"):
        ss.pop("details_editor", None)
        ss["detail_property_id"] = None
        go_to("Properties")

    st.markdown(f"## {record.property_no}")
    st.caption(record.description)

    may_edit = can(session().role, Action.EDIT)

    if not editor.is_editing:
        left, right = st.columns(2)
        with left:
            st.markdown("### Property")
            for attr, _, label in CORE_FIELDS:
                value = getattr(record, attr)
                st.text(f"{label}: {format_money(value) if attr == 'value' else (value if value not in (None, '') else '-')}")
            st.text(f"Assigned To: {record.assigned_to or '-'}")
            st.text(f"Department: {record.assigned_department or '-'}")
        with right:
            st.markdown("### Details")
            for attr, _, label in DETAIL_FIELDS:
                value = getattr(record.details, attr)
                if attr == "condition":
                    value = condition_badge(value)
                st.text(f"{label}: {value if value not in (None, '') else '-'}")
        if may_edit and st.button("✏️ Edit Details", key="details_edit"):
            editor.begin_edit()
            clear_widgets("details_field_")
            st.rerun()
        return

    core = editor.draft["core"]
    details = editor.draft["details"]
    left, right = st.columns(2)
    typed_core: Dict[str, Any] = {}
    typed_details: Dict[str, Any] = {}
    with left:
        st.markdown("### Property")
        for attr, _, label in CORE_FIELDS:
            key = f"details_field_core_{attr}"
            if attr == "quantity":
                typed_core[attr] = int(st.number_input(label, min_value=0, step=1, value=int(core[attr] or 0), key=key))
            elif attr == "value":
                typed_core[attr] = float(st.number_input(label, min_value=0.0, value=float(core[attr] or 0.0), key=key))
            else:
                typed_core[attr] = st.text_input(label, value=core[attr] or "", key=key)
    with right:
        st.markdown("### Details")
        for attr, _, label in DETAIL_FIELDS:
            key = f"details_field_detail_{attr}"
            if attr == "condition":
                options = [""] + list(CONDITION_OPTIONS)
                current = details[attr] if details[attr] in options else ""
                typed_details[attr] = st.selectbox(label, options, index=options.index(current), key=key) or None
            else:
                typed_details[attr] = st.text_input(label, value=details[attr] or "", key=key) or None

    save_col, cancel_col, _ = st.columns([1, 1, 6])
    with save_col:
        if st.button("💾 Save", key="details_save", type="primary", disabled=editor.saving):
            for attr, value in typed_core.items():
                editor.set_field(attr, value)
            for attr, value in typed_details.items():
                editor.set_field(attr, value, detail=True)
            if editor.save():
                get_table().store.loaded = False
            st.rerun()
    with cancel_col:
        if st.button("Cancel", key="details_cancel"):
            editor.cancel()
            st.rerun()


# --------------------------------------------------------------------
# Approvals
# --------------------------------------------------------------------

def render_approvals() -> None:
    actor = session().identity
    queue: Optional[ReassignmentQueue] = ss.get("approvals_queue")
    if queue is None:
        queue = ReassignmentQueue(client(), actor, notices())
        with st.spinner("Loading pending requests..."):
            queue.load()
        ss["approvals_queue"] = queue

    title_col, refresh_col = st.columns([4, 1])
    with title_col:
        st.markdown("## 🔁 Reassignment Approvals")
    with refresh_col:
        if st.button("🔄 Refresh", key="approvals_refresh"):
            queue.load()
            get_counter().on_focus()
            st.rerun()

    if queue.error:
        st.error(queue.error)
        return
    if not queue.requests:
        st.info("No pending reassignment requests.")
        return

    for req in queue.requests:
        with st.container(border=True):
            st.markdown(f"**{req.property.property_no}** · {req.property.description}")
            st.caption(
                f"From **{req.from_staff.name}** to **{req.to_staff.name}** · "
                f"requested by {req.requested_by.name} · {req.created_at or ''}"
            )
            busy = queue.reviewing is not None
            approve_col, deny_col, _ = st.columns([1, 1, 6])
            decision = None
            with approve_col:
                if st.button("✅ Approve", key=f"approve_{req.request_id}", disabled=busy):
                    decision = "approved"
            with deny_col:
                if st.button("❌ Deny", key=f"deny_{req.request_id}", disabled=busy):
                    decision = "denied"
            if decision:
                if queue.review(req.request_id, decision):
                    get_counter().on_focus()
                    table = ss.get("table")
                    if table is not None:
                        table.store.loaded = False
                st.rerun()


# --------------------------------------------------------------------
# Accounts
# --------------------------------------------------------------------

def render_accounts() -> None:
    manager = AccountManager(client(), session().identity, notices())
    roles = manageable_roles(session().role)
    st.markdown("## 👥 Accounts")

    tabs = st.tabs([r.value.replace("_", " ").title() for r in roles])
    for role, tab in zip(roles, tabs):
        with tab:
            render_account_tab(manager, role)


def render_account_tab(manager: AccountManager, role: Role) -> None:
    prefix = f"acct_{role.value}_"
    try:
        accounts = manager.list_accounts(role)
    except ApiError as e:
        st.error(error_text(e, "Failed to load accounts."))
        accounts = []

    if accounts:
        st.dataframe(
            pd.DataFrame([a.model_dump(include={"id", "name", "email", "department"}) for a in accounts]),
            use_container_width=True,
            column_config={"id": "ID", "name": "Name", "email": "Email", "department": "Department"},
            hide_index=True,
        )
    else:
        st.caption("No accounts yet")

    with st.expander("➕ Create Account", expanded=False):
        with st.form(f"{prefix}create_form"):
            name = st.text_input("Name", key=f"{prefix}create_name")
            email = st.text_input("Email", key=f"{prefix}create_email")
            password = st.text_input("Password", type="password", key=f"{prefix}create_password")
            department = None
            if role != Role.ADMIN:
                department = st.text_input("Department", key=f"{prefix}create_department") or None
            submitted = st.form_submit_button("Create")
        if submitted and manager.create_account(role, name, email, password, department):
            clear_widgets(f"{prefix}create_")
            st.rerun()

    if not accounts:
        return
    with st.expander("✏️ Edit Account", expanded=False):
        selected = st.selectbox(
            "Account",
            options=[None] + [a.id for a in accounts],
            format_func=lambda uid: "-- Select --" if uid is None else next(a.name for a in accounts if a.id == uid),
            key=f"{prefix}edit_id",
        )
        if selected is None:
            return
        try:
            account = manager.get_account(selected)
        except AccountNotFound:
            st.error("Account not found.")
            return
        except ApiError as e:
            st.error(error_text(e, "Failed to load account."))
            return

        edit_prefix = f"{prefix}edit_{selected}_"
        with st.form(f"{edit_prefix}form"):
            name = st.text_input("Name", value=account.name, key=f"{edit_prefix}name")
            email = st.text_input("Email", value=account.email, key=f"{edit_prefix}email")
            role_options = list(manageable_roles(session().role))
            if account.role not in role_options:
                role_options.append(account.role)
            new_role = st.selectbox(
                "Role",
                options=role_options,
                index=role_options.index(account.role),
                format_func=lambda r: r.value.replace("_", " ").title(),
                key=f"{edit_prefix}role",
            )
            department = st.text_input("Department", value=account.department or "", key=f"{edit_prefix}department")
            new_password = st.text_input(
                "New password (leave blank to keep)", type="password", key=f"{edit_prefix}new_password"
            )
            submitted = st.form_submit_button("Save")
        if submitted and manager.update_account(
            selected, name, email, new_role, department or None, new_password=new_password
        ):
            clear_widgets(edit_prefix)
            st.rerun()


# --------------------------------------------------------------------
# Main
# --------------------------------------------------------------------

def main() -> None:
    ctx = session()

    # Pop widget keys scheduled for clearing BEFORE any widget is created
    apply_pending_clears()

    if ctx.is_resolving:
        with st.spinner("Checking your session..."):
            ctx.resolve()
        dev_event("session_resolved", {"status": ctx.status})

    # Route guards: protected pages need an identity, public pages don't want one
    page = ss.get("nav_page")
    if not ctx.is_authenticated:
        if page not in PUBLIC_PAGES:
            drop_actor_state()
            ss["nav_page"] = ENTRY_PAGE
    elif not page or page in PUBLIC_PAGES:
        ss["nav_page"] = HOME_PAGE
    elif page not in nav_pages_for(ctx.role) and page != "Property Details":
        ss["nav_page"] = HOME_PAGE

    nav_page = ss["nav_page"]

    # Focus trigger for the pending badge: fire whenever the page changes
    if ctx.is_authenticated and ss.get("_last_page") != nav_page:
        get_counter().on_focus()
    ss["_last_page"] = nav_page

    sync_observable_state()
    print(
        f"[ROUTING] page={nav_page} | auth={ctx.status} | "
        f"role={ctx.role.value if ctx.role else None}"
    )
    if IS_DEV:
        changed, old_fp, new_fp = detect_state_changes(ss)
        if changed:
            track_event(ss, "state_changed", {"page": nav_page, "old_fp": old_fp, "new_fp": new_fp})
            update_fingerprint(ss)

    render_sidebar()
    show_notices()

    if nav_page == ENTRY_PAGE:
        render_login()
    elif nav_page == "Register":
        render_register()
    elif nav_page == "Dashboard":
        render_dashboard()
    elif nav_page == "Properties":
        render_properties()
    elif nav_page == "Property Details":
        render_property_details()
    elif nav_page == "Approvals":
        render_approvals()
    elif nav_page == "Accounts":
        render_accounts()
    else:
        go_to(ENTRY_PAGE)

    # Notices raised while rendering (e.g. a failed initial load)
    show_notices()


if __name__ == "__main__":
    main()
