"""
inventory_ui/table_controller.py

Row interaction state machine for the property table.

Each row is in exactly one state (see row_state.py):

    Viewing ──edit──▶ Editing ──save ok / cancel──▶ Viewing
       │
       ├──assign/reassign──▶ Assigning ──confirm (unassigned)──▶ submit ──▶ Viewing
       │                        │
       │                        └──confirm (held by someone else)──▶ ConfirmingReassign
       │                                                               │ confirm ──▶ submit ──▶ Viewing
       │                                                               └ cancel ──▶ Assigning
       └──delete──▶ ConfirmingDelete ──confirm──▶ Viewing (row gone after refetch)

Rules that hold for every action:
- Only a Viewing row can enter Editing, Assigning or ConfirmingDelete.
- A row with a request in flight is busy; its controls are disabled.
- Every successful mutation refetches the store BEFORE the row returns to
  Viewing, so what is shown next is the server's state, never the draft.
- Errors never propagate out of an action: they become notices, and the row
  stays where the user can retry.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Set

try:
    from inventory_ui.api_client import ApiClient, ApiError, AssignOutcome, Queued, assign_outcome, error_text
    from inventory_ui.config import IS_DEV
    from inventory_ui.models import Property, PropertyDraft
    from inventory_ui.notices import NoticeBoard
    from inventory_ui.roles import Action, can, reassign_disabled, row_actions
    from inventory_ui.row_state import (
        VIEWING, Assigning, ConfirmingDelete, ConfirmingReassign, Editing, ReassignProposal, RowState, RowStates,
    )
    from inventory_ui.store import PropertyStore
except ModuleNotFoundError:
    from api_client import ApiClient, ApiError, AssignOutcome, Queued, assign_outcome, error_text
    from config import IS_DEV
    from models import Property, PropertyDraft
    from notices import NoticeBoard
    from roles import Action, can, reassign_disabled, row_actions
    from row_state import (
        VIEWING, Assigning, ConfirmingDelete, ConfirmingReassign, Editing, ReassignProposal, RowState, RowStates,
    )
    from store import PropertyStore


DUPLICATE_PROPERTY_NO_MESSAGE = "A property with this property number already exists."
ASSIGNED_DELETE_PROMPT = "This property is currently assigned. Do you still want to delete it?"
UNASSIGNED_DELETE_PROMPT = "Do you want to delete this property?"
SERVER_CONFIRM_FALLBACK = "This property is assigned. Confirmation is required to delete."

ADD_KEY = "add-property"


def conflict_or(err: ApiError, fallback: str) -> str:
    """Conflict-specific copy for 409s, otherwise the usual server-or-fallback text."""
    if err.is_conflict:
        return err.message or DUPLICATE_PROPERTY_NO_MESSAGE
    return error_text(err, fallback)


class PropertyTableController:
    """
    Drives the property table for one signed-in actor.

    Args:
        client: Gateway client
        store: Collection store the rows come from
        notices: Board collecting user-visible notices
        on_event: Optional hook receiving (event_name, details) for DEV tracing
    """

    def __init__(
        self,
        client: ApiClient,
        store: PropertyStore,
        notices: Optional[NoticeBoard] = None,
        on_event: Optional[Callable[[str, Dict[str, Any]], None]] = None,
    ):
        self.client = client
        self.store = store
        self.notices = notices if notices is not None else NoticeBoard()
        self.on_event = on_event
        self.rows = RowStates()
        self.busy: Set[int] = set()
        self.add_mode = False
        self.add_draft = PropertyDraft()
        self.add_busy = False

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def role(self):
        return self.store.actor.role

    def _emit(self, name: str, **details: Any) -> None:
        if IS_DEV:
            print(f"[TABLE] {name} {details}")
        if self.on_event is not None:
            self.on_event(name, details)

    def state_of(self, property_id: int) -> RowState:
        return self.rows.get(property_id)

    def is_busy(self, property_id: int) -> bool:
        return property_id in self.busy

    def _idle_row(self, property_id: int, action: str) -> Optional[Property]:
        """The row if the actor may start `action` on it right now."""
        prop = self.store.get(property_id)
        if prop is None:
            self.notices.warning("This property is no longer listed.")
            return None
        if action not in row_actions(self.role, prop):
            self.notices.warning("You are not authorized to perform this action.")
            return None
        if property_id in self.busy or not self.rows.is_viewing(property_id):
            return None
        return prop

    def _refresh(self) -> bool:
        """Refetch after a successful mutation."""
        try:
            self.store.refresh()
        except ApiError as e:
            self.notices.warning(
                f"Changes were saved, but the list could not be refreshed: {error_text(e, 'network error')}"
            )
            return False
        self.rows.prune(p.id for p in self.store.items)
        return True

    def load(self, page: Optional[int] = None) -> bool:
        """Initial load or page change."""
        try:
            self.store.fetch(page=page)
        except ApiError as e:
            self.notices.error("load-properties", error_text(e, "Failed to load properties."))
            return False
        self.rows.prune(p.id for p in self.store.items)
        return True

    def controls(self, property_id: int) -> Dict[str, bool]:
        """
        Controls to render for a row, mapped to whether they are enabled.

        Computed from the role on every call; staff always get no mutating
        controls.
        """
        prop = self.store.get(property_id)
        if prop is None:
            return {}
        idle = self.rows.is_viewing(property_id) and property_id not in self.busy
        shown = row_actions(self.role, prop)
        result = {action: idle for action in shown}
        if Action.REASSIGN in result and reassign_disabled(self.role, prop):
            result[Action.REASSIGN] = False
        if Action.VIEW_DETAILS in result:
            result[Action.VIEW_DETAILS] = True
        return result

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def start_edit(self, property_id: int) -> bool:
        prop = self._idle_row(property_id, Action.EDIT)
        if prop is None:
            return False
        self.rows.set(property_id, Editing(PropertyDraft.from_property(prop)))
        self._emit("edit_started", property_id=property_id)
        return True

    def set_draft_field(self, property_id: int, name: str, value: str) -> bool:
        state = self.rows.get(property_id)
        if not isinstance(state, Editing):
            return False
        self.rows.set(property_id, Editing(state.draft.with_field(name, value)))
        return True

    def cancel_edit(self, property_id: int) -> None:
        if isinstance(self.rows.get(property_id), Editing):
            self.rows.reset(property_id)

    def save_edit(self, property_id: int) -> bool:
        state = self.rows.get(property_id)
        if not isinstance(state, Editing) or property_id in self.busy:
            return False

        missing = state.draft.missing_fields()
        if missing:
            self.notices.warning(f"Please fill in: {', '.join(missing)}")
            return False
        try:
            payload = state.draft.to_payload()
        except ValueError as e:
            self.notices.warning(str(e))
            return False

        key = f"edit-{property_id}"
        self.busy.add(property_id)
        try:
            with self.notices.track(key, "Updating property...", "Failed to update property."):
                try:
                    self.client.request(f"/properties/update/{property_id}", "PATCH", {"property": payload})
                except ApiError as e:
                    self.notices.error(key, conflict_or(e, "Failed to update property."))
                    self._emit("edit_failed", property_id=property_id, status=e.status)
                    return False
                self._refresh()
                self.rows.reset(property_id)
                self.notices.success(key, "Property updated!")
                self._emit("edit_saved", property_id=property_id)
                return True
        finally:
            self.busy.discard(property_id)

    # ------------------------------------------------------------------
    # Assignment
    # ------------------------------------------------------------------

    def start_assign(self, property_id: int) -> bool:
        prop = self.store.get(property_id)
        if prop is None:
            self.notices.warning("This property is no longer listed.")
            return False
        if reassign_disabled(self.role, prop):
            self.notices.warning("A reassignment for this property is already pending approval.")
            return False
        action = Action.REASSIGN if prop.is_assigned else Action.ASSIGN
        if self._idle_row(property_id, action) is None:
            return False
        holder = self.store.holder_of(prop)
        self.rows.set(property_id, Assigning(selection=holder.id if holder else None))
        self._emit("assign_started", property_id=property_id, reassign=prop.is_assigned)
        return True

    def select_user(self, property_id: int, user_id: Optional[int]) -> bool:
        state = self.rows.get(property_id)
        if not isinstance(state, Assigning):
            return False
        if user_id is not None and self.store.user(user_id) is None:
            self.notices.warning("That user cannot receive assignments.")
            return False
        self.rows.set(property_id, Assigning(selection=user_id))
        return True

    def cancel_assign(self, property_id: int) -> None:
        if isinstance(self.rows.get(property_id), (Assigning, ConfirmingReassign)):
            self.rows.reset(property_id)

    def confirm_assign(self, property_id: int) -> Optional[AssignOutcome]:
        """
        Confirm the selector.

        Unassigned rows submit right away. Rows held by someone else open the
        reassign dialog instead, and picking the current holder is rejected
        without a request.

        Returns:
            The assign outcome if a request was sent and succeeded, else None
        """
        state = self.rows.get(property_id)
        if not isinstance(state, Assigning) or property_id in self.busy:
            return None
        if state.selection is None:
            self.notices.warning("Please select a user")
            return None

        prop = self.store.get(property_id)
        if prop is None:
            self.rows.reset(property_id)
            return None

        if prop.is_assigned:
            holder = self.store.holder_of(prop)
            if holder is not None and holder.id == state.selection:
                self.notices.warning("This property is already assigned to this user.")
                return None
            self.rows.set(property_id, ConfirmingReassign(ReassignProposal(property_id, state.selection)))
            self._emit("reassign_confirmation_opened", property_id=property_id, new_user_id=state.selection)
            return None

        return self._submit_assign(property_id, state.selection, reassigning=False)

    def confirm_reassign(self, property_id: int) -> Optional[AssignOutcome]:
        state = self.rows.get(property_id)
        if not isinstance(state, ConfirmingReassign) or property_id in self.busy:
            return None
        return self._submit_assign(property_id, state.proposal.new_user_id, reassigning=True)

    def cancel_reassign(self, property_id: int) -> None:
        state = self.rows.get(property_id)
        if isinstance(state, ConfirmingReassign):
            self.rows.set(property_id, Assigning(selection=state.proposal.new_user_id))

    def reassign_prompt(self, property_id: int) -> str:
        prop = self.store.get(property_id)
        state = self.rows.get(property_id)
        new_user = None
        if isinstance(state, ConfirmingReassign):
            new_user = self.store.user(state.proposal.new_user_id)
        holder = prop.assigned_to if prop else "another user"
        target = new_user.name if new_user else "the selected user"
        return f"This property is currently assigned to {holder}. Do you want to reassign it to {target}?"

    def _submit_assign(self, property_id: int, user_id: int, reassigning: bool) -> Optional[AssignOutcome]:
        key = f"assign-{property_id}"
        loading = "Submitting request..." if reassigning else "Assigning property..."
        self.busy.add(property_id)
        try:
            with self.notices.track(key, loading, "Failed to complete the assignment request."):
                try:
                    response = self.client.request_with_status(
                        "/properties/assign", "POST", {"userId": user_id, "propertyId": property_id}
                    )
                except ApiError as e:
                    self.notices.error(key, error_text(e, "Failed to complete the assignment request."))
                    self.rows.set(property_id, Assigning(selection=user_id))
                    self._emit("assign_failed", property_id=property_id, status=e.status)
                    return None

                outcome = assign_outcome(response)
                # Queued requests change nothing yet; the refetch shows the
                # prior holder flagged as pending.
                self._refresh()
                self.rows.reset(property_id)
                if isinstance(outcome, Queued):
                    self.notices.success(key, outcome.message or "Request submitted for approval!")
                else:
                    self.notices.success(key, "Property assigned successfully!")
                self._emit("assign_done", property_id=property_id, queued=isinstance(outcome, Queued))
                return outcome
        finally:
            self.busy.discard(property_id)

    # ------------------------------------------------------------------
    # Deleting
    # ------------------------------------------------------------------

    def request_delete(self, property_id: int) -> bool:
        prop = self._idle_row(property_id, Action.DELETE)
        if prop is None:
            return False
        self.rows.set(property_id, ConfirmingDelete(assigned=prop.is_assigned))
        return True

    def delete_prompt(self, property_id: int) -> str:
        state = self.rows.get(property_id)
        if isinstance(state, ConfirmingDelete) and state.assigned:
            return ASSIGNED_DELETE_PROMPT
        return UNASSIGNED_DELETE_PROMPT

    def cancel_delete(self, property_id: int) -> None:
        if isinstance(self.rows.get(property_id), ConfirmingDelete):
            self.rows.reset(property_id)

    def confirm_delete(self, property_id: int) -> bool:
        """
        Send the delete after the dialog was confirmed.

        A `requiresConfirmation` answer is not an error: the dialog stays open
        and the next confirm resubmits with confirmed=true.
        """
        state = self.rows.get(property_id)
        if not isinstance(state, ConfirmingDelete) or property_id in self.busy:
            return False

        key = f"delete-{property_id}"
        self.busy.add(property_id)
        try:
            with self.notices.track(key, "Deleting property...", "Failed to delete property"):
                try:
                    body = self.client.request(f"/properties/{property_id}", "DELETE", {"confirmed": True})
                except ApiError as e:
                    self.notices.error(key, error_text(e, "Failed to delete property"))
                    self.rows.reset(property_id)
                    return False

                if isinstance(body, dict) and body.get("requiresConfirmation"):
                    self.notices.warning(body.get("message") or SERVER_CONFIRM_FALLBACK, key=key)
                    self.rows.set(property_id, ConfirmingDelete(assigned=True, server_prompted=True))
                    self._emit("delete_needs_confirmation", property_id=property_id)
                    return False

                self._refresh()
                self.rows.reset(property_id)
                self.notices.success(key, "Property deleted successfully")
                self._emit("delete_done", property_id=property_id)
                return True
        finally:
            self.busy.discard(property_id)

    # ------------------------------------------------------------------
    # Adding
    # ------------------------------------------------------------------

    def start_add(self) -> bool:
        if not can(self.role, Action.ADD):
            self.notices.warning("You are not authorized to perform this action.")
            return False
        self.add_mode = True
        return True

    def set_add_field(self, name: str, value: str) -> None:
        self.add_draft = self.add_draft.with_field(name, value)

    def cancel_add(self) -> None:
        self.add_mode = False
        self.add_draft = PropertyDraft()

    def save_add(self) -> bool:
        """
        Post the add draft. The draft survives any failure, including a
        duplicate property number, so the user can correct and resubmit.
        """
        if not self.add_mode or self.add_busy:
            return False
        missing = self.add_draft.missing_fields()
        if missing:
            self.notices.warning(f"Please fill in: {', '.join(missing)}")
            return False
        try:
            payload = self.add_draft.to_payload()
        except ValueError as e:
            self.notices.warning(str(e))
            return False

        self.add_busy = True
        try:
            with self.notices.track(ADD_KEY, "Adding property...", "Failed to add property."):
                try:
                    self.client.request("/properties/add", "POST", {"property": payload})
                except ApiError as e:
                    self.notices.error(ADD_KEY, conflict_or(e, "Failed to add property."))
                    self._emit("add_failed", status=e.status)
                    return False
                self.add_draft = PropertyDraft()
                self.add_mode = False
                self._refresh()
                self.notices.success(ADD_KEY, "Property added!")
                self._emit("add_done")
                return True
        finally:
            self.add_busy = False

    # ------------------------------------------------------------------
    # Location
    # ------------------------------------------------------------------

    def update_location(self, property_id: int, location: str) -> bool:
        location = (location or "").strip()
        if not location:
            return False
        if self._idle_row(property_id, Action.CHANGE_LOCATION) is None:
            return False

        key = f"location-{property_id}"
        self.busy.add(property_id)
        try:
            with self.notices.track(key, "Updating location...", "Failed to update location."):
                try:
                    self.client.request(
                        f"/properties/{property_id}/location-detail",
                        "PATCH",
                        {"property": {"location_detail": location}},
                    )
                except ApiError as e:
                    self.notices.error(key, error_text(e, "Failed to update location."))
                    return False
                self._refresh()
                self.notices.success(key, "Location updated!")
                return True
        finally:
            self.busy.discard(property_id)
