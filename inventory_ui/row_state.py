# inventory_ui/row_state.py
# Per-row interaction states for the property table

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Union

try:
    from inventory_ui.models import PropertyDraft
except ModuleNotFoundError:
    from models import PropertyDraft


@dataclass(frozen=True)
class Viewing:
    """Read-only row."""


@dataclass(frozen=True)
class Editing:
    draft: PropertyDraft


@dataclass(frozen=True)
class Assigning:
    selection: Optional[int] = None


@dataclass(frozen=True)
class ReassignProposal:
    property_id: int
    new_user_id: int


@dataclass(frozen=True)
class ConfirmingReassign:
    """Reassign dialog open; nothing is sent until the user confirms."""
    proposal: ReassignProposal


@dataclass(frozen=True)
class ConfirmingDelete:
    """
    Delete dialog open.

    server_prompted is set when the API asked for confirmation again; the
    dialog stays open for a confirmed resubmission.
    """
    assigned: bool
    server_prompted: bool = False


RowState = Union[Viewing, Editing, Assigning, ConfirmingReassign, ConfirmingDelete]

VIEWING = Viewing()


class RowStates:
    """Mapping of property id to its row state; missing ids are Viewing."""

    def __init__(self) -> None:
        self._states: Dict[int, RowState] = {}

    def get(self, property_id: int) -> RowState:
        return self._states.get(property_id, VIEWING)

    def set(self, property_id: int, state: RowState) -> None:
        if isinstance(state, Viewing):
            self._states.pop(property_id, None)
        else:
            self._states[property_id] = state

    def reset(self, property_id: int) -> None:
        self._states.pop(property_id, None)

    def is_viewing(self, property_id: int) -> bool:
        return property_id not in self._states

    def prune(self, live_ids) -> None:
        """Drop states for rows that are no longer listed."""
        live = set(live_ids)
        for pid in [pid for pid in self._states if pid not in live]:
            del self._states[pid]

    def active(self) -> Dict[int, RowState]:
        return dict(self._states)
