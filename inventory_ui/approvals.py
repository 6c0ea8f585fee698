"""
inventory_ui/approvals.py

Reassignment approvals: the master admin's review queue and the pending count
badge shown in the navigation.
"""

from __future__ import annotations

import time
from typing import Callable, List, Optional

try:
    from inventory_ui.api_client import ApiClient, ApiError, error_text, validate_payload
    from inventory_ui.config import ENABLE_VERBOSE_LOGGING, PENDING_APPROVALS_POLL_SECONDS
    from inventory_ui.models import ReassignmentRequest, User
    from inventory_ui.notices import NoticeBoard
    from inventory_ui.roles import Action, can
except ModuleNotFoundError:
    from api_client import ApiClient, ApiError, error_text, validate_payload
    from config import ENABLE_VERBOSE_LOGGING, PENDING_APPROVALS_POLL_SECONDS
    from models import ReassignmentRequest, User
    from notices import NoticeBoard
    from roles import Action, can


PENDING_PATH = "/properties/reassignments/pending"
REVIEW_PATH = "/properties/reassignments/review"

REVIEW_DECISIONS = ("approved", "denied")


def _pending_payload(body) -> list:
    if isinstance(body, dict) and isinstance(body.get("data"), list):
        return body["data"]
    return []


class ReassignmentQueue:
    """
    Pending reassignment requests for the approvals page.

    A successful review removes exactly the reviewed entry from the local list;
    the rest of the list is not refetched.
    """

    def __init__(self, client: ApiClient, actor: User, notices: Optional[NoticeBoard] = None):
        self.client = client
        self.actor = actor
        self.notices = notices if notices is not None else NoticeBoard()
        self.requests: List[ReassignmentRequest] = []
        self.error: Optional[str] = None
        self.reviewing: Optional[int] = None

    @property
    def authorized(self) -> bool:
        return can(self.actor.role, Action.REVIEW_REASSIGNMENTS)

    def load(self) -> bool:
        if not self.authorized:
            self.error = "You are not authorized to review reassignment requests."
            return False
        try:
            body = self.client.request(PENDING_PATH)
            self.requests = [validate_payload(ReassignmentRequest, raw) for raw in _pending_payload(body)]
        except ApiError as e:
            self.error = "Failed to fetch pending requests. Please try again later."
            if ENABLE_VERBOSE_LOGGING:
                print(f"[APPROVALS] Pending list failed: {type(e).__name__}")
            return False
        self.error = None
        return True

    def review(self, request_id: int, new_status: str) -> bool:
        if new_status not in REVIEW_DECISIONS:
            raise ValueError(f"Unknown review decision: {new_status}")
        if not self.authorized:
            self.notices.warning("You are not authorized to review reassignment requests.")
            return False
        if self.reviewing is not None:
            return False

        key = f"review-{request_id}"
        self.reviewing = request_id
        try:
            with self.notices.track(key, f"Submitting {new_status} decision..."):
                try:
                    self.client.request(REVIEW_PATH, "POST", {"requestId": request_id, "newStatus": new_status})
                except ApiError as e:
                    self.notices.error(key, error_text(e, "An unknown error occurred."))
                    return False
                self.requests = [r for r in self.requests if r.request_id != request_id]
                self.notices.success(key, "Decision submitted successfully!")
                return True
        finally:
            self.reviewing = None


class PendingApprovalsCounter:
    """
    Count of pending reassignment requests for the navigation badge.

    Two triggers feed the same idempotent refresh():
    - tick(): the interval trigger, refreshes once the poll interval elapsed
    - on_focus(): the focus trigger, refreshes immediately

    close() disables both together. Only master admins ever hit the API;
    everyone else always reads 0.
    """

    def __init__(
        self,
        client: ApiClient,
        actor: Optional[User],
        interval: float = PENDING_APPROVALS_POLL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.actor = actor
        self.interval = interval
        self.clock = clock
        self.count = 0
        self.last_refresh: Optional[float] = None
        self.closed = False

    @property
    def enabled(self) -> bool:
        return (
            not self.closed
            and self.actor is not None
            and can(self.actor.role, Action.REVIEW_REASSIGNMENTS)
        )

    def refresh(self) -> int:
        if not self.enabled:
            self.count = 0
            return self.count
        self.last_refresh = self.clock()
        try:
            body = self.client.request(PENDING_PATH)
        except ApiError as e:
            if ENABLE_VERBOSE_LOGGING:
                print(f"[APPROVALS] Failed to fetch pending reassignments count: status={e.status}")
            self.count = 0
            return self.count
        self.count = len(_pending_payload(body))
        return self.count

    def due(self) -> bool:
        if self.last_refresh is None:
            return True
        return self.clock() - self.last_refresh >= self.interval

    def tick(self) -> int:
        if self.enabled and self.due():
            return self.refresh()
        return self.count

    def on_focus(self) -> int:
        if not self.enabled:
            return self.count
        return self.refresh()

    def close(self) -> None:
        self.closed = True
        self.count = 0
