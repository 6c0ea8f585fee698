# inventory_ui/notices.py
# User-visible notifications keyed by a stable id

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, List, Literal, Optional

NoticeKind = Literal["loading", "success", "warning", "error", "info"]

GENERIC_ERROR = "Something went wrong. Please try again."


@dataclass
class Notice:
    key: str
    kind: NoticeKind
    message: str


class NoticeBoard:
    """
    Collects notices produced while handling one interaction.

    A loading notice is created under a key and later replaced by a success or
    error notice under the same key, so a UI shows one indicator per action.
    The Streamlit layer drains the board after each action and renders the
    resolved notices as toasts.
    """

    def __init__(self) -> None:
        self._notices: Dict[str, Notice] = {}
        self._counter = 0

    def _next_key(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}-{self._counter}"

    def loading(self, key: str, message: str) -> None:
        self._notices[key] = Notice(key, "loading", message)

    def success(self, key: str, message: str) -> None:
        self._notices[key] = Notice(key, "success", message)

    def error(self, key: str, message: str) -> None:
        self._notices[key] = Notice(key, "error", message)

    def warning(self, message: str, key: Optional[str] = None) -> None:
        key = key or self._next_key("warning")
        self._notices[key] = Notice(key, "warning", message)

    def info(self, message: str, key: Optional[str] = None) -> None:
        key = key or self._next_key("info")
        self._notices[key] = Notice(key, "info", message)

    def get(self, key: str) -> Optional[Notice]:
        return self._notices.get(key)

    def pending(self) -> List[Notice]:
        return [n for n in self._notices.values() if n.kind == "loading"]

    def all(self) -> List[Notice]:
        return list(self._notices.values())

    def drain(self) -> List[Notice]:
        """Return and forget every notice collected so far."""
        notices = list(self._notices.values())
        self._notices.clear()
        return notices

    @contextmanager
    def track(self, key: str, message: str, fallback_error: str = GENERIC_ERROR) -> Iterator["NoticeBoard"]:
        """
        Show a loading notice for the duration of the block.

        If the block finishes without resolving the key (success or error), the
        indicator is resolved to an error so it can never stay pending.
        """
        self.loading(key, message)
        try:
            yield self
        finally:
            current = self._notices.get(key)
            if current is not None and current.kind == "loading":
                self.error(key, fallback_error)
