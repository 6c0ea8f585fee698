"""
inventory_ui/store.py

Property collection store: the current page of properties plus the users the
actor may assign them to.

The store never patches its list locally after a mutation. Fields such as
assignedDepartment are derived by the server from the assignment, so every
successful mutation is followed by refresh() and the displayed rows are always
the server's answer.
"""

from __future__ import annotations

from typing import Any, List, Optional

try:
    from inventory_ui.api_client import ApiClient, validate_payload
    from inventory_ui.config import DEFAULT_PAGE_SIZE, ENABLE_VERBOSE_LOGGING
    from inventory_ui.models import PageMeta, Property, Role, User
    from inventory_ui.roles import assignable_role, is_privileged
except ModuleNotFoundError:
    from api_client import ApiClient, validate_payload
    from config import DEFAULT_PAGE_SIZE, ENABLE_VERBOSE_LOGGING
    from models import PageMeta, Property, Role, User
    from roles import assignable_role, is_privileged


ASSIGNABLE_USERS_PATHS = {
    Role.STAFF: "/users/staff",
    Role.PROPERTY_CUSTODIAN: "/users?roles=property_custodian",
}


def _data_list(body: Any, key: str = "data") -> List[Any]:
    if isinstance(body, dict):
        items = body.get(key)
        if isinstance(items, list):
            return items
    return []


class PropertyStore:
    """
    Holds the properties and assignable users for one actor.

    Args:
        client: Gateway client
        actor: The signed-in user; the role picks the query
        page_size: Rows per page for privileged listings
    """

    def __init__(self, client: ApiClient, actor: User, page_size: int = DEFAULT_PAGE_SIZE):
        self.client = client
        self.actor = actor
        self.page = 1
        self.page_size = page_size
        self.items: List[Property] = []
        self.users: List[User] = []
        self.meta = PageMeta(page=1, pageSize=page_size, pageCount=1, totalCount=0)
        self.loaded = False
        self.closed = False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def fetch(self, page: Optional[int] = None, page_size: Optional[int] = None) -> List[Property]:
        """
        Load one page of properties (and the assignable users) for the actor.

        Raises:
            ApiError: If the listing request fails or a row is malformed; current
                items are kept
        """
        if page is not None:
            self.page = max(1, page)
        if page_size is not None:
            self.page_size = page_size

        if is_privileged(self.actor.role):
            items, meta = self._fetch_collection()
            users = self._fetch_assignable_users()
        else:
            items, meta = self._fetch_own()
            users = []

        if self.closed:
            # Late answer for a store nobody is showing anymore
            return self.items

        self.items = items
        self.meta = meta
        self.users = users
        self.loaded = True
        if ENABLE_VERBOSE_LOGGING:
            print(f"[STORE] Loaded {len(items)} properties (page {meta.page}/{meta.page_count}) and {len(users)} users")
        return self.items

    def refresh(self) -> List[Property]:
        """Re-issue the last query."""
        return self.fetch()

    def _fetch_collection(self):
        body = self.client.request("/properties", params={"page": self.page, "pageSize": self.page_size})
        items = [validate_payload(Property, raw) for raw in _data_list(body)]
        raw_meta = body.get("meta") if isinstance(body, dict) else None
        if isinstance(raw_meta, dict):
            meta = validate_payload(PageMeta, raw_meta)
        else:
            meta = PageMeta(page=self.page, pageSize=self.page_size, pageCount=1, totalCount=len(items))
        return items, meta

    def _fetch_own(self):
        body = self.client.request(f"/properties/staff/{self.actor.id}")
        items = [validate_payload(Property, raw) for raw in _data_list(body)]
        meta = PageMeta(page=1, pageSize=len(items), pageCount=1, totalCount=len(items))
        return items, meta

    def _fetch_assignable_users(self) -> List[User]:
        target = assignable_role(self.actor.role)
        if target is None:
            return []
        body = self.client.request(ASSIGNABLE_USERS_PATHS[target])
        # older API versions answer {users: [...]}
        raw_users = _data_list(body) or _data_list(body, "users")
        return [validate_payload(User, raw) for raw in raw_users]

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get(self, property_id: int) -> Optional[Property]:
        for prop in self.items:
            if prop.id == property_id:
                return prop
        return None

    def user(self, user_id: Optional[int]) -> Optional[User]:
        if user_id is None:
            return None
        for u in self.users:
            if u.id == user_id:
                return u
        return None

    def holder_of(self, prop: Property) -> Optional[User]:
        """Current holder as a User, matched by display name."""
        if not prop.assigned_to:
            return None
        for u in self.users:
            if u.name == prop.assigned_to:
                return u
        return None

    @property
    def locations(self) -> List[str]:
        """Distinct location details in use, for the location picker."""
        return sorted({p.location_detail.strip() for p in self.items if p.location_detail and p.location_detail.strip()})

    def close(self) -> None:
        self.closed = True
