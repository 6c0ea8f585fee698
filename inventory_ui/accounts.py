"""
inventory_ui/accounts.py

Account management pages: list accounts of a role, create accounts, load and
update a single account. Which roles an actor may manage comes from
roles.manageable_roles().
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

try:
    from inventory_ui.api_client import ApiClient, ApiError, error_text, validate_payload
    from inventory_ui.auth import DUPLICATE_EMAIL_MESSAGE
    from inventory_ui.models import Role, User
    from inventory_ui.notices import NoticeBoard
    from inventory_ui.roles import manageable_roles
except ModuleNotFoundError:
    from api_client import ApiClient, ApiError, error_text, validate_payload
    from auth import DUPLICATE_EMAIL_MESSAGE
    from models import Role, User
    from notices import NoticeBoard
    from roles import manageable_roles


LIST_PATHS = {
    Role.STAFF: "/users/staff",
    Role.ADMIN: "/users/admin",
    Role.PROPERTY_CUSTODIAN: "/users?roles=property_custodian",
}

# Admin accounts always belong to the property supply office
DEFAULT_ADMIN_DEPARTMENT = "PSMO"


class AccountNotFound(Exception):
    pass


class AccountManager:
    def __init__(self, client: ApiClient, actor: User, notices: Optional[NoticeBoard] = None):
        self.client = client
        self.actor = actor
        self.notices = notices if notices is not None else NoticeBoard()

    def may_manage(self, role: Role) -> bool:
        return role in manageable_roles(self.actor.role)

    def list_accounts(self, role: Role) -> List[User]:
        """
        Raises:
            PermissionError: If the actor may not manage `role` accounts
            ApiError: If the request fails
        """
        if not self.may_manage(role):
            raise PermissionError(f"Not authorized to list {role.value} accounts")
        body = self.client.request(LIST_PATHS[role])
        raw = body.get("data") if isinstance(body, dict) else None
        if not isinstance(raw, list):
            raw = body.get("users", []) if isinstance(body, dict) else []
        return [validate_payload(User, u) for u in raw]

    def create_account(
        self,
        role: Role,
        name: str,
        email: str,
        password: str,
        department: Optional[str] = None,
    ) -> bool:
        if not self.may_manage(role):
            self.notices.warning("You are not authorized to create this kind of account.")
            return False
        if not name.strip() or not email.strip() or not password:
            self.notices.warning("Name, email and password are required.")
            return False

        payload: Dict[str, Any] = {"name": name.strip(), "email": email.strip(), "password": password}
        if role != Role.STAFF:
            payload["role"] = role.value
        if role == Role.ADMIN:
            payload["department"] = department or DEFAULT_ADMIN_DEPARTMENT
        elif department:
            payload["department"] = department

        key = f"create-{role.value}"
        with self.notices.track(key, "Creating account...", "Account creation failed."):
            try:
                self.client.request("/auth/sign-up", "POST", payload)
            except ApiError as e:
                if e.is_conflict:
                    self.notices.error(key, error_text(e, DUPLICATE_EMAIL_MESSAGE))
                else:
                    self.notices.error(key, error_text(e, "Account creation failed."))
                return False
            self.notices.success(key, "Account creation successful!")
            return True

    def get_account(self, user_id: int) -> User:
        """
        Raises:
            AccountNotFound: If the API returns no such user
            ApiError: On other request failures
        """
        try:
            body = self.client.request(f"/users/{user_id}")
        except ApiError as e:
            if e.is_not_found:
                raise AccountNotFound(f"User {user_id} not found")
            raise
        raw = body.get("data") if isinstance(body, dict) else None
        # the API wraps the single user in a list
        if isinstance(raw, list):
            raw = raw[0] if raw else None
        if not isinstance(raw, dict):
            raise AccountNotFound(f"User {user_id} not found")
        return validate_payload(User, raw)

    def update_account(
        self,
        user_id: int,
        name: str,
        email: str,
        role: Role,
        department: Optional[str],
        new_password: str = "",
    ) -> bool:
        update: Dict[str, Any] = {
            "name": name.strip(),
            "email": email.strip(),
            "role": role.value,
            "department": department,
        }
        # Only send a password when a new one was typed
        if new_password.strip():
            update["password"] = new_password

        key = f"update-user-{user_id}"
        with self.notices.track(key, "Updating account...", "Failed to update account."):
            try:
                self.client.request(f"/users/{user_id}", "PATCH", update)
            except ApiError as e:
                if e.is_conflict:
                    self.notices.error(key, error_text(e, DUPLICATE_EMAIL_MESSAGE))
                else:
                    self.notices.error(key, error_text(e, "Failed to update account."))
                return False
            self.notices.success(key, "Account updated successfully!")
            return True
