"""
inventory_ui/auth.py
Session/identity context for the inventory frontend.

One SessionContext is created per browser session (stored in
st.session_state by app.py) and is the single source of truth for who is
signed in.

Resolution is tri-state:
- "unknown": identity has not been checked yet; views must show a spinner
- "authenticated": the API confirmed the session via GET /auth/me
- "unauthenticated": confirmed absent; protected views go to the login page

The session itself is a server-side cookie held in the ApiClient's
requests.Session cookie jar. No bearer tokens are stored client-side.
"""

from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import ValidationError

try:
    from inventory_ui.api_client import ApiClient, ApiError, error_text
    from inventory_ui.config import IS_DEV
    from inventory_ui.models import Role, User
except ModuleNotFoundError:
    from api_client import ApiClient, ApiError, error_text
    from config import IS_DEV
    from models import Role, User


AuthStatus = Literal["unknown", "authenticated", "unauthenticated"]

AUTH_UNKNOWN: AuthStatus = "unknown"
AUTH_AUTHENTICATED: AuthStatus = "authenticated"
AUTH_UNAUTHENTICATED: AuthStatus = "unauthenticated"

ENTRY_PAGE = "Login"
HOME_PAGE = "Dashboard"

DUPLICATE_EMAIL_MESSAGE = "An account with this email already exists."


def extract_user(body: Any) -> Optional[User]:
    """
    Pull the user out of an auth response.

    The API answers either `{success, data: {user}}` or `{user}`.
    """
    if not isinstance(body, dict):
        return None
    raw = None
    data = body.get("data")
    if isinstance(data, dict):
        raw = data.get("user")
    if raw is None:
        raw = body.get("user")
    if not isinstance(raw, dict):
        return None
    try:
        return User.model_validate(raw)
    except ValidationError:
        if IS_DEV:
            print("[AUTH] Ignoring malformed user payload")
        return None


class SessionContext:
    """
    Who is signed in, with explicit login/logout mutators.

    Args:
        client: Gateway client whose cookie jar carries the server session
    """

    def __init__(self, client: ApiClient):
        self.client = client
        self.status: AuthStatus = AUTH_UNKNOWN
        self.identity: Optional[User] = None
        self.last_error: Optional[str] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_resolving(self) -> bool:
        return self.status == AUTH_UNKNOWN

    @property
    def is_authenticated(self) -> bool:
        return self.status == AUTH_AUTHENTICATED and self.identity is not None

    @property
    def role(self) -> Optional[Role]:
        return self.identity.role if self.identity else None

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self) -> AuthStatus:
        """
        Establish identity from the persisted server session.

        Safe to call on every rerun: once resolved it does nothing.
        """
        if self.status != AUTH_UNKNOWN:
            return self.status

        try:
            body = self.client.request("/auth/me")
        except ApiError as e:
            if not e.is_unauthorized:
                self.last_error = error_text(e, "Could not reach the inventory API.")
            if IS_DEV:
                print(f"[AUTH] Session check failed: status={e.status}")
            self._set_unauthenticated()
            return self.status

        user = extract_user(body)
        if user is None:
            self._set_unauthenticated()
        else:
            self.login(user)
        return self.status

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def login(self, identity: User) -> None:
        self.identity = identity
        self.status = AUTH_AUTHENTICATED
        self.last_error = None
        if IS_DEV:
            print(f"[AUTH] Signed in: user_id={identity.id} role={identity.role.value}")

    def logout(self) -> str:
        """
        Clear identity, then end the server session best-effort.

        Local state is cleared unconditionally, whatever the server answers.

        Returns:
            The page to navigate to (always the entry page)
        """
        self._set_unauthenticated()
        try:
            self.client.request("/auth/sign-out", "POST")
        except ApiError as e:
            if IS_DEV:
                print(f"[AUTH] Server sign-out failed (ignored): status={e.status}")
        self.client.http.cookies.clear()
        return ENTRY_PAGE

    def _set_unauthenticated(self) -> None:
        self.identity = None
        self.status = AUTH_UNAUTHENTICATED

    # ------------------------------------------------------------------
    # Credential flows
    # ------------------------------------------------------------------

    def sign_in(self, email: str, password: str) -> Optional[str]:
        """
        Sign in with credentials.

        Returns:
            None on success, otherwise a user-facing error message
        """
        if not email.strip() or not password:
            return "Please enter your email and password."
        try:
            body = self.client.request("/auth/sign-in", "POST", {"email": email.strip(), "password": password})
        except ApiError as e:
            if e.is_unauthorized:
                return error_text(e, "Invalid email or password.")
            return error_text(e, "Sign in failed. Please try again.")

        user = extract_user(body)
        if user is None:
            return "Sign in response did not include a user."
        self.login(user)
        return None

    def sign_up(self, name: str, email: str, password: str, extra: Optional[Dict[str, Any]] = None) -> Optional[str]:
        """
        Register a new account (self sign-up from the register page).

        Returns:
            None on success, otherwise a user-facing error message
        """
        if not name.strip() or not email.strip() or not password:
            return "Name, email and password are required."
        payload: Dict[str, Any] = {"name": name.strip(), "email": email.strip(), "password": password}
        if extra:
            payload.update(extra)
        try:
            self.client.request("/auth/sign-up", "POST", payload)
        except ApiError as e:
            if e.is_conflict:
                return error_text(e, DUPLICATE_EMAIL_MESSAGE)
            return error_text(e, "Registration failed. Please try again.")
        return None
