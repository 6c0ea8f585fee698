"""
inventory_ui/api_client.py
Gateway client for every call the frontend makes to the inventory API.

This module ensures:
1. One place builds URLs from the configured base URL
2. Every non-OK response becomes a single typed error (ApiError)
3. Callers can tell "applied now" (200/201) from "queued for approval" (202)
4. Binary payloads (report export) bypass JSON decoding

There are no retries and no caching layer: each call is a single attempt.
The server session lives in the cookie jar of the requests.Session the client
owns, so the same client must be reused for the lifetime of a browser session.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional, Type, TypeVar, Union

import requests
from pydantic import BaseModel, ValidationError

try:
    from inventory_ui.config import get_api_base_url, IS_DEV, REQUEST_TIMEOUT_SECONDS
except ModuleNotFoundError:
    from config import get_api_base_url, IS_DEV, REQUEST_TIMEOUT_SECONDS


HttpMethod = Literal["GET", "POST", "PATCH", "DELETE"]

__all__ = [
    "ApiClient",
    "ApiError",
    "ApiResponse",
    "Immediate",
    "Queued",
    "AssignOutcome",
    "assign_outcome",
    "error_text",
    "validate_payload",
]

M = TypeVar("M", bound=BaseModel)


class ApiError(Exception):
    """
    Uniform error for failed API calls.

    Attributes:
        message: Server-provided message (None when the server sent none)
        status: HTTP status code, or None when no response was received
        error: Optional machine-readable error tag from the response body
    """

    def __init__(self, message: Optional[str], status: Optional[int] = None, error: Optional[str] = None):
        super().__init__(message or f"API error (status {status})")
        self.message = message
        self.status = status
        self.error = error

    @property
    def is_conflict(self) -> bool:
        return self.status == 409

    @property
    def is_not_found(self) -> bool:
        return self.status == 404

    @property
    def is_unauthorized(self) -> bool:
        return self.status in (401, 403)

    @classmethod
    def from_response(cls, resp: requests.Response) -> "ApiError":
        """Build an ApiError from a non-OK response's `{message, error?}` body."""
        message = None
        error = None
        try:
            body = resp.json()
        except ValueError:
            body = None

        if isinstance(body, dict):
            message = body.get("message") or body.get("error") or body.get("detail")
            error = body.get("error")
            if message is not None and not isinstance(message, str):
                message = str(message)
            if error is not None and not isinstance(error, str):
                error = str(error)

        return cls(message, status=resp.status_code, error=error)


def error_text(err: ApiError, fallback: str) -> str:
    """Server message verbatim when present, otherwise the caller's fallback."""
    return err.message if err.message else fallback


def validate_payload(model: Type[M], raw: Any) -> M:
    """
    Parse one API record, turning a malformed record into an ApiError.

    Raises:
        ApiError: With error="bad_payload" and no status when `raw` does not
            fit `model`
    """
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        if IS_DEV:
            print(f"[API] Unexpected {model.__name__} payload: {e.error_count()} validation error(s)")
        raise ApiError("The server sent data this app could not read.", error="bad_payload") from e


@dataclass(frozen=True)
class ApiResponse:
    """Decoded body plus HTTP status for endpoints that signal outcomes by status."""
    data: Any
    status: int


@dataclass(frozen=True)
class Immediate:
    """Assignment applied right away (HTTP 200/201)."""
    message: Optional[str] = None


@dataclass(frozen=True)
class Queued:
    """Reassignment accepted but waiting for master admin approval (HTTP 202)."""
    message: Optional[str] = None


AssignOutcome = Union[Immediate, Queued]


def assign_outcome(response: ApiResponse) -> AssignOutcome:
    """
    Translate the assign endpoint's status code into a tagged outcome.

    202 means the server queued a reassignment request; nothing about the
    property's holder has changed yet. Every other success status means the
    assignment was applied.
    """
    message = None
    if isinstance(response.data, dict):
        message = response.data.get("message")
    if response.status == 202:
        return Queued(message)
    return Immediate(message)


class ApiClient:
    """
    Thin wrapper over a requests.Session bound to the inventory API base URL.

    Args:
        base_url: API root; defaults to config.get_api_base_url()
        http: Session-like object exposing .request(); a new requests.Session by default
        timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        http: Optional[requests.Session] = None,
        timeout: int = REQUEST_TIMEOUT_SECONDS,
    ):
        self.base_url = (base_url if base_url is not None else get_api_base_url()).rstrip("/")
        self.http = http if http is not None else requests.Session()
        self.timeout = timeout

    def _send(
        self,
        method: HttpMethod,
        path: str,
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        accept: str = "application/json",
    ) -> requests.Response:
        url = f"{self.base_url}{path}"
        headers = {"Accept": accept}
        if body is not None:
            headers["Content-Type"] = "application/json"

        try:
            resp = self.http.request(
                method,
                url,
                json=body,
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            if IS_DEV:
                print(f"[API] Timeout on {method} {path}")
            raise ApiError(f"Request timed out after {self.timeout}s. Please try again.", error="timeout")
        except requests.exceptions.ConnectionError:
            if IS_DEV:
                print(f"[API] Connection error on {method} {path}")
            raise ApiError(f"Cannot connect to the inventory API at {self.base_url}.", error="connection_error")

        if not resp.ok:
            err = ApiError.from_response(resp)
            if IS_DEV:
                print(f"[API] {method} {path} -> {resp.status_code} ({err.error or 'no error tag'})")
            raise err

        if IS_DEV:
            print(f"[API] {method} {path} -> {resp.status_code}")
        return resp

    @staticmethod
    def _decode(resp: requests.Response) -> Any:
        if resp.status_code == 204 or not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError:
            raise ApiError("Unexpected non-JSON response from the inventory API.", status=resp.status_code, error="bad_json")

    def request(
        self,
        path: str,
        method: HttpMethod = "GET",
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Perform a JSON request and return the decoded body.

        Raises:
            ApiError: On any non-OK status or transport failure
        """
        return self._decode(self._send(method, path, body=body, params=params))

    def request_with_status(
        self,
        path: str,
        method: HttpMethod = "GET",
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> ApiResponse:
        """Like request(), but also returns the HTTP status of the successful response."""
        resp = self._send(method, path, body=body, params=params)
        return ApiResponse(data=self._decode(resp), status=resp.status_code)

    def request_binary(
        self,
        path: str,
        method: HttpMethod = "GET",
        params: Optional[Dict[str, Any]] = None,
    ) -> bytes:
        """Fetch a raw downloadable payload (e.g. the PDF report)."""
        resp = self._send(method, path, params=params, accept="application/pdf, application/octet-stream")
        return resp.content

    def close(self) -> None:
        self.http.close()
