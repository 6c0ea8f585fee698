# inventory_ui/conftest.py
# Shared fixtures: a scripted HTTP session standing in for requests.Session

import json as jsonlib
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
from requests.cookies import RequestsCookieJar

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from inventory_ui.api_client import ApiClient
from inventory_ui.models import Role, User

BASE_URL = "http://api.test"


class FakeResponse:
    """Just enough of requests.Response for ApiClient."""

    def __init__(self, status_code: int = 200, body: Any = None, content: Optional[bytes] = None):
        self.status_code = status_code
        if content is None:
            content = b"" if body is None else jsonlib.dumps(body).encode()
        self.content = content

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        if not self.content:
            raise ValueError("No JSON body")
        return jsonlib.loads(self.content)


@dataclass
class Call:
    method: str
    path: str
    json: Any
    params: Optional[Dict[str, Any]]


class FakeHttp:
    """
    Routes (method, path) to scripted responses.

    Responses queued for a route are consumed in order; the last one repeats.
    An Exception instance in the queue is raised instead of returned.
    """

    def __init__(self, base_url: str = BASE_URL):
        self.base_url = base_url
        self.routes: Dict[tuple, List[Any]] = {}
        self.calls: List[Call] = []
        self.cookies = RequestsCookieJar()
        self.closed = False

    def on(self, method: str, path: str, *responses: Any) -> "FakeHttp":
        self.routes.setdefault((method, path), []).extend(responses)
        return self

    def request(self, method, url, json=None, params=None, headers=None, timeout=None):
        path = url[len(self.base_url):]
        self.calls.append(Call(method, path, json, params))
        queue = self.routes.get((method, path))
        if not queue:
            raise AssertionError(f"Unexpected request: {method} {path}")
        resp = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(resp, Exception):
            raise resp
        return resp

    def calls_to(self, method: str, path: str) -> List[Call]:
        return [c for c in self.calls if c.method == method and c.path == path]

    def close(self) -> None:
        self.closed = True


def ok(body: Any = None, status: int = 200) -> FakeResponse:
    return FakeResponse(status, body if body is not None else {})


def fail(status: int, message: Optional[str] = None, error: Optional[str] = None) -> FakeResponse:
    body: Dict[str, Any] = {}
    if message is not None:
        body["message"] = message
    if error is not None:
        body["error"] = error
    return FakeResponse(status, body)


def user_json(user_id: int, name: str, role: Role, department: Optional[str] = "IT") -> Dict[str, Any]:
    return {
        "id": user_id,
        "name": name,
        "email": f"{name.lower().replace(' ', '.')}@example.com",
        "role": role.value,
        "department": department,
    }


def property_json(property_id: int, **overrides: Any) -> Dict[str, Any]:
    raw = {
        "id": property_id,
        "propertyNo": f"PN-{property_id:03d}",
        "description": f"Item {property_id}",
        "quantity": 1,
        "value": 1500.0,
        "serialNo": f"SN-{property_id}",
        "category": "Annex A",
        "assignedTo": None,
        "assignedDepartment": None,
        "location_detail": None,
        "reassignmentStatus": None,
    }
    raw.update(overrides)
    return raw


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def client(http):
    return ApiClient(base_url=BASE_URL, http=http)


@pytest.fixture
def staff():
    return User.model_validate(user_json(1, "Sam Staff", Role.STAFF))


@pytest.fixture
def other_staff():
    return User.model_validate(user_json(2, "Olive Staff", Role.STAFF))


@pytest.fixture
def custodian():
    return User.model_validate(user_json(10, "Cora Custodian", Role.PROPERTY_CUSTODIAN))


@pytest.fixture
def other_custodian():
    return User.model_validate(user_json(11, "Carl Custodian", Role.PROPERTY_CUSTODIAN, department="HR"))


@pytest.fixture
def admin():
    return User.model_validate(user_json(20, "Ada Admin", Role.ADMIN, department="PSMO"))


@pytest.fixture
def master_admin():
    return User.model_validate(user_json(30, "Max Master", Role.MASTER_ADMIN, department="PSMO"))


@pytest.fixture
def developer():
    return User.model_validate(user_json(40, "Dev Eloper", Role.DEVELOPER, department=None))
