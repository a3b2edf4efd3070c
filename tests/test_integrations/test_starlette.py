"""
Tests for the Starlette integration.

Tests cover:
- Accept header negotiation
- HTTP method -> action resolution
- Guarded endpoints end to end through TestClient
"""

from __future__ import annotations

from typing import Any

import pytest
from starlette.applications import Starlette
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from sentinel import DENIED_MESSAGE, AccessControl, Response, Sentinel, UserContext
from sentinel.contrib.starlette import (
    AccessControlledEndpoint,
    negotiate_format,
    to_starlette_response,
)

USERS = {
    "1": {"id": "1", "name": "Alice"},
    "2": {"id": "2", "name": "Bob"},
}


class UserSentinel(Sentinel):
    user: Any = None

    def can_index(self) -> bool:
        return self.current_user is not None

    def can_read(self) -> bool:
        if self.user is None or self.current_user is None:
            return False
        return self.user["id"] == self.current_user.user_id or self.current_user.has_role("admin")


class HeaderAuthController(AccessControlledEndpoint):
    """Reads the current user from request headers."""

    @property
    def current_user(self) -> UserContext | None:
        user_id = self.request.headers.get("x-user-id")
        if user_id is None:
            return None
        roles = self.request.headers.get("x-user-roles", "").split(",")
        return UserContext(user_id=user_id, roles=[r for r in roles if r])


class UsersController(HeaderAuthController):
    access_control = (
        AccessControl.builder()
        .controls_access_with(
            lambda c: UserSentinel(current_user=c.current_user, user=getattr(c, "user", None))
        )
        .grants_access_to("index", only="index")
        .grants_access_to("read", only="show")
        .build()
    )

    async def load(self, request):
        if "id" in request.path_params:
            self.user = USERS.get(request.path_params["id"])

    async def get(self, request):
        if "id" in request.path_params:
            return JSONResponse(self.user)
        return PlainTextResponse("user list")


class ReportsController(HeaderAuthController):
    action_map = {"POST": "export"}
    access_control = (
        AccessControl.builder()
        .controls_access_with(lambda c: UserSentinel(current_user=c.current_user))
        .grants_access_to("index", only="export")
        .build()
    )

    async def post(self, request):
        return PlainTextResponse("exported")


class ItemSentinel(Sentinel):
    item: Any = None

    def can_create(self) -> bool:
        return self.current_user is not None and self.item is not None


class ItemsController(HeaderAuthController):
    access_control = (
        AccessControl.builder()
        .controls_access_with(
            lambda c: ItemSentinel(current_user=c.current_user, item=getattr(c, "item", None))
        )
        .grants_access_to("create", only="create")
        .build()
    )

    async def load(self, request):
        if request.method == "POST":
            self.item = await request.json()

    async def post(self, request):
        payload = await request.json()
        return JSONResponse({"loaded": self.item, "received": payload})


@pytest.fixture
def client() -> TestClient:
    app = Starlette(routes=[
        Route("/users", UsersController),
        Route("/users/{id}", UsersController),
        Route("/reports", ReportsController),
        Route("/items", ItemsController),
    ])
    return TestClient(app)


class TestNegotiateFormat:
    """Tests for Accept header negotiation."""

    @pytest.mark.parametrize(
        "accept,expected",
        [
            (None, "html"),
            ("", "html"),
            ("*/*", "html"),
            ("text/html,application/xhtml+xml", "html"),
            ("application/json", "json"),
            ("application/json, text/html;q=0.9", "json"),
            ("text/csv", "csv"),
            ("application/octet-stream", "any"),
            ("application/octet-stream, */*;q=0.1", "html"),
            ("text/html;q=0.1, application/json", "json"),
            ("text/csv;q=0.5, application/xml;q=0.8", "xml"),
            ("application/json;q=0, text/csv", "csv"),
            ("application/json;Q=0.000", "any"),
            ("text/csv;q=0.7, application/json;q=0.7", "csv"),
        ],
    )
    def test_negotiate_format(self, accept, expected):
        assert negotiate_format(accept) == expected


class TestToStarletteResponse:
    """Tests for response conversion."""

    def test_text_response(self):
        response = to_starlette_response(Response.text("nope", status=401))

        assert response.status_code == 401
        assert response.body == b"nope"
        assert response.headers["content-type"].startswith("text/html")

    def test_head_response(self):
        response = to_starlette_response(Response.head(401))

        assert response.status_code == 401
        assert response.body == b""
        assert "content-type" not in response.headers

    def test_headers_are_copied(self):
        response = to_starlette_response(Response(status=302, headers={"location": "/login"}))
        assert response.headers["location"] == "/login"


class TestGuardedEndpoint:
    """End-to-end tests through TestClient."""

    def test_index_granted(self, client: TestClient):
        response = client.get("/users", headers={"x-user-id": "1"})

        assert response.status_code == 200
        assert response.text == "user list"

    def test_index_denied_html(self, client: TestClient):
        response = client.get("/users", headers={"accept": "text/html"})

        assert response.status_code == 401
        assert response.text == DENIED_MESSAGE
        assert response.headers["content-type"].startswith("text/html")

    def test_index_denied_json_is_empty(self, client: TestClient):
        response = client.get("/users", headers={"accept": "application/json"})

        assert response.status_code == 401
        assert response.content == b""

    def test_show_own_record(self, client: TestClient):
        response = client.get("/users/1", headers={"x-user-id": "1"})

        assert response.status_code == 200
        assert response.json() == {"id": "1", "name": "Alice"}

    def test_show_other_record_denied(self, client: TestClient):
        response = client.get("/users/2", headers={"x-user-id": "1"})
        assert response.status_code == 401

    def test_show_other_record_as_admin(self, client: TestClient):
        response = client.get(
            "/users/2", headers={"x-user-id": "1", "x-user-roles": "admin"}
        )
        assert response.status_code == 200

    def test_unguarded_method_falls_through(self, client: TestClient):
        response = client.delete("/users/1", headers={"x-user-id": "1"})
        assert response.status_code == 405

    def test_action_map(self, client: TestClient):
        assert client.post("/reports").status_code == 401
        response = client.post("/reports", headers={"x-user-id": "1"})
        assert response.status_code == 200
        assert response.text == "exported"

    def test_current_user_defaults_to_scope_user(self):
        endpoint = AccessControlledEndpoint(
            {"type": "http", "user": "someone"}, receive=None, send=None
        )
        assert endpoint.current_user == "someone"

    def test_body_read_in_load_is_readable_in_handler(self, client: TestClient):
        response = client.post("/items", json={"a": 1}, headers={"x-user-id": "1"})

        assert response.status_code == 200
        assert response.json() == {"loaded": {"a": 1}, "received": {"a": 1}}

    def test_body_loaded_subject_reaches_sentinel(self, client: TestClient):
        response = client.post(
            "/items",
            content=b"null",
            headers={"x-user-id": "1", "content-type": "application/json"},
        )
        assert response.status_code == 401

    def test_head_falls_back_to_get(self, client: TestClient):
        response = client.head("/users", headers={"x-user-id": "1"})
        assert response.status_code == 200
