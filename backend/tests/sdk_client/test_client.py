import json

import pytest
import requests

from codeplay_sdk.client import AUTH_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_KEY, ApiError, Client
from codeplay_sdk.storage import LocalStorage
from ._helpers import FakeSession, make_response

AUTH_PAYLOAD = {
    "accessToken": "access-1",
    "refreshToken": "refresh-1",
    "user": {"id": "u1", "email": "a@example.com"},
}


def _client(*responses):
    session = FakeSession(*responses)
    return Client("http://api.test/api/", storage=LocalStorage(path=None), session=session), session


def test_from_env_reads_api_url(monkeypatch):
    monkeypatch.setenv("VITE_API_URL", "https://play.example.com/api")
    assert Client.from_env().base_url == "https://play.example.com/api"

    monkeypatch.delenv("VITE_API_URL")
    assert Client.from_env().base_url == "http://localhost:5001/api"


def test_login_stores_credentials_and_sends_bearer():
    client, session = _client(make_response(200, AUTH_PAYLOAD), make_response(200, {"data": [], "pagination": {}}))

    client.login("a@example.com", "password1")
    assert client.token == "access-1"
    assert client.refresh_token == "refresh-1"
    assert client.user == AUTH_PAYLOAD["user"]

    client.list_projects(search="demo")
    call = session.calls[-1]
    assert call["url"] == "http://api.test/api/projects"
    assert call["headers"]["Authorization"] == "Bearer access-1"
    assert call["params"] == {"page": 1, "limit": 10, "search": "demo"}


def test_unauthorized_response_clears_session_but_keeps_refresh_token():
    client, _ = _client(
        make_response(200, AUTH_PAYLOAD),
        make_response(401, {"detail": "Invalid or expired token"}),
    )
    client.login("a@example.com", "password1")

    with pytest.raises(ApiError) as exc_info:
        client.verify()

    assert exc_info.value.status_code == 401
    assert exc_info.value.message == "Invalid or expired token"
    assert client.storage.get_item(AUTH_TOKEN_KEY) is None
    assert client.storage.get_item(USER_KEY) is None
    assert client.storage.get_item(REFRESH_TOKEN_KEY) == "refresh-1"


def test_refresh_after_expired_access_token_restores_session():
    refreshed = {"accessToken": "access-2", "refreshToken": "refresh-2"}
    client, session = _client(
        make_response(200, AUTH_PAYLOAD),
        make_response(401, {"detail": "Invalid or expired token"}),
        make_response(200, refreshed),
    )
    client.login("a@example.com", "password1")

    with pytest.raises(ApiError):
        client.list_projects()
    assert client.is_authenticated is False

    client.refresh()

    call = session.calls[-1]
    assert call["url"] == "http://api.test/api/auth/refresh"
    assert call["json"] == {"refreshToken": "refresh-1"}
    assert client.token == "access-2"
    assert client.refresh_token == "refresh-2"


def test_logout_clears_all_credentials():
    client, _ = _client(make_response(200, AUTH_PAYLOAD))
    client.login("a@example.com", "password1")

    client.logout()

    for key in (AUTH_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_KEY):
        assert client.storage.get_item(key) is None


def test_error_detail_and_transport_failures_raise_api_error():
    client, _ = _client(
        make_response(409, {"detail": "User with this email already exists"}),
        requests.ConnectionError("refused"),
    )

    with pytest.raises(ApiError) as conflict:
        client.register("a@example.com", "password1")
    assert conflict.value.status_code == 409
    assert client.token is None

    with pytest.raises(ApiError) as offline:
        client.list_templates()
    assert offline.value.status_code is None


def test_project_calls_map_to_routes():
    client, session = _client(
        make_response(200, {"id": "p1"}),
        make_response(201, {"id": "p2"}),
        make_response(200, {"isStarred": True}),
        make_response(200, {"message": "Project deleted successfully"}),
    )

    client.save_project_files("p1", {"a.js": {"name": "a.js", "type": "file", "content": ""}})
    client.clone_project("p1", title="Copy")
    client.toggle_star("p1")
    client.delete_project("p1")

    routes = [(call["method"], call["url"].replace("http://api.test/api", "")) for call in session.calls]
    assert routes == [
        ("PUT", "/projects/p1/files"),
        ("POST", "/projects/p1/clone"),
        ("POST", "/projects/p1/star"),
        ("DELETE", "/projects/p1"),
    ]
    assert session.calls[0]["json"] == {"content": {"a.js": {"name": "a.js", "type": "file", "content": ""}}}
    assert session.calls[1]["json"] == {"title": "Copy"}


def test_refresh_uses_stored_refresh_token():
    rotated = {"accessToken": "access-2", "refreshToken": "refresh-2"}
    client, session = _client(make_response(200, AUTH_PAYLOAD), make_response(200, rotated))
    client.login("a@example.com", "password1")

    client.refresh()

    assert session.calls[-1]["json"] == {"refreshToken": "refresh-1"}
    assert client.token == "access-2"
    assert json.loads(client.storage.get_item(USER_KEY))["id"] == "u1"
