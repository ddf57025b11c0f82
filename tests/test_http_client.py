import logging

import pytest
import requests

from conftest import BASE_URL
from matterdesk.exceptions import ApiError, RequestTimeoutError, ServerError, UnauthorizedError
from matterdesk.http_client import ApiClient, merge_url


@pytest.mark.parametrize(
    "url, base, expected",
    [
        ("/api/tasks", "https://api.test/", "https://api.test/api/tasks"),
        ("api/auth/upload-image", "https://api.test", "https://api.test/api/auth/upload-image"),
        ("https://files.test/doc.pdf", "https://api.test", "https://files.test/doc.pdf"),
        ("HTTP://files.test/doc.pdf", "https://api.test", "HTTP://files.test/doc.pdf"),
        ("", "https://api.test", ""),
    ],
)
def test_merge_url(url, base, expected):
    assert merge_url(url, base) == expected


def test_merge_url_falls_back_to_default_base():
    assert merge_url("/api/tasks", "") == "https://taskmanager-on78.onrender.com/api/tasks"


def test_requests_carry_bearer_token(client, fake_session, token_storage):
    token_storage.set_token("secret", remember_me=True)
    fake_session.add("GET", "/api/tasks", json={"tasks": []})

    assert client.get("/api/tasks", params={"status": "Pending"}) == {"tasks": []}

    call = fake_session.last_call
    assert call["url"] == f"{BASE_URL}/api/tasks"
    assert call["params"] == {"status": "Pending"}
    assert call["headers"]["Authorization"] == "Bearer secret"
    assert call["headers"]["Content-Type"] == "application/json"
    assert call["timeout"] == 5


def test_requests_without_token_have_no_authorization(client, fake_session):
    fake_session.add("POST", "/api/auth/login", json={"token": "t"})
    client.post("/api/auth/login", json={"email": "a@b.co"})
    assert "Authorization" not in fake_session.last_call["headers"]
    assert fake_session.last_call["json"] == {"email": "a@b.co"}


def test_multipart_requests_drop_json_content_type(client, fake_session):
    fake_session.add("PUT", "/api/users/profile/photo", json={"profileImageUrl": "x"})
    client.put("/api/users/profile/photo", files={"profileImage": ("a.png", b"img")})
    assert "Content-Type" not in fake_session.last_call["headers"]


def test_empty_body_returns_empty_dict(client, fake_session):
    fake_session.add("DELETE", "/api/tasks/1", status=204)
    assert client.delete("/api/tasks/1") == {}


def test_unauthorized_clears_session(client, fake_session, token_storage):
    token_storage.set_token("expired", remember_me=True)
    fake_session.add("GET", "/api/auth/profile", status=401, json={"message": "Not authorized, token failed"})

    with pytest.raises(UnauthorizedError) as exc_info:
        client.get("/api/auth/profile")

    assert exc_info.value.status_code == 401
    assert exc_info.value.message == "Not authorized, token failed"
    assert token_storage.get_token() is None


def test_unauthorized_login_keeps_session(fake_session, token_storage):
    hook_calls = []
    client = ApiClient(
        base_url=BASE_URL,
        token_storage=token_storage,
        timeout=5,
        session=fake_session,
        on_unauthorized=lambda: hook_calls.append(True),
    )
    fake_session.add("POST", "/api/auth/login", status=401, json={"message": "Invalid email or password"})

    with pytest.raises(UnauthorizedError, match="Invalid email or password"):
        client.post("/api/auth/login", json={})

    assert hook_calls == []


def test_custom_unauthorized_hook(fake_session, token_storage):
    hook_calls = []
    client = ApiClient(BASE_URL, token_storage, 5, fake_session, on_unauthorized=lambda: hook_calls.append(True))
    fake_session.add("GET", "/api/tasks", status=401, json={})

    with pytest.raises(UnauthorizedError):
        client.get("/api/tasks")

    assert hook_calls == [True]


def test_server_error_is_logged(client, fake_session, caplog):
    fake_session.add("GET", "/api/matters", status=503, body=b"upstream down")

    with caplog.at_level(logging.ERROR):
        with pytest.raises(ServerError) as exc_info:
            client.get("/api/matters")

    assert exc_info.value.status_code == 503
    assert "Server error. Please try again later." in caplog.text


def test_client_error_uses_api_message(client, fake_session):
    fake_session.add("POST", "/api/invoices", status=400, json={"message": "Matter is required"})

    with pytest.raises(ApiError) as exc_info:
        client.post("/api/invoices", json={})

    assert str(exc_info.value) == "400: Matter is required"
    assert exc_info.value.payload == {"message": "Matter is required"}


def test_timeout_is_logged_and_raised(client, fake_session, caplog):
    fake_session.add("GET", "/api/tasks", raises=requests.exceptions.ReadTimeout("slow"))

    with caplog.at_level(logging.ERROR):
        with pytest.raises(RequestTimeoutError):
            client.get("/api/tasks")

    assert "Request timeout. Please try again." in caplog.text


def test_connection_errors_propagate(client, fake_session):
    fake_session.add("GET", "/api/tasks", raises=requests.exceptions.ConnectionError("refused"))

    with pytest.raises(requests.exceptions.ConnectionError):
        client.get("/api/tasks")


def test_download_streams_to_file(client, fake_session, tmp_path):
    fake_session.add("GET", "/api/reports/export/tasks", body=b"PK\x03\x04spreadsheet")
    destination = tmp_path / "reports" / "tasks.xlsx"

    result = client.download("/api/reports/export/tasks", destination)

    assert result == destination
    assert destination.read_bytes() == b"PK\x03\x04spreadsheet"
    assert fake_session.last_call["stream"] is True
    assert fake_session.last_call["headers"]["Accept"] == "*/*"


def test_client_reads_settings_when_not_given(monkeypatch, fake_session):
    monkeypatch.setenv("MATTERDESK_API_BASE_URL", "https://configured.test/")
    monkeypatch.setenv("MATTERDESK_API_TIMEOUT", "2500")

    client = ApiClient(session=fake_session)

    assert client.base_url == "https://configured.test"
    assert client.timeout == 2.5


def test_api_error_message_comes_first():
    error = ApiError("Not found", 404, {"message": "Not found"})

    assert (error.message, error.status_code, error.payload) == ("Not found", 404, {"message": "Not found"})
    assert str(error) == "404: Not found"
    assert str(ApiError("Invoice response missing required data")) == "Invoice response missing required data"
