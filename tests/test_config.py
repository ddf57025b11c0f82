from pathlib import Path

import pytest

from matterdesk.config import (
    derive_local_base_url,
    get_settings,
    is_local_host,
    normalize_base_url,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "MATTERDESK_API_BASE_URL",
        "MATTERDESK_APP_HOST",
        "MATTERDESK_APP_SCHEME",
        "MATTERDESK_BACKEND_PORT",
        "MATTERDESK_API_TIMEOUT",
        "MATTERDESK_TOKEN_FILE",
    ):
        monkeypatch.delenv(name, raising=False)


def test_normalize_base_url():
    assert normalize_base_url(" https://api.test/// ") == "https://api.test"
    assert normalize_base_url("") == ""
    assert normalize_base_url(None) == ""


@pytest.mark.parametrize(
    "host, expected",
    [("localhost", True), ("127.0.0.1", True), ("0.0.0.0", True), ("office.local", True), ("example.com", False), (None, False)],
)
def test_is_local_host(host, expected):
    assert is_local_host(host) is expected


def test_derive_local_base_url():
    assert derive_local_base_url("localhost:5173") == "http://localhost:5000"
    assert derive_local_base_url("https://office.local:3000", backend_port="8080") == "https://office.local:8080"
    assert derive_local_base_url("127.0.0.1", backend_port="-1") == "http://127.0.0.1:5000"
    assert derive_local_base_url("app.example.com") == ""
    assert derive_local_base_url("") == ""


def test_base_url_prefers_explicit_setting(monkeypatch):
    monkeypatch.setenv("MATTERDESK_API_BASE_URL", "https://explicit.test/")
    monkeypatch.setenv("MATTERDESK_APP_HOST", "localhost")
    assert get_settings().base_url == "https://explicit.test"


def test_base_url_derived_from_local_host(monkeypatch):
    monkeypatch.setenv("MATTERDESK_APP_HOST", "localhost")
    monkeypatch.setenv("MATTERDESK_BACKEND_PORT", "8000")
    assert get_settings().base_url == "http://localhost:8000"


def test_base_url_defaults_to_hosted_api():
    assert get_settings().base_url == "https://taskmanager-on78.onrender.com"


@pytest.mark.parametrize("raw, seconds", [("30000", 30.0), ("0", 60.0), ("soon", 60.0)])
def test_timeout_seconds(monkeypatch, raw, seconds):
    monkeypatch.setenv("MATTERDESK_API_TIMEOUT", raw)
    assert get_settings().timeout_seconds == seconds


def test_token_file_expands_home(monkeypatch):
    monkeypatch.setenv("MATTERDESK_TOKEN_FILE", "~/custom/tokens.json")
    assert get_settings().token_file == Path.home() / "custom" / "tokens.json"
