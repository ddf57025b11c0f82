import io
import json
from datetime import datetime

import pytest
import requests

from matterdesk.http_client import ApiClient
from matterdesk.token_storage import TokenStorage

BASE_URL = "https://api.matterdesk.test"


def make_response(status_code=200, json_body=None, body=b"", headers=None, url=""):
    """A real ``requests.Response`` backed by an in-memory body."""
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    response.encoding = "utf-8"
    if json_body is not None:
        body = json.dumps(json_body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    response.headers.update(headers or {})
    response.raw = io.BytesIO(body)
    return response


class FakeSession:
    """Stands in for ``requests.Session``; routes are matched on method and path suffix."""

    def __init__(self):
        self.routes = []
        self.calls = []

    def add(self, method, path, status=200, json=None, body=b"", raises=None):
        self.routes.append(
            {"method": method.upper(), "path": path, "status": status, "json": json, "body": body, "raises": raises}
        )

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        for route in reversed(self.routes):
            if route["method"] == method.upper() and url.endswith(route["path"]):
                if route["raises"] is not None:
                    raise route["raises"]
                return make_response(route["status"], route["json"], route["body"], url=url)
        raise AssertionError(f"Unexpected request: {method} {url}")

    @property
    def last_call(self):
        return self.calls[-1]


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def token_storage():
    return TokenStorage()


@pytest.fixture
def client(fake_session, token_storage):
    return ApiClient(base_url=BASE_URL, token_storage=token_storage, timeout=5, session=fake_session)


@pytest.fixture
def today():
    return datetime(2025, 3, 10, 9, 30)
