import logging
import re
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

import requests

from matterdesk.api_paths import API_PATHS, BASE_URL
from matterdesk.config import get_settings, normalize_base_url
from matterdesk.exceptions import (
    ApiError,
    RequestTimeoutError,
    ServerError,
    UnauthorizedError,
)
from matterdesk.token_storage import TokenStorage

logger = logging.getLogger(__name__)

ABSOLUTE_URL_REGEX = re.compile(r"^https?://", re.IGNORECASE)

# Requests whose 401 means "wrong credentials" rather than "session expired".
AUTH_REQUEST_PATHS = (API_PATHS.AUTH.LOGIN,)

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


def merge_url(url: Optional[str], base_url: Optional[str] = None) -> Optional[str]:
    """Join a relative API path onto the base URL; absolute URLs pass through."""
    if not url:
        return url

    if ABSOLUTE_URL_REGEX.match(url):
        return url

    sanitized_base = normalize_base_url(base_url or BASE_URL)
    sanitized_path = url[1:] if url.startswith("/") else url
    return f"{sanitized_base}/{sanitized_path}"


def extract_error_message(response: requests.Response, default: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict):
        message = body.get("message") or body.get("detail")
        if isinstance(message, str) and message.strip():
            return message
    return default


class ApiClient:
    """
    Thin wrapper around ``requests.Session`` for the MatterDesk REST API.

    Every request carries the stored bearer token, relative paths are resolved
    against the configured base URL and failures surface as ``ApiError``
    subclasses.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token_storage: Optional[TokenStorage] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
        on_unauthorized: Optional[Callable[[], None]] = None,
    ):
        if base_url is None or timeout is None:
            settings = get_settings()
            base_url = base_url if base_url is not None else settings.base_url
            timeout = timeout if timeout is not None else settings.timeout_seconds

        self.base_url = normalize_base_url(base_url) or normalize_base_url(BASE_URL)
        self.timeout = timeout
        self.token_storage = token_storage or TokenStorage()
        self.session = session or requests.Session()
        self.on_unauthorized = on_unauthorized or self._clear_session

    def _clear_session(self):
        logger.warning("Session is no longer valid; stored credentials cleared. Please log in again.")
        self.token_storage.clear_token()

    def _build_headers(self, extra: Optional[Dict[str, str]], multipart: bool) -> Dict[str, str]:
        headers = dict(DEFAULT_HEADERS)
        if multipart:
            # requests writes the multipart boundary itself
            headers.pop("Content-Type")
        access_token = self.token_storage.get_token()
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        if extra:
            headers.update(extra)
        return headers

    def _is_auth_request(self, url: str) -> bool:
        return any(url.endswith(path) for path in AUTH_REQUEST_PATHS)

    def _raise_for_response(self, response: requests.Response, url: str):
        status_code = response.status_code

        if status_code == 401:
            message = extract_error_message(response, "Not authorized")
            if not self._is_auth_request(url):
                self.on_unauthorized()
            raise UnauthorizedError(message, status_code, _safe_json(response))

        if status_code >= 500:
            logger.error("Server error. Please try again later.")
            message = extract_error_message(response, "Server error. Please try again later.")
            raise ServerError(message, status_code, _safe_json(response))

        message = extract_error_message(response, f"Request failed with status {status_code}")
        raise ApiError(message, status_code, _safe_json(response))

    def request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        data: Any = None,
        files: Any = None,
        headers: Optional[Dict[str, str]] = None,
        stream: bool = False,
    ) -> requests.Response:
        full_url = merge_url(url, self.base_url)
        request_headers = self._build_headers(headers, multipart=files is not None)

        logger.debug(f"{method.upper()} {full_url}")
        try:
            response = self.session.request(
                method.upper(),
                full_url,
                params=params,
                json=json,
                data=data,
                files=files,
                headers=request_headers,
                timeout=self.timeout,
                stream=stream,
            )
        except requests.exceptions.Timeout as e:
            logger.error("Request timeout. Please try again.")
            raise RequestTimeoutError("Request timeout. Please try again.") from e

        if response.status_code >= 400:
            self._raise_for_response(response, full_url)

        return response

    def _json(self, method: str, url: str, **kwargs) -> Any:
        response = self.request(method, url, **kwargs)
        return _safe_json(response)

    def get(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._json("GET", url, params=params)

    def post(self, url: str, json: Any = None, files: Any = None, data: Any = None) -> Any:
        return self._json("POST", url, json=json, files=files, data=data)

    def put(self, url: str, json: Any = None, files: Any = None, data: Any = None) -> Any:
        return self._json("PUT", url, json=json, files=files, data=data)

    def delete(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._json("DELETE", url, params=params)

    def download(self, url: str, destination: Union[str, Path], params: Optional[Dict[str, Any]] = None) -> Path:
        """Stream a binary response (e.g. a report export) to ``destination``."""
        destination = Path(destination)
        response = self.request("GET", url, params=params, headers={"Accept": "*/*"}, stream=True)

        destination.parent.mkdir(parents=True, exist_ok=True)
        size = 0
        with open(destination, "wb") as f:
            for chunk in response.iter_content(chunk_size=8192):
                if chunk:
                    f.write(chunk)
                    size += len(chunk)

        logger.info(f"Saved {size} bytes to {destination}")
        return destination


def _safe_json(response: requests.Response) -> Any:
    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError:
        return {}
