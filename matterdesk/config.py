from decouple import config
from pathlib import Path
from urllib.parse import urlparse
import re

from matterdesk.api_paths import BASE_URL

DEFAULT_BACKEND_PORT = 5000
DEFAULT_TIMEOUT_MS = 60000  # hosted backends can take a while to warm up
LOCAL_HOSTNAMES = {"localhost", "127.0.0.1", "0.0.0.0"}

_TRAILING_SLASH = re.compile(r"/+$")


def _is_non_empty_string(value) -> bool:
    return isinstance(value, str) and value.strip() != ""


def _parse_positive_int(value, default: int) -> int:
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def normalize_base_url(url) -> str:
    """Trim whitespace and any trailing slash; non-strings become an empty string."""
    if not _is_non_empty_string(url):
        return ""
    return _TRAILING_SLASH.sub("", url.strip())


def is_local_host(hostname) -> bool:
    if not _is_non_empty_string(hostname):
        return False
    normalized = hostname.strip().lower()
    return normalized in LOCAL_HOSTNAMES or normalized.endswith(".local")


def derive_local_base_url(app_host: str, scheme: str = "http", backend_port=None) -> str:
    """
    Build ``scheme://host:port`` when the client runs next to a local backend.

    ``app_host`` may be a bare hostname or a URL; anything that is not a local
    host yields an empty string.
    """
    if not _is_non_empty_string(app_host):
        return ""

    candidate = app_host.strip()
    if "://" in candidate:
        parsed = urlparse(candidate)
        hostname = parsed.hostname or ""
        scheme = parsed.scheme or scheme
    else:
        hostname = candidate.split(":", 1)[0]

    if not is_local_host(hostname):
        return ""

    port = _parse_positive_int(backend_port, DEFAULT_BACKEND_PORT)
    return f"{scheme or 'http'}://{hostname}:{port}"


class Settings:
    """Client settings read from the environment, ``.env`` or ``settings.ini``."""

    def __init__(self):
        self.API_BASE_URL = config("MATTERDESK_API_BASE_URL", default="")
        self.APP_HOST = config("MATTERDESK_APP_HOST", default="")
        self.APP_SCHEME = config("MATTERDESK_APP_SCHEME", default="http")
        self.BACKEND_PORT = config("MATTERDESK_BACKEND_PORT", default=str(DEFAULT_BACKEND_PORT))
        self.API_TIMEOUT = config("MATTERDESK_API_TIMEOUT", default=str(DEFAULT_TIMEOUT_MS))
        self.TOKEN_FILE = config(
            "MATTERDESK_TOKEN_FILE",
            default=str(Path.home() / ".matterdesk" / "storage.json"),
        )
        self.LOG_LEVEL = config("MATTERDESK_LOG_LEVEL", default="INFO")

    @property
    def base_url(self) -> str:
        explicit = normalize_base_url(self.API_BASE_URL)
        if explicit:
            return explicit

        local = normalize_base_url(
            derive_local_base_url(self.APP_HOST, self.APP_SCHEME, self.BACKEND_PORT)
        )
        if local:
            return local

        return normalize_base_url(BASE_URL)

    @property
    def timeout_seconds(self) -> float:
        return _parse_positive_int(self.API_TIMEOUT, DEFAULT_TIMEOUT_MS) / 1000

    @property
    def token_file(self) -> Path:
        return Path(self.TOKEN_FILE).expanduser()


def get_settings() -> Settings:
    return Settings()
