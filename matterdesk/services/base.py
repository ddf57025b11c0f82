from typing import Any, List

from matterdesk.http_client import ApiClient


def unwrap(data: Any, key: str) -> Any:
    """Return ``data[key]`` for enveloped responses such as ``{"matter": {...}}``."""
    if isinstance(data, dict) and key in data:
        return data[key]
    return data


def unwrap_list(data: Any, key: str) -> List[Any]:
    items = unwrap(data, key)
    return items if isinstance(items, list) else []


class BaseService:
    def __init__(self, client: ApiClient):
        self.client = client
