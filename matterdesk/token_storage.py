import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional, Union

from matterdesk.exceptions import StorageError

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
STORAGE_PREFERENCE_KEY = "tokenStoragePreference"

LOCAL = "local"
SESSION = "session"


class MemoryStorage:
    """Key/value store that lives as long as the process (the "session" store)."""

    def __init__(self):
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str):
        self._items[key] = str(value)

    def remove_item(self, key: str):
        self._items.pop(key, None)


class FileStorage:
    """Key/value store persisted as a JSON file (the "local" store)."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        """Stored items; an unreadable or corrupt file reads as empty and is replaced on the next write."""
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Unable to read {self.path}, ignoring it: {e}")
            return {}
        if not isinstance(data, dict):
            logger.error(f"Unexpected content in {self.path}, ignoring it")
            return {}
        return data

    def _save(self, data: Dict[str, str]):
        tmp_path = self.path.with_name(f".{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path.exists():
                tmp_path.unlink()
            raise StorageError(f"Unable to write {self.path}: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return None if value is None else str(value)

    def set_item(self, key: str, value: str):
        data = self._load()
        data[key] = str(value)
        self._save(data)

    def remove_item(self, key: str):
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


class TokenStorage:
    """
    Keeps the bearer token either in the persistent store ("remember me") or in
    the process-lifetime store.

    The choice is remembered under ``tokenStoragePreference`` in the persistent
    store so that later calls without an explicit choice follow it. A store
    that cannot be used is logged and treated as empty.
    """

    def __init__(self, local=None, session=None):
        self.local = local if local is not None else MemoryStorage()
        self.session = session if session is not None else MemoryStorage()

    def _set_preference(self, preference: str):
        try:
            self.local.set_item(STORAGE_PREFERENCE_KEY, preference)
        except StorageError as e:
            logger.error(f"Failed to set token storage preference: {e}")

    def get_stored_preference(self) -> Optional[str]:
        try:
            return self.local.get_item(STORAGE_PREFERENCE_KEY)
        except StorageError as e:
            logger.error(f"Failed to read token storage preference: {e}")
            return None

    def _store_in_local(self, token: str):
        try:
            self.local.set_item(TOKEN_KEY, token)
            self._set_preference(LOCAL)
            self.session.remove_item(TOKEN_KEY)
        except StorageError as e:
            logger.error(f"Failed to store token in local storage: {e}")

    def _store_in_session(self, token: str):
        try:
            self.session.set_item(TOKEN_KEY, token)
            self._set_preference(SESSION)
            self.local.remove_item(TOKEN_KEY)
        except StorageError as e:
            logger.error(f"Failed to store token in session storage: {e}")

    def set_token(self, token: Optional[str], remember_me: Optional[bool] = None):
        if not token:
            self.clear_token()
            return

        if remember_me is True:
            self._store_in_local(token)
            return

        if remember_me is False:
            self._store_in_session(token)
            return

        if self.get_stored_preference() == SESSION:
            self._store_in_session(token)
        else:
            self._store_in_local(token)

    def _read(self, store, name: str) -> Optional[str]:
        try:
            return store.get_item(TOKEN_KEY)
        except StorageError as e:
            logger.error(f"Failed to access token in {name} storage: {e}")
            return None

    def get_token(self) -> Optional[str]:
        if self.get_stored_preference() == SESSION:
            return self._read(self.session, SESSION)
        return self._read(self.local, LOCAL) or self._read(self.session, SESSION)

    def clear_token(self):
        try:
            self.local.remove_item(TOKEN_KEY)
            self.local.remove_item(STORAGE_PREFERENCE_KEY)
        except StorageError as e:
            logger.error(f"Failed to clear local token: {e}")
        try:
            self.session.remove_item(TOKEN_KEY)
        except StorageError as e:
            logger.error(f"Failed to clear session token: {e}")


def build_token_storage(token_file: Union[str, Path]) -> TokenStorage:
    return TokenStorage(local=FileStorage(token_file), session=MemoryStorage())
