import json
import logging
import os
import tempfile
from dataclasses import dataclass
from typing import Dict, Optional

from .api import RequestClient
from .errors import AuthError, SpinboardError

logger = logging.getLogger(__name__)

TOKEN_KEY = 'token'
USERNAME_KEY = 'username'


@dataclass(frozen=True)
class Session:
    credential: str
    username: str
    authenticated: bool = True


class MemoryStorage:
    """Key/value storage that lives as long as the object."""

    def __init__(self):
        self._items: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._items[key] = value

    def update(self, items: Dict[str, str]) -> None:
        self._items.update(items)


class SessionStorage:
    """Durable key/value storage scoped to one tab id.

    Each tab id gets its own JSON document under `state_dir`, so a restart
    with the same tab id sees the same values and other tab ids see nothing.
    """

    def __init__(self, state_dir: str, tab_id: str):
        self.path = os.path.join(state_dir, f'session-{tab_id}.json')

    def _load(self) -> Dict[str, str]:
        try:
            with open(self.path, encoding='utf-8') as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.warning(f"[session-storage] unreadable {self.path}: {exc}")
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        self.update({key: value})

    def update(self, items: Dict[str, str]) -> None:
        """Write all of `items` in a single replace of the tab document."""
        data = self._load()
        data.update(items)
        directory = os.path.dirname(self.path)
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.session-')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as fh:
                json.dump(data, fh)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise


class SessionStore:
    """Owns the session credential and its persist/restore lifecycle."""

    def __init__(self, storage, api: RequestClient):
        self._storage = storage
        self._api = api
        self._session: Optional[Session] = None

    @property
    def current(self) -> Optional[Session]:
        return self._session

    def restore(self) -> Optional[Session]:
        token = self._storage.get(TOKEN_KEY)
        username = self._storage.get(USERNAME_KEY)
        if not token or not username:
            return None
        self._session = Session(credential=token, username=username)
        logger.info(f"[session-restore] user={username}")
        return self._session

    async def login(self, username: str, password: str) -> Session:
        try:
            result = await self._api.login(username, password)
        except AuthError:
            logger.warning(f"[login-failed] user={username} rejected")
            raise
        except SpinboardError as exc:
            logger.warning(f"[login-failed] user={username} error={exc}")
            raise AuthError(f'login failed: {exc}') from exc

        try:
            self._storage.update({TOKEN_KEY: result.credential, USERNAME_KEY: result.username})
        except OSError as exc:
            logger.error(f"[login-failed] user={result.username} could not persist session: {exc}")
            raise AuthError(f'could not persist session: {exc}') from exc
        self._session = Session(credential=result.credential, username=result.username)
        logger.info(f"[login] user={result.username}")
        return self._session
