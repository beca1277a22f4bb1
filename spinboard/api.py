import logging
from typing import NamedTuple, Optional

import httpx

from .errors import AuthError, NetworkError, ProtocolError
from .leaderboard import Snapshot, parse_leaderboard, parse_snapshot

logger = logging.getLogger(__name__)


class LoginResult(NamedTuple):
    credential: str
    username: str


class RequestClient:
    """Request/response operations against the scoring authority.

    The `httpx.AsyncClient` is owned by the caller; pass one built with a
    `base_url` pointing at the scoring service.
    """

    def __init__(self, http: httpx.AsyncClient):
        self._http = http

    async def fetch_leaderboard(self) -> Snapshot:
        data = await self._request('GET', '/leaderboard')
        return Snapshot(parse_leaderboard(data))

    async def fetch_user_rank(self, credential: Optional[str]) -> int:
        data = await self._request('GET', '/user-rank', credential=_require(credential))
        rank = data.get('rank') if isinstance(data, dict) else None
        if isinstance(rank, bool) or not isinstance(rank, int) or rank < 1:
            raise ProtocolError(f'invalid rank in response: {rank!r}', payload=data)
        return rank

    async def login(self, username: str, password: str) -> LoginResult:
        data = await self._request('POST', '/login', json={'username': username, 'password': password})
        token = data.get('token') if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            raise ProtocolError('login response has no token', payload=data)
        return LoginResult(credential=token, username=username)

    async def increment_score(self, value: str, credential: Optional[str]) -> Snapshot:
        data = await self._request(
            'POST', '/increment-score', credential=_require(credential), json={'increment': value}
        )
        return parse_snapshot(data)

    async def _request(self, method: str, path: str, credential: Optional[str] = None, json=None):
        headers = {'Authorization': f'Bearer {credential}'} if credential else None
        try:
            response = await self._http.request(method, path, headers=headers, json=json)
        except httpx.TimeoutException as exc:
            raise NetworkError(f'{method} {path} timed out') from exc
        except httpx.TransportError as exc:
            raise NetworkError(f'{method} {path} failed: {exc}') from exc

        status = response.status_code
        if status in (401, 403):
            raise AuthError(f'{method} {path} rejected with {status}')
        if status >= 500:
            raise NetworkError(f'{method} {path} failed with {status}')
        if not response.is_success:
            raise ProtocolError(f'{method} {path} unexpected status {status}', payload=response.text)
        try:
            return response.json()
        except ValueError as exc:
            raise ProtocolError(f'{method} {path} returned non-JSON body', payload=response.text) from exc


def _require(credential: Optional[str]) -> str:
    if not credential:
        raise AuthError('no session credential')
    return credential
