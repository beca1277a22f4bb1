import asyncio
import logging
from typing import Optional

import httpx
import socketio
from socketio.exceptions import ConnectionError as SocketConnectionError

from .api import RequestClient
from .errors import SpinboardError
from .leaderboard import LeaderboardProjection, LeaderboardState, Snapshot, project
from .outcomes import OutcomeGenerator
from .realtime import RealtimeChannel
from .session_store import Session, SessionStorage, SessionStore
from .spin import SpinController

logger = logging.getLogger(__name__)


class GameClient:
    """Owns every client component and wires the session flows together.

    Construct with `from_config` for real use; the constructor takes
    ready-made parts so tests can swap transports.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        storage,
        sio: Optional[socketio.AsyncClient] = None,
        generator: Optional[OutcomeGenerator] = None,
        backend_url: Optional[str] = None,
        on_spin_start=None,
    ):
        self.backend_url = backend_url or str(http.base_url)
        self._http = http
        self.api = RequestClient(http)
        self.sessions = SessionStore(storage, self.api)
        self.leaderboard = LeaderboardState()
        self.channel = RealtimeChannel(self.leaderboard, sio)
        self.spinner = SpinController(
            generator or OutcomeGenerator(),
            self.api,
            self.sessions,
            self.leaderboard,
            on_spin_start=on_spin_start,
        )
        self.user_rank: Optional[int] = None
        self.leaderboard.subscribe(self._on_snapshot)

    @classmethod
    def from_config(cls, config, **kwargs) -> 'GameClient':
        timeout = config.REQUEST_TIMEOUT_SEC or None
        http = httpx.AsyncClient(base_url=config.BACKEND_URL, timeout=timeout)
        storage = SessionStorage(config.STATE_DIR, config.TAB_ID)
        return cls(http, storage, backend_url=config.BACKEND_URL, **kwargs)

    @property
    def session(self) -> Optional[Session]:
        return self.sessions.current

    @property
    def username(self) -> Optional[str]:
        return self.session.username if self.session else None

    async def start(self, realtime: bool = True) -> Optional[Session]:
        session = self.sessions.restore()
        if realtime:
            try:
                await self.channel.connect(self.backend_url)
            except SocketConnectionError as exc:
                logger.error(f"[realtime-connect-failed] url={self.backend_url} error={exc}")
        if session:
            await self.refresh()
        return session

    async def close(self) -> None:
        await self.channel.disconnect()
        await self._http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def login(self, username: str, password: str) -> Session:
        session = await self.sessions.login(username, password)
        await self.refresh()
        return session

    async def refresh(self) -> None:
        await asyncio.gather(self.refresh_leaderboard(), self.refresh_user_rank())

    async def refresh_leaderboard(self) -> Optional[Snapshot]:
        try:
            snapshot = await self.api.fetch_leaderboard()
        except SpinboardError as exc:
            logger.error(f"[leaderboard-fetch-failed] error={exc}")
            return None
        self.leaderboard.apply(snapshot, source='fetch')
        return snapshot

    async def refresh_user_rank(self) -> Optional[int]:
        session = self.session
        try:
            rank = await self.api.fetch_user_rank(session.credential if session else None)
        except SpinboardError as exc:
            logger.error(f"[rank-fetch-failed] error={exc}")
            return None
        self.user_rank = rank
        return rank

    def view(self) -> LeaderboardProjection:
        return LeaderboardProjection(self.leaderboard.entries, self.user_rank)

    def _on_snapshot(self, snapshot: Snapshot) -> None:
        self.user_rank = project(snapshot.entries, self.username).rank
