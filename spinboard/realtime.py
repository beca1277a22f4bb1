import logging
from typing import Optional

import socketio

from .errors import ProtocolError
from .leaderboard import LeaderboardState, parse_snapshot

logger = logging.getLogger(__name__)

LEADERBOARD_EVENT = 'leaderboard-update'


class RealtimeChannel:
    """Standing subscription to leaderboard broadcasts.

    Every broadcast carries a full snapshot which replaces the shared
    leaderboard wholesale. Reconnects are left to the socket.io client.
    """

    def __init__(self, state: LeaderboardState, sio: Optional[socketio.AsyncClient] = None):
        self._state = state
        self._sio = sio or socketio.AsyncClient()
        self._sio.on('connect', self.handle_connect)
        self._sio.on(LEADERBOARD_EVENT, self.handle_update)

    @property
    def connected(self) -> bool:
        return bool(self._sio.connected)

    async def connect(self, url: str, transports=None) -> None:
        logger.info(f"[realtime-connect] url={url}")
        await self._sio.connect(url, transports=transports)

    async def disconnect(self) -> None:
        if self._sio.connected:
            await self._sio.disconnect()
            logger.info("[realtime-disconnect]")

    async def wait(self) -> None:
        await self._sio.wait()

    async def handle_connect(self) -> None:
        # Fires on every (re)connect; the authority may have restarted its seq counter
        self._state.reset_sequence()

    async def handle_update(self, data) -> None:
        if not isinstance(data, dict) or 'leaderboard' not in data:
            logger.debug(f"[realtime-ignore] payload without leaderboard: {data!r}")
            return
        try:
            snapshot = parse_snapshot(data)
        except ProtocolError as exc:
            logger.error(f"[realtime-drop] malformed broadcast: {exc}")
            return
        self._state.apply(snapshot, source='broadcast')
