"""Spinboard client: session, wheel spins and a live leaderboard.

Transport concerns (httpx requests, socket.io broadcasts) live in `api` and
`realtime`; `client.GameClient` owns and wires every component.
"""
from .client import GameClient
from .errors import AuthError, NetworkError, ProtocolError, SpinboardError
from .leaderboard import LeaderboardEntry, LeaderboardProjection, LeaderboardState, Snapshot, project
from .outcomes import WHEEL, Outcome, OutcomeGenerator
from .session_store import MemoryStorage, Session, SessionStorage, SessionStore
from .spin import SpinController, SpinState

__all__ = [
    'GameClient',
    'SpinboardError', 'AuthError', 'NetworkError', 'ProtocolError',
    'LeaderboardEntry', 'LeaderboardProjection', 'LeaderboardState', 'Snapshot', 'project',
    'WHEEL', 'Outcome', 'OutcomeGenerator',
    'MemoryStorage', 'Session', 'SessionStorage', 'SessionStore',
    'SpinController', 'SpinState',
]
