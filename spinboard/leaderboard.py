"""Leaderboard snapshots, the shared state both writers apply them to, and
the pure view projection used for display.

Ranks are assigned by the scoring authority only. The client sorts by the
rank it was given and rejects snapshots that contradict themselves, but it
never derives a rank from scores.
"""
import logging
from typing import Callable, List, NamedTuple, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ProtocolError

logger = logging.getLogger(__name__)


class LeaderboardEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    username: str
    score: int = Field(ge=0)
    rank: int = Field(ge=1)


Leaderboard = Tuple[LeaderboardEntry, ...]


class Snapshot(NamedTuple):
    entries: Leaderboard
    seq: Optional[int] = None


class LeaderboardProjection(NamedTuple):
    entries: Leaderboard
    rank: Optional[int]


def parse_leaderboard(raw) -> Leaderboard:
    """Validate a wire leaderboard and return it ordered by ascending rank."""
    if not isinstance(raw, list):
        raise ProtocolError('leaderboard must be a list', payload=raw)
    try:
        entries = [LeaderboardEntry.model_validate(item) for item in raw]
    except ValidationError as exc:
        raise ProtocolError(f'invalid leaderboard entry: {exc}', payload=raw) from exc

    entries.sort(key=lambda e: e.rank)
    usernames = {e.username for e in entries}
    ranks = {e.rank for e in entries}
    if len(usernames) != len(entries):
        raise ProtocolError('duplicate username in leaderboard', payload=raw)
    if len(ranks) != len(entries):
        raise ProtocolError('duplicate rank in leaderboard', payload=raw)
    return tuple(entries)


def parse_snapshot(payload) -> Snapshot:
    """Parse a `{leaderboard: [...], seq?}` document."""
    if not isinstance(payload, dict) or 'leaderboard' not in payload:
        raise ProtocolError('response has no leaderboard', payload=payload)
    seq = payload.get('seq')
    if seq is not None and (isinstance(seq, bool) or not isinstance(seq, int)):
        raise ProtocolError(f'invalid snapshot seq: {seq!r}', payload=payload)
    return Snapshot(parse_leaderboard(payload['leaderboard']), seq)


def project(entries: Leaderboard, username: Optional[str]) -> LeaderboardProjection:
    rank = None
    if username:
        for entry in entries:
            if entry.username == username:
                rank = entry.rank
                break
    return LeaderboardProjection(entries, rank)


Listener = Callable[[Snapshot], None]


class LeaderboardState:
    """Shared leaderboard written by increment-score responses and by
    broadcasts.

    Sequenced snapshots only apply when newer than the last sequenced one
    applied. Snapshots without a seq replace whatever is there.
    """

    def __init__(self):
        self.entries: Leaderboard = ()
        self.seq: Optional[int] = None
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def reset_sequence(self) -> None:
        """Forget the seq high-water mark, e.g. after reconnecting to an
        authority whose counter may have restarted."""
        if self.seq is not None:
            logger.info(f"[leaderboard-seq-reset] previous={self.seq}")
        self.seq = None

    def apply(self, snapshot: Snapshot, source: str = 'unknown') -> bool:
        if snapshot.seq is not None and self.seq is not None and snapshot.seq <= self.seq:
            logger.info(f"[leaderboard-stale] source={source} seq={snapshot.seq} current={self.seq}")
            return False
        self.entries = snapshot.entries
        if snapshot.seq is not None:
            self.seq = snapshot.seq
        logger.debug(f"[leaderboard-apply] source={source} seq={snapshot.seq} entries={len(snapshot.entries)}")
        for listener in list(self._listeners):
            listener(snapshot)
        return True
