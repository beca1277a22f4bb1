import enum
import logging
from typing import Callable, Optional

from .api import RequestClient
from .errors import SpinboardError
from .leaderboard import LeaderboardState, Snapshot
from .outcomes import Outcome, OutcomeGenerator
from .session_store import SessionStore

logger = logging.getLogger(__name__)


class SpinState(enum.Enum):
    IDLE = 'idle'
    SPINNING = 'spinning'
    RESOLVING = 'resolving'


class SpinController:
    """Drives one spin at a time: draw, animate, report, apply.

    - IDLE -> SPINNING on `request_spin`; any other state ignores the request
    - SPINNING -> IDLE if the spin-start callback raises
    - SPINNING -> RESOLVING on `animation_complete`, which reports the drawn value
    - RESOLVING -> IDLE once the authority answers, success or not
    """

    def __init__(
        self,
        generator: OutcomeGenerator,
        api: RequestClient,
        sessions: SessionStore,
        state: LeaderboardState,
        on_spin_start: Optional[Callable[[Outcome], None]] = None,
    ):
        self._generator = generator
        self._api = api
        self._sessions = sessions
        self._leaderboard = state
        self._on_spin_start = on_spin_start
        self.state = SpinState.IDLE
        self.outcome: Optional[Outcome] = None

    @property
    def locked(self) -> bool:
        return self.state is not SpinState.IDLE

    def request_spin(self) -> Optional[Outcome]:
        if self.state is not SpinState.IDLE:
            logger.debug(f"[spin-ignored] state={self.state.value}")
            return None
        self.outcome = self._generator.next()
        self.state = SpinState.SPINNING
        logger.info(f"[spin-start] index={self.outcome.index} value={self.outcome.value}")
        if self._on_spin_start:
            try:
                self._on_spin_start(self.outcome)
            except Exception:
                # Nothing was reported yet, so the draw is simply abandoned
                logger.exception(f"[spin-aborted] index={self.outcome.index} spin-start callback failed")
                self.outcome = None
                self.state = SpinState.IDLE
                raise
        return self.outcome

    async def animation_complete(self) -> Optional[Snapshot]:
        if self.state is not SpinState.SPINNING:
            logger.debug(f"[spin-stop-ignored] state={self.state.value}")
            return None
        self.state = SpinState.RESOLVING
        outcome = self.outcome
        session = self._sessions.current
        try:
            snapshot = await self._api.increment_score(
                outcome.value, session.credential if session else None
            )
        except SpinboardError as exc:
            logger.error(f"[spin-report-failed] value={outcome.value} error={exc}")
            return None
        else:
            self._leaderboard.apply(snapshot, source='increment-score')
            logger.info(f"[spin-resolved] value={outcome.value} seq={snapshot.seq}")
            return snapshot
        finally:
            self.outcome = None
            self.state = SpinState.IDLE

    async def spin(self) -> Optional[Snapshot]:
        if self.request_spin() is None:
            return None
        return await self.animation_complete()
