"""
Reveal Engine

The selection-driven state machine behind the globe's focus animation.

States:
    IDLE     no session; everything is drawn on the ambient layer
    PLAYING  a sequence path is being revealed, one step per tick
    SETTLED  the path is fully revealed (or there was nothing to play)

Transitions:
    select(id)   from any state; replaces the session atomically and
                 restarts at cursor 0, even for the id already selected
    advance()    PLAYING only; cursor += 1, SETTLED at the final index
    close()      back to IDLE

The engine never sleeps. Each playing session gets a PlaybackTask handle;
a scheduler waits the interval and calls advance(handle), and handles from
superseded sessions are rejected so a late tick cannot touch a new session.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from functools import cached_property
from typing import Optional

from grid_config import REVEAL_INTERVAL_MS, RevealMode
from logging_config import get_logger
from network_data import Connection, NetworkData, UnknownEntity
from selection_resolver import resolve
import visibility

logger = get_logger("reveal_engine")


class EngineState(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    SETTLED = "settled"


@dataclass(frozen=True)
class RevealSession:
    """
    Snapshot of one selection's playback.

    Sessions are never mutated; every advance produces a new snapshot, so a
    reader holding one always sees a consistent revealed set.
    """
    session_id: int
    mode: RevealMode
    selected_entity_id: str
    active_path: tuple[str, ...] = ()
    cursor: int = 0
    highlighted: frozenset[str] = field(default_factory=frozenset)

    @property
    def final_index(self) -> int:
        return max(0, len(self.active_path) - 1)

    @property
    def is_complete(self) -> bool:
        return not self.active_path or self.cursor == len(self.active_path) - 1

    @property
    def current_entity_id(self) -> Optional[str]:
        if not self.active_path:
            return None
        return self.active_path[self.cursor]

    @cached_property
    def revealed_ids(self) -> frozenset[str]:
        return frozenset(self.active_path[:self.cursor + 1])

    @cached_property
    def revealed_steps(self) -> frozenset[frozenset[str]]:
        """Unordered endpoint pairs of consecutive path steps revealed so far."""
        return frozenset(
            frozenset((self.active_path[k - 1], self.active_path[k]))
            for k in range(1, self.cursor + 1)
        )

    def as_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "mode": self.mode.value,
            "selected_entity_id": self.selected_entity_id,
            "active_path": list(self.active_path),
            "cursor": self.cursor,
            "is_complete": self.is_complete,
        }


@dataclass(frozen=True)
class PlaybackTask:
    """Handle for the pending reveal timer of one session."""
    session_id: int
    interval_ms: int


class RevealEngine:
    """Owns the single mutable session of the grid."""

    def __init__(
        self,
        network: NetworkData,
        mode: RevealMode = RevealMode.SEQUENCE,
        interval_ms: int = REVEAL_INTERVAL_MS,
    ):
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        self.network = network
        self.mode = RevealMode(mode)
        self.interval_ms = interval_ms
        self._session: Optional[RevealSession] = None
        self._pending: Optional[PlaybackTask] = None
        self._session_counter = 0

    # -- state ---------------------------------------------------------------

    @property
    def state(self) -> EngineState:
        if self._session is None:
            return EngineState.IDLE
        if self._session.is_complete:
            return EngineState.SETTLED
        return EngineState.PLAYING

    @property
    def pending_task(self) -> Optional[PlaybackTask]:
        return self._pending

    def current_session(self) -> Optional[RevealSession]:
        return self._session

    # -- transitions ---------------------------------------------------------

    def select(self, entity_id: str) -> Optional[PlaybackTask]:
        """
        Start a new session for entity_id, discarding the current one.

        Returns the PlaybackTask to schedule, or None when the new session is
        already settled. Unknown ids raise UnknownEntity and change nothing.
        """
        try:
            resolved = resolve(self.network, entity_id, self.mode)
        except UnknownEntity:
            logger.warning("Rejected selection of unknown entity %r", entity_id)
            raise

        self._session_counter += 1
        session = RevealSession(
            session_id=self._session_counter,
            mode=resolved.mode,
            selected_entity_id=resolved.selected_entity_id,
            active_path=resolved.active_path,
            highlighted=resolved.highlighted,
        )
        pending = None
        if not session.is_complete:
            pending = PlaybackTask(session.session_id, self.interval_ms)

        # Swap both together so no observer sees old and new mixed
        self._session, self._pending = session, pending

        logger.debug(
            "Session %d: selected %r, path=%s, state=%s",
            session.session_id, entity_id, list(session.active_path), self.state.value,
        )
        return pending

    def advance(self, task: Optional[PlaybackTask] = None) -> bool:
        """
        Reveal the next path step.

        With a task handle, the step only happens if the handle belongs to the
        current session. Returns True if the cursor moved.
        """
        session = self._session
        if session is None or session.is_complete:
            return False
        if task is not None and (self._pending is None or task.session_id != self._pending.session_id):
            logger.debug("Discarded stale tick for session %d", task.session_id)
            return False

        advanced = replace(session, cursor=session.cursor + 1)
        self._session = advanced
        if advanced.is_complete:
            self._pending = None

        logger.debug(
            "Session %d: cursor %d/%d (%s)",
            advanced.session_id, advanced.cursor, advanced.final_index, advanced.current_entity_id,
        )
        return True

    def close(self) -> None:
        if self._session is not None:
            logger.debug("Session %d closed", self._session.session_id)
        self._session = None
        self._pending = None

    # Inbound interface used by the input/scheduling collaborators
    def on_entity_selected(self, entity_id: str) -> Optional[PlaybackTask]:
        return self.select(entity_id)

    def on_close_session(self) -> None:
        self.close()

    def on_tick(self) -> bool:
        return self.advance()

    # -- per-frame queries ---------------------------------------------------

    def is_entity_revealed(self, entity_id: str) -> bool:
        return visibility.is_entity_revealed(self._session, entity_id)

    def is_entity_emphasized(self, entity_id: str) -> bool:
        return visibility.is_entity_emphasized(self._session, entity_id)

    def is_connection_revealed(self, connection: Connection) -> bool:
        return visibility.is_connection_revealed(self._session, connection)

    def default_layer_visible(self) -> bool:
        return visibility.default_layer_visible(self._session)
