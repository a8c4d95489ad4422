"""Activity timeline — live entries for the current turn plus the per-message archive."""

from __future__ import annotations

import logging
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class TimelineEntry(BaseModel):
    """One rendered activity-log line."""

    model_config = ConfigDict(frozen=True)

    title: str
    data: str


class TurnPhase(StrEnum):
    IDLE = "idle"
    STREAMING = "streaming"
    FINALIZE_PENDING = "finalize_pending"
    ARCHIVED = "archived"


class InvalidTransitionError(ValueError):
    """Raised on a turn-phase change the transition table does not allow."""


# STREAMING/FINALIZE_PENDING -> IDLE is the abandoned-turn path taken on resubmission
_TRANSITIONS: dict[TurnPhase, list[TurnPhase]] = {
    TurnPhase.IDLE: [TurnPhase.STREAMING],
    TurnPhase.STREAMING: [TurnPhase.FINALIZE_PENDING, TurnPhase.IDLE],
    TurnPhase.FINALIZE_PENDING: [TurnPhase.ARCHIVED, TurnPhase.IDLE],
    TurnPhase.ARCHIVED: [TurnPhase.IDLE],
}


class TimelineAggregator:
    """Owns the live timeline of the in-flight turn and the archive of past turns.

    The archive is keyed by the id of the assistant message a turn produced.
    Archiving is gated on two observations that may arrive in either order:
    the terminal (finalize) signal, and the stream going idle with an
    identified assistant message in place. Until both hold, :meth:`archive`
    is a no-op and the caller is expected to retry on the next event.
    """

    def __init__(self) -> None:
        self._live: list[TimelineEntry] = []
        self._history: dict[str, list[TimelineEntry]] = {}
        self._phase = TurnPhase.IDLE
        self._stream_idle = True

    # -- views ---------------------------------------------------------------

    @property
    def live(self) -> list[TimelineEntry]:
        return list(self._live)

    @property
    def history(self) -> dict[str, list[TimelineEntry]]:
        return {message_id: list(entries) for message_id, entries in self._history.items()}

    @property
    def phase(self) -> TurnPhase:
        return self._phase

    @property
    def finalize_pending(self) -> bool:
        return self._phase == TurnPhase.FINALIZE_PENDING

    @property
    def stream_idle(self) -> bool:
        return self._stream_idle

    # -- live timeline -------------------------------------------------------

    def append(self, entry: TimelineEntry) -> None:
        self._live.append(entry)

    def reset(self) -> None:
        self._live.clear()

    def lookup(self, message_id: str) -> list[TimelineEntry]:
        return list(self._history.get(message_id, []))

    # -- turn lifecycle ------------------------------------------------------

    def can_transition(self, target: TurnPhase) -> bool:
        return target in _TRANSITIONS.get(self._phase, [])

    def _transition(self, target: TurnPhase) -> None:
        if not self.can_transition(target):
            raise InvalidTransitionError(f"Invalid transition: {self._phase} -> {target}")
        logger.debug("Turn phase %s -> %s", self._phase, target)
        self._phase = target

    def begin_turn(self) -> None:
        """Start a new turn: IDLE -> STREAMING with an empty live timeline."""
        if self._phase in (TurnPhase.STREAMING, TurnPhase.FINALIZE_PENDING):
            logger.warning(
                "Starting a new turn while the previous one was never archived "
                "(phase=%s); dropping %d timeline entries",
                self._phase,
                len(self._live),
            )
        if self._phase != TurnPhase.IDLE:
            self._transition(TurnPhase.IDLE)
        self.reset()
        self._stream_idle = False
        self._transition(TurnPhase.STREAMING)

    def mark_finalize_pending(self) -> bool:
        """Record the terminal signal for the current turn.

        Repeated signals within the same turn are ignored. Returns ``False``
        when no turn is streaming.
        """
        if self._phase == TurnPhase.FINALIZE_PENDING:
            return True
        if not self.can_transition(TurnPhase.FINALIZE_PENDING):
            logger.debug("Terminal signal ignored in phase %s", self._phase)
            return False
        self._transition(TurnPhase.FINALIZE_PENDING)
        return True

    def set_stream_idle(self, idle: bool) -> None:
        self._stream_idle = idle

    def archive(self, message_id: str | None) -> bool:
        """Snapshot the live timeline under *message_id*.

        Returns ``True`` when the timeline was archived. When the terminal
        signal has not been seen, the stream is still active, or
        *message_id* is unknown, nothing changes and ``False`` is returned.
        """
        if self._phase != TurnPhase.FINALIZE_PENDING or not self._stream_idle or not message_id:
            logger.debug(
                "Archive deferred (phase=%s, stream_idle=%s, message_id=%r)",
                self._phase,
                self._stream_idle,
                message_id,
            )
            return False

        if message_id in self._history:
            logger.warning("Overwriting archived timeline for message %s", message_id)
        self._history[message_id] = list(self._live)
        self._transition(TurnPhase.ARCHIVED)
        logger.info("Archived %d timeline entries for message %s", len(self._live), message_id)
        return True

    def clear(self) -> None:
        """Drop all live and archived state and return to IDLE."""
        self._live.clear()
        self._history.clear()
        self._phase = TurnPhase.IDLE
        self._stream_idle = True
