"""Session controller — drives research turns against a stream transport."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from .conversation import Conversation, Message, MessageRole
from .effort import EffortLevel, resolve_effort
from .processor import EventProcessor
from .telemetry import trace_archive, trace_turn_submit, trace_update_tick
from .timeline import TimelineAggregator, TimelineEntry, TurnPhase
from .transport import SessionRequest, StreamEvent, StreamEventKind, StreamTransport, TransportError

logger = logging.getLogger(__name__)

EntryListener = Callable[[TimelineEntry], None]
ArchiveListener = Callable[[str, list[TimelineEntry]], None]


class SessionBusyError(RuntimeError):
    """Raised when a turn is submitted while another is still streaming."""


class SessionController:
    """Runs one conversational research session.

    A single consumer task drains the transport for the in-flight turn and
    feeds every frame through :meth:`handle_event`, which is synchronous and
    processes one event to completion. Timeline entries are appended in
    arrival order; once the finalize signal has been seen, the stream is idle
    and the newest message is an identified assistant reply, the turn's
    timeline is archived under that message's id.
    """

    def __init__(
        self,
        transport: StreamTransport,
        processor: EventProcessor | None = None,
        aggregator: TimelineAggregator | None = None,
        on_entry: EntryListener | None = None,
        on_archive: ArchiveListener | None = None,
    ) -> None:
        self._transport = transport
        self._processor = processor if processor is not None else EventProcessor()
        self._aggregator = aggregator if aggregator is not None else TimelineAggregator()
        self._conversation = Conversation()
        self._on_entry = on_entry
        self._on_archive = on_archive
        self._task: asyncio.Task[None] | None = None
        self._loading = False
        self._last_error: str | None = None

    # ------------------------------------------------------------------
    # Presentation-facing state
    # ------------------------------------------------------------------

    @property
    def transport(self) -> StreamTransport:
        return self._transport

    @property
    def timeline(self) -> list[TimelineEntry]:
        return self._aggregator.live

    @property
    def history(self) -> dict[str, list[TimelineEntry]]:
        return self._aggregator.history

    @property
    def messages(self) -> list[Message]:
        return self._conversation.messages

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @property
    def phase(self) -> TurnPhase:
        return self._aggregator.phase

    def lookup(self, message_id: str) -> list[TimelineEntry]:
        return self._aggregator.lookup(message_id)

    def summary(self) -> dict[str, Any]:
        """Return a summary of the session state."""
        return {
            "phase": self._aggregator.phase.value,
            "loading": self._loading,
            "message_count": len(self._conversation),
            "live_entries": len(self._aggregator.live),
            "archived_turns": len(self._aggregator.history),
            "last_error": self._last_error,
        }

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def submit(
        self,
        text: str,
        effort: str | EffortLevel,
        model: str,
    ) -> SessionRequest | None:
        """Start a new turn with *text* as the human message.

        Returns the submitted request, or ``None`` when *text* is blank.

        Raises:
            ConfigurationError: If *effort* is not a known effort level.
            SessionBusyError: If a turn is still streaming.
        """
        if not text.strip():
            return None
        if self._loading:
            msg = "A turn is already in flight; cancel it or wait for it to finish"
            raise SessionBusyError(msg)

        effort_config = resolve_effort(effort)

        with trace_turn_submit(str(effort), model):
            self._aggregator.begin_turn()
            self._last_error = None
            self._conversation.add_human_message(text)
            request = SessionRequest(
                messages=self._conversation.to_wire(),
                initial_search_query_count=effort_config.query_count,
                max_research_loops=effort_config.loop_count,
                reasoning_model=model,
            )
            self._set_loading(True)
            self._task = asyncio.create_task(self._consume(request))

        logger.info(
            "Submitted turn (effort=%s, queries=%d, loops=%d, model=%s)",
            effort,
            effort_config.query_count,
            effort_config.loop_count,
            model,
        )
        return request

    async def cancel(self) -> None:
        """Abort the active stream and restart the session from scratch.

        Nothing from the aborted turn is archived.
        """
        task = self._task
        self._task = None
        # The consumer must be gone before stop() yields to the loop
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await self._transport.stop()

        self._conversation.clear()
        self._aggregator.clear()
        self._loading = False
        self._last_error = None
        logger.info("Session cancelled and reset")

    async def wait(self) -> None:
        """Wait until the in-flight turn's stream has been drained."""
        task = self._task
        if task is not None:
            await asyncio.wait({task})

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------

    async def _consume(self, request: SessionRequest) -> None:
        try:
            async for event in self._transport.stream(request):
                if self._task is not asyncio.current_task():
                    break
                self.handle_event(event)
        except TransportError as exc:
            self._fail(str(exc))
        except Exception as exc:
            logger.exception("Unexpected failure while processing the stream")
            self._fail(f"{type(exc).__name__}: {exc}")
        finally:
            # A cancelled turn has already been detached by cancel()
            if self._task is asyncio.current_task():
                self._set_loading(False)

    def handle_event(self, event: StreamEvent) -> None:
        """Apply one stream frame to the session state."""
        if event.event == StreamEventKind.UPDATES:
            self._handle_update(event.data)
        elif event.event == StreamEventKind.VALUES:
            self._handle_values(event.data)
        elif event.event == StreamEventKind.ERROR:
            self._fail(_describe_error(event.data))
        else:
            logger.debug("Ignoring %s frame", event.event)
        self._maybe_archive()

    def _handle_update(self, data: Any) -> None:
        if not isinstance(data, Mapping):
            logger.debug("Ignoring update frame with non-mapping data")
            return
        with trace_update_tick(str(node) for node in data):
            outcome = self._processor.process(data)
            for entry in outcome.entries:
                self._aggregator.append(entry)
                if self._on_entry is not None:
                    self._on_entry(entry)
            if outcome.terminal:
                self._aggregator.mark_finalize_pending()

    def _handle_values(self, data: Any) -> None:
        if not isinstance(data, Mapping) or not isinstance(data.get("messages"), list):
            return
        try:
            messages = [Message.model_validate(raw) for raw in data["messages"]]
        except ValidationError as exc:
            logger.warning("Discarding malformed message list: %s", exc)
            return
        self._conversation.replace(messages)

    def _set_loading(self, loading: bool) -> None:
        self._loading = loading
        self._aggregator.set_stream_idle(not loading)
        self._maybe_archive()

    def _maybe_archive(self) -> None:
        if not self._aggregator.finalize_pending or self._loading:
            return
        last = self._conversation.last()
        if last is None or last.role != MessageRole.ASSISTANT or not last.id:
            logger.debug("Finalize pending; waiting for an identified assistant message")
            return
        with trace_archive(last.id):
            archived = self._aggregator.archive(last.id)
        if archived and self._on_archive is not None:
            self._on_archive(last.id, self._aggregator.lookup(last.id))

    def _fail(self, message: str) -> None:
        self._last_error = message
        logger.error("Research stream failed: %s", message)


def _describe_error(data: Any) -> str:
    if isinstance(data, Mapping):
        return str(data.get("message") or data.get("error") or data)
    return str(data) if data is not None else "unknown error"
