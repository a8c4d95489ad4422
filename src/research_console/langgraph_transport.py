"""LangGraph transport — streams a research run from a LangGraph server over HTTP.

The server speaks Server-Sent Events: each frame is a block of ``event:`` and
``data:`` lines terminated by a blank line. Blocking ``requests`` calls are
pushed to worker threads so the event loop stays responsive.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Iterator
from typing import Any

import requests

from .transport import SessionRequest, StreamEvent, StreamTransport, TransportError

logger = logging.getLogger(__name__)

_STREAM_MODES = ["values", "updates"]


class SseParser:
    """Incremental parser for a ``text/event-stream`` body, one line at a time."""

    def __init__(self) -> None:
        self._event: str | None = None
        self._data: list[str] = []

    def feed(self, line: str) -> StreamEvent | None:
        """Consume one line; return a complete event when a frame ends."""
        if not line:
            return self.flush()
        if line.startswith(":"):
            return None
        name, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if name == "event":
            self._event = value
        elif name == "data":
            self._data.append(value)
        return None

    def flush(self) -> StreamEvent | None:
        """Emit whatever frame is buffered, if any."""
        if self._event is None and not self._data:
            return None
        event_name = self._event or "message"
        raw = "\n".join(self._data)
        self._event = None
        self._data = []
        try:
            data: Any = json.loads(raw) if raw else None
        except json.JSONDecodeError as exc:
            msg = f"Malformed JSON in '{event_name}' frame: {exc}"
            raise TransportError(msg) from exc
        return StreamEvent(event=event_name, data=data)


class LangGraphTransport(StreamTransport):
    """Runs the research agent on a LangGraph server and streams its frames.

    A thread is created lazily on the first run and reused for later turns.
    :meth:`stop` aborts the open response and forgets the thread, so the next
    run starts a fresh conversation on the server.
    """

    def __init__(
        self,
        api_url: str,
        assistant_id: str = "agent",
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._assistant_id = assistant_id
        self._timeout = timeout
        self._session = session if session is not None else requests.Session()
        self._thread_id: str | None = None
        self._response: requests.Response | None = None
        self._stopped = False

    def name(self) -> str:
        return "langgraph"

    @property
    def api_url(self) -> str:
        return self._api_url

    @property
    def thread_id(self) -> str | None:
        return self._thread_id

    # ------------------------------------------------------------------
    # Blocking HTTP helpers (run in worker threads)
    # ------------------------------------------------------------------

    def _create_thread(self) -> str:
        resp = self._session.post(f"{self._api_url}/threads", json={}, timeout=self._timeout)
        resp.raise_for_status()
        thread_id: str = resp.json()["thread_id"]
        logger.info("Created LangGraph thread %s", thread_id)
        return thread_id

    def _open_stream(self, request: SessionRequest) -> requests.Response:
        if self._thread_id is None:
            self._thread_id = self._create_thread()
        resp = self._session.post(
            f"{self._api_url}/threads/{self._thread_id}/runs/stream",
            json={
                "assistant_id": self._assistant_id,
                "input": request.model_dump(mode="json"),
                "stream_mode": _STREAM_MODES,
            },
            headers={"Accept": "text/event-stream"},
            stream=True,
            timeout=(self._timeout, None),
        )
        resp.raise_for_status()
        return resp

    # ------------------------------------------------------------------
    # StreamTransport
    # ------------------------------------------------------------------

    async def stream(self, request: SessionRequest) -> AsyncIterator[StreamEvent]:
        self._stopped = False
        try:
            response = await asyncio.to_thread(self._open_stream, request)
        except (requests.RequestException, KeyError, ValueError) as exc:
            msg = f"Failed to start run on {self._api_url}: {exc}"
            raise TransportError(msg) from exc

        self._response = response
        # Bytes split on CR/LF only; decoded text would also split on U+2028
        lines: Iterator[bytes] = response.iter_lines()
        parser = SseParser()
        try:
            while True:
                try:
                    line = await asyncio.to_thread(next, lines, None)
                except Exception as exc:
                    if self._stopped:
                        return
                    msg = f"Stream from {self._api_url} failed: {exc}"
                    raise TransportError(msg) from exc
                if self._stopped:
                    return
                if line is None:
                    break
                try:
                    text = line.decode("utf-8")
                except UnicodeDecodeError as exc:
                    msg = f"Stream from {self._api_url} is not valid UTF-8: {exc}"
                    raise TransportError(msg) from exc
                event = parser.feed(text)
                if event is not None:
                    yield event
            tail = parser.flush()
            if tail is not None:
                yield tail
        finally:
            response.close()
            self._response = None

    async def stop(self) -> None:
        self._stopped = True
        self._thread_id = None
        response = self._response
        if response is not None:
            await asyncio.to_thread(response.close)
