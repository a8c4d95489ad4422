"""Stream transport abstraction — delivers agent events for a submitted turn."""

from __future__ import annotations

import asyncio
import uuid
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


class TransportError(Exception):
    """Raised when the stream collaborator fails to deliver a turn."""


class StreamEventKind(StrEnum):
    """Frame names used by the LangGraph streaming API."""

    METADATA = "metadata"
    VALUES = "values"
    UPDATES = "updates"
    ERROR = "error"
    END = "end"


class StreamEvent(BaseModel):
    """One deserialized frame from the agent stream."""

    event: str
    data: Any = None


class SessionRequest(BaseModel):
    """Input submitted to the research agent for one turn."""

    messages: list[dict[str, Any]] = Field(default_factory=list)
    initial_search_query_count: int
    max_research_loops: int
    reasoning_model: str


# ---------------------------------------------------------------------------
# StreamTransport ABC
# ---------------------------------------------------------------------------


class StreamTransport(ABC):
    """Abstract base class for agent stream transports."""

    @abstractmethod
    def name(self) -> str:
        """Return the canonical transport name (e.g. 'langgraph')."""

    @abstractmethod
    def stream(self, request: SessionRequest) -> AsyncIterator[StreamEvent]:
        """Submit *request* and yield stream events in arrival order."""

    @abstractmethod
    async def stop(self) -> None:
        """Abort the active stream, if any."""


# ---------------------------------------------------------------------------
# Scripted implementation (for testing / offline development)
# ---------------------------------------------------------------------------

Script = list[StreamEvent] | Callable[[SessionRequest], list[StreamEvent]]


def default_script(request: SessionRequest) -> list[StreamEvent]:
    """Imitate a single-loop research run that ends in an assistant reply."""
    question = ""
    if request.messages:
        question = str(request.messages[-1].get("content", ""))
    reply = {
        "type": "ai",
        "id": f"run-{uuid.uuid4().hex[:12]}",
        "content": f"This is a scripted answer to: {question}",
    }
    return [
        StreamEvent(event=StreamEventKind.METADATA, data={"run_id": uuid.uuid4().hex}),
        StreamEvent(event=StreamEventKind.VALUES, data={"messages": request.messages}),
        StreamEvent(
            event=StreamEventKind.UPDATES,
            data={"generate_query": {"generate_query": {"query_list": [question]}}},
        ),
        StreamEvent(
            event=StreamEventKind.UPDATES,
            data={
                "web_research": {
                    "web_research": {
                        "sources_gathered": [
                            {"label": "example", "url": "https://example.com"},
                        ]
                    }
                }
            },
        ),
        StreamEvent(
            event=StreamEventKind.UPDATES,
            data={"reflection": {"reflection": {"is_sufficient": True, "follow_up_queries": []}}},
        ),
        StreamEvent(
            event=StreamEventKind.UPDATES,
            data={"finalize_answer": {"finalize_answer": {"messages": [reply]}}},
        ),
        StreamEvent(
            event=StreamEventKind.VALUES,
            data={"messages": [*request.messages, reply]},
        ),
        StreamEvent(event=StreamEventKind.END),
    ]


class ScriptedTransport(StreamTransport):
    """Replays a fixed event script without any network I/O."""

    def __init__(self, script: Script | None = None, delay: float = 0.0) -> None:
        self._script: Script = script if script is not None else default_script
        self._delay = delay
        self._stopped = False
        self.requests: list[SessionRequest] = []

    def name(self) -> str:
        return "scripted"

    async def stream(self, request: SessionRequest) -> AsyncIterator[StreamEvent]:
        self._stopped = False
        self.requests.append(request)
        events = self._script(request) if callable(self._script) else list(self._script)
        for event in events:
            if self._delay:
                await asyncio.sleep(self._delay)
            if self._stopped:
                return
            yield event

    async def stop(self) -> None:
        self._stopped = True
