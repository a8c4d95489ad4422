"""Event processor — turns node-keyed update ticks into timeline entries."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ValidationError

from .timeline import TimelineEntry

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Payload shapes reported by the research agent's nodes
# ---------------------------------------------------------------------------


class Source(BaseModel):
    """A citation gathered during web research."""

    label: str | None = None
    url: str | None = None


class GenerateQueryPayload(BaseModel):
    query_list: list[str]


class WebResearchPayload(BaseModel):
    sources_gathered: list[Source] | None = None


class ReflectionPayload(BaseModel):
    is_sufficient: bool
    follow_up_queries: list[str] | None = None


class PayloadKind(StrEnum):
    """Recognised payload keys, in classification priority order."""

    GENERATE_QUERY = "generate_query"
    WEB_RESEARCH = "web_research"
    REFLECTION = "reflection"
    FINALIZE_ANSWER = "finalize_answer"


@dataclass
class TickOutcome:
    """Result of processing one update tick."""

    entries: list[TimelineEntry] = field(default_factory=list)
    terminal: bool = False


# ---------------------------------------------------------------------------
# Per-kind handlers
# ---------------------------------------------------------------------------

_MAX_LABELS = 3


def _is_present(value: Any) -> bool:
    """Empty mappings and lists count as present; None, False, 0 and "" do not."""
    if isinstance(value, (Mapping, list)):
        return True
    return bool(value)


def _unique_labels(sources: list[Source], limit: int = _MAX_LABELS) -> list[str]:
    """First *limit* distinct non-empty labels, in first-seen order."""
    seen: dict[str, None] = {}
    for source in sources:
        if source.label and source.label not in seen:
            seen[source.label] = None
            if len(seen) == limit:
                break
    return list(seen)


def _generate_query_entry(raw: Any) -> TimelineEntry | None:
    payload = GenerateQueryPayload.model_validate(raw)
    if not payload.query_list:
        return None
    return TimelineEntry(
        title="Generating Search Queries",
        data=", ".join(payload.query_list),
    )


def _web_research_entry(raw: Any) -> TimelineEntry | None:
    payload = WebResearchPayload.model_validate(raw)
    sources = payload.sources_gathered or []
    labels = ", ".join(_unique_labels(sources))
    return TimelineEntry(
        title="Web Research",
        data=f"Gathered {len(sources)} sources. Related to: {labels or 'N/A'}.",
    )


def _reflection_entry(raw: Any) -> TimelineEntry | None:
    payload = ReflectionPayload.model_validate(raw)
    if payload.is_sufficient:
        return TimelineEntry(title="Reflection", data="Search successful, generating final answer.")
    follow_ups = ", ".join(payload.follow_up_queries or []) or "N/A"
    return TimelineEntry(
        title="Reflection",
        data=f"Need more information, searching for {follow_ups}",
    )


def _finalize_answer_entry(raw: Any) -> TimelineEntry | None:
    return TimelineEntry(
        title="Finalizing Answer",
        data="Composing and presenting the final answer.",
    )


_HANDLERS: dict[PayloadKind, Callable[[Any], TimelineEntry | None]] = {
    PayloadKind.GENERATE_QUERY: _generate_query_entry,
    PayloadKind.WEB_RESEARCH: _web_research_entry,
    PayloadKind.REFLECTION: _reflection_entry,
    PayloadKind.FINALIZE_ANSWER: _finalize_answer_entry,
}


# ---------------------------------------------------------------------------
# EventProcessor
# ---------------------------------------------------------------------------


class EventProcessor:
    """Classifies node payloads and formats them as timeline entries.

    Holds no state between ticks; the terminal signal is reported back in
    :class:`TickOutcome` for the caller to own.
    """

    @staticmethod
    def classify(payload: Any) -> PayloadKind | None:
        """Return the kind of *payload*, or ``None`` for unrecognised shapes."""
        if not isinstance(payload, Mapping):
            return None
        for kind in PayloadKind:
            if _is_present(payload.get(kind.value)):
                return kind
        return None

    def process_node(self, node: str, payload: Any) -> tuple[TimelineEntry | None, bool]:
        """Classify one node's payload.

        Returns the entry (or ``None``) and whether the terminal signal fired.
        """
        kind = self.classify(payload)
        if kind is None:
            logger.debug("Ignoring unrecognised payload from node %s", node)
            return None, False

        try:
            entry = _HANDLERS[kind](payload[kind.value])
        except ValidationError as exc:
            logger.debug("Malformed %s payload from node %s: %s", kind, node, exc)
            return None, False

        return entry, kind == PayloadKind.FINALIZE_ANSWER

    def process(self, update: Mapping[str, Any] | None) -> TickOutcome:
        """Process one update tick, preserving the order nodes appear in."""
        outcome = TickOutcome()
        if not isinstance(update, Mapping):
            return outcome
        for node, payload in update.items():
            entry, terminal = self.process_node(node, payload)
            if entry is not None:
                outcome.entries.append(entry)
            outcome.terminal = outcome.terminal or terminal
        return outcome
