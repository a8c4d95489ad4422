"""Research console — live activity timeline for a streaming research agent."""

from __future__ import annotations

__version__ = "0.1.0"

from .config import DEFAULT_MODEL, KNOWN_MODELS, SessionConfig
from .conversation import Conversation, Message, MessageRole
from .effort import ConfigurationError, EffortConfig, EffortLevel, resolve_effort
from .langgraph_transport import LangGraphTransport, SseParser
from .processor import (
    EventProcessor,
    GenerateQueryPayload,
    PayloadKind,
    ReflectionPayload,
    Source,
    TickOutcome,
    WebResearchPayload,
)
from .session import SessionBusyError, SessionController
from .telemetry import (
    SessionTracer,
    TelemetryConfig,
    configure_tracing,
    trace_archive,
    trace_turn_submit,
    trace_update_tick,
)
from .timeline import InvalidTransitionError, TimelineAggregator, TimelineEntry, TurnPhase
from .transport import (
    ScriptedTransport,
    SessionRequest,
    StreamEvent,
    StreamEventKind,
    StreamTransport,
    TransportError,
    default_script,
)
from .transport_factory import TransportFactory

__all__ = [
    "ConfigurationError",
    "Conversation",
    "DEFAULT_MODEL",
    "EffortConfig",
    "EffortLevel",
    "EventProcessor",
    "GenerateQueryPayload",
    "InvalidTransitionError",
    "KNOWN_MODELS",
    "LangGraphTransport",
    "Message",
    "MessageRole",
    "PayloadKind",
    "ReflectionPayload",
    "ScriptedTransport",
    "SessionBusyError",
    "SessionConfig",
    "SessionController",
    "SessionRequest",
    "SessionTracer",
    "Source",
    "SseParser",
    "StreamEvent",
    "StreamEventKind",
    "StreamTransport",
    "TelemetryConfig",
    "TickOutcome",
    "TimelineAggregator",
    "TimelineEntry",
    "TransportError",
    "TransportFactory",
    "TurnPhase",
    "WebResearchPayload",
    "configure_tracing",
    "default_script",
    "resolve_effort",
    "trace_archive",
    "trace_turn_submit",
    "trace_update_tick",
]
