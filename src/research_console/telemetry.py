"""OpenTelemetry tracing integration for research-console.

Provides turn-level tracing with support for stdout, OTLP, and noop exporters.
"""

from __future__ import annotations

import contextlib
from collections.abc import Generator, Iterable
from dataclasses import dataclass
from typing import Any

from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import NoOpTracer, Span, Tracer

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass
class TelemetryConfig:
    """Configuration for the research-console tracing subsystem."""

    service_name: str = "research-console"
    enabled: bool = True
    exporter: str = "none"  # "stdout" | "otlp" | "none"
    otlp_endpoint: str = "http://localhost:4317"


# ---------------------------------------------------------------------------
# SessionTracer
# ---------------------------------------------------------------------------


class SessionTracer:
    """Central tracer for the session controller.

    Wraps OpenTelemetry ``TracerProvider`` setup and provides helpers for
    creating spans and recording events.
    """

    def __init__(self, config: TelemetryConfig | None = None) -> None:
        self._config = config or TelemetryConfig()
        self._provider: TracerProvider | None = None
        self._tracer: Tracer = NoOpTracer()

    @property
    def config(self) -> TelemetryConfig:
        return self._config

    # -- lifecycle -----------------------------------------------------------

    def init(self) -> None:
        """Set up the OTel TracerProvider based on config."""
        cfg = self._config

        if not cfg.enabled or cfg.exporter == "none":
            return

        resource = Resource.create({"service.name": cfg.service_name})

        if cfg.exporter == "stdout":
            from opentelemetry.sdk.trace.export import (
                ConsoleSpanExporter,
                SimpleSpanProcessor,
            )

            provider = TracerProvider(resource=resource)
            provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
            self._provider = provider
            self._tracer = provider.get_tracer(cfg.service_name)

        elif cfg.exporter == "otlp":
            try:
                from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
                    OTLPSpanExporter,
                )
                from opentelemetry.sdk.trace.export import SimpleSpanProcessor
            except ImportError:  # pragma: no cover
                # OTLP exporter is an optional extra; keep the noop tracer.
                return

            exporter = OTLPSpanExporter(endpoint=cfg.otlp_endpoint, insecure=True)
            provider = TracerProvider(resource=resource)
            provider.add_span_processor(SimpleSpanProcessor(exporter))
            self._provider = provider
            self._tracer = provider.get_tracer(cfg.service_name)

        else:
            msg = f"Unknown exporter '{cfg.exporter}'. Valid values: none, otlp, stdout"
            raise ValueError(msg)

    # -- span helpers --------------------------------------------------------

    @contextlib.contextmanager
    def span(
        self,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> Generator[Span, None, None]:
        """Create a span as a context manager.

        Usage::

            with tracer.span("session/submit", {"effort": "low"}) as s:
                ...
        """
        with self._tracer.start_as_current_span(name) as s:
            if attributes:
                for k, v in attributes.items():
                    s.set_attribute(k, v)
            yield s

    def shutdown(self) -> None:
        """Flush pending spans and shut down the provider.

        Safe to call multiple times.
        """
        if self._provider is not None:
            self._provider.shutdown()
            self._provider = None


# ---------------------------------------------------------------------------
# Module-level singleton (lazily initialised)
# ---------------------------------------------------------------------------

_DEFAULT_TRACER: SessionTracer | None = None


def _get_default_tracer() -> SessionTracer:
    global _DEFAULT_TRACER  # noqa: PLW0603
    if _DEFAULT_TRACER is None:
        _DEFAULT_TRACER = SessionTracer()
    return _DEFAULT_TRACER


def configure_tracing(config: TelemetryConfig) -> SessionTracer:
    """Replace the default tracer with one built from *config*."""
    global _DEFAULT_TRACER  # noqa: PLW0603
    if _DEFAULT_TRACER is not None:
        _DEFAULT_TRACER.shutdown()
    tracer = SessionTracer(config)
    tracer.init()
    _DEFAULT_TRACER = tracer
    return tracer


# ---------------------------------------------------------------------------
# Convenience context managers
# ---------------------------------------------------------------------------


@contextlib.contextmanager
def trace_turn_submit(effort: str, model: str) -> Generator[Span, None, None]:
    """Trace a turn submission."""
    attrs = {"session.effort": effort, "session.model": model}
    with _get_default_tracer().span("session/submit", attrs) as s:
        yield s


@contextlib.contextmanager
def trace_update_tick(nodes: Iterable[str]) -> Generator[Span, None, None]:
    """Trace processing of one update tick."""
    attrs = {"update.nodes": ",".join(nodes)}
    with _get_default_tracer().span("session/update", attrs) as s:
        yield s


@contextlib.contextmanager
def trace_archive(message_id: str) -> Generator[Span, None, None]:
    """Trace archiving a turn's timeline."""
    with _get_default_tracer().span("timeline/archive", {"message.id": message_id}) as s:
        yield s
