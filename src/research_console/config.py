"""Session configuration — defaults and environment overrides."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from .effort import ConfigurationError, EffortLevel, resolve_effort
from .telemetry import TelemetryConfig

DEV_API_URL = "http://localhost:2024"
PROD_API_URL = "http://localhost:8123"

DEFAULT_MODEL = "gemini-2.5-flash-preview-04-17"

# Reasoning models offered by the research agent
KNOWN_MODELS: tuple[str, ...] = (
    "gemini-2.0-flash",
    "gemini-2.5-flash-preview-04-17",
    "gemini-2.5-pro-preview-05-06",
)

_TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass
class SessionConfig:
    """Settings for one console session.

    Environment variables (all optional):
        ``RESEARCH_DEV`` — use the dev server URL when truthy.
        ``RESEARCH_API_URL`` — explicit server URL, overrides ``RESEARCH_DEV``.
        ``RESEARCH_ASSISTANT_ID`` — graph/assistant name on the server.
        ``RESEARCH_EFFORT`` — default effort (low | medium | high).
        ``RESEARCH_MODEL`` — default reasoning model.
        ``RESEARCH_TRANSPORT`` — langgraph | scripted.
        ``RESEARCH_TIMEOUT`` — HTTP connect timeout in seconds.
        ``RESEARCH_LOG_LEVEL`` — logging level name for the console.
        ``RESEARCH_TRACE_EXPORTER`` — none | stdout | otlp.
    """

    api_url: str = PROD_API_URL
    assistant_id: str = "agent"
    default_effort: str = EffortLevel.MEDIUM.value
    default_model: str = DEFAULT_MODEL
    transport: str = "langgraph"
    request_timeout: float = 30.0
    log_level: str = "WARNING"
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> SessionConfig:
        """Build a config from *env* (defaults to ``os.environ``).

        Raises:
            ConfigurationError: If the effort or timeout values are invalid.
        """
        env = os.environ if env is None else env

        dev = env.get("RESEARCH_DEV", "").strip().lower() in _TRUTHY
        api_url = env.get("RESEARCH_API_URL", "").strip() or (DEV_API_URL if dev else PROD_API_URL)

        effort = env.get("RESEARCH_EFFORT", "").strip().lower() or EffortLevel.MEDIUM.value
        resolve_effort(effort)

        raw_timeout = env.get("RESEARCH_TIMEOUT", "").strip()
        try:
            timeout = float(raw_timeout) if raw_timeout else 30.0
        except ValueError:
            msg = f"RESEARCH_TIMEOUT must be a number of seconds, got '{raw_timeout}'"
            raise ConfigurationError(msg) from None

        telemetry = TelemetryConfig(
            exporter=env.get("RESEARCH_TRACE_EXPORTER", "").strip().lower() or "none",
            otlp_endpoint=env.get("OTEL_EXPORTER_OTLP_ENDPOINT", "").strip()
            or TelemetryConfig.otlp_endpoint,
        )

        return cls(
            api_url=api_url,
            assistant_id=env.get("RESEARCH_ASSISTANT_ID", "").strip() or "agent",
            default_effort=effort,
            default_model=env.get("RESEARCH_MODEL", "").strip() or DEFAULT_MODEL,
            transport=env.get("RESEARCH_TRANSPORT", "").strip().lower() or "langgraph",
            request_timeout=timeout,
            log_level=env.get("RESEARCH_LOG_LEVEL", "").strip().upper() or "WARNING",
            telemetry=telemetry,
        )
