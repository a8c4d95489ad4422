"""Transport factory — deterministic transport selection from configuration."""

from __future__ import annotations

from .config import SessionConfig
from .langgraph_transport import LangGraphTransport
from .transport import ScriptedTransport, StreamTransport

# Valid values for SessionConfig.transport / RESEARCH_TRANSPORT
_VALID_TRANSPORTS = frozenset({"langgraph", "scripted"})


class TransportFactory:
    """Creates the stream transport named by a :class:`SessionConfig`."""

    @staticmethod
    def create(config: SessionConfig) -> StreamTransport:
        """Return the configured transport.

        Raises:
            ValueError: If ``config.transport`` is not a known transport name.
        """
        name = config.transport.strip().lower()
        if name not in _VALID_TRANSPORTS:
            msg = (
                f"Unknown transport '{config.transport}'. "
                f"Valid values for RESEARCH_TRANSPORT: {', '.join(sorted(_VALID_TRANSPORTS))}"
            )
            raise ValueError(msg)

        if name == "scripted":
            return ScriptedTransport()
        return LangGraphTransport(
            api_url=config.api_url,
            assistant_id=config.assistant_id,
            timeout=config.request_timeout,
        )

    @staticmethod
    def describe(transport: StreamTransport) -> str:
        """Return a human-readable description of a transport for REPL output."""
        if isinstance(transport, LangGraphTransport):
            return f"LangGraphTransport (url={transport.api_url})"
        if isinstance(transport, ScriptedTransport):
            return "ScriptedTransport (offline replay)"
        return type(transport).__name__
