"""Tests for TransportFactory — config-based transport selection."""

from __future__ import annotations

import pytest

from research_console.config import SessionConfig
from research_console.langgraph_transport import LangGraphTransport
from research_console.transport import ScriptedTransport
from research_console.transport_factory import TransportFactory


def test_factory_creates_langgraph_by_default():
    transport = TransportFactory.create(SessionConfig(api_url="http://agent:2024"))
    assert isinstance(transport, LangGraphTransport)
    assert transport.api_url == "http://agent:2024"
    assert transport.name() == "langgraph"


def test_factory_creates_scripted():
    transport = TransportFactory.create(SessionConfig(transport="scripted"))
    assert isinstance(transport, ScriptedTransport)


def test_factory_is_case_insensitive():
    transport = TransportFactory.create(SessionConfig(transport="  SCRIPTED "))
    assert isinstance(transport, ScriptedTransport)


def test_factory_unknown_transport_raises():
    with pytest.raises(ValueError, match="Unknown transport"):
        TransportFactory.create(SessionConfig(transport="carrier-pigeon"))


def test_describe():
    assert "http://x" in TransportFactory.describe(LangGraphTransport("http://x"))
    assert TransportFactory.describe(ScriptedTransport()) == "ScriptedTransport (offline replay)"
