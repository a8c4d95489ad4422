"""Tests for the console REPL."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from research_console.config import SessionConfig
from research_console.repl import ConsoleSession, main


@pytest.fixture
def console() -> ConsoleSession:
    return ConsoleSession(SessionConfig(transport="scripted", default_effort="low"))


# ---------------------------------------------------------------------------
# ConsoleSession commands
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_question_prints_live_activity_and_answer(
    console: ConsoleSession, capsys: pytest.CaptureFixture[str]
) -> None:
    assert await console.handle_command("What is X?") is True
    await console.controller.wait()
    out = capsys.readouterr().out
    assert "* Generating Search Queries: What is X?" in out
    assert "* Finalizing Answer" in out
    assert "scripted answer to: What is X?" in out
    assert "4 activity entries archived" in out


@pytest.mark.asyncio
async def test_history_lists_archived_turns(
    console: ConsoleSession, capsys: pytest.CaptureFixture[str]
) -> None:
    await console.handle_command("/history")
    assert "No archived activity yet" in capsys.readouterr().out

    await console.handle_command("What is X?")
    await console.controller.wait()
    capsys.readouterr()
    await console.handle_command("/history")
    out = capsys.readouterr().out
    assert "[run-" in out
    assert "- Web Research: Gathered 1 sources. Related to: example." in out


@pytest.mark.asyncio
async def test_effort_command(console: ConsoleSession, capsys: pytest.CaptureFixture[str]) -> None:
    await console.handle_command("/effort high")
    assert console.effort == "high"
    await console.handle_command("/effort ludicrous")
    assert console.effort == "high"
    assert "Unknown effort" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_model_command(console: ConsoleSession, capsys: pytest.CaptureFixture[str]) -> None:
    await console.handle_command("/model")
    assert "gemini-2.0-flash" in capsys.readouterr().out
    await console.handle_command("/model gemini-2.0-flash")
    assert console.model == "gemini-2.0-flash"


@pytest.mark.asyncio
async def test_submitted_request_uses_console_settings(console: ConsoleSession) -> None:
    await console.handle_command("/effort high")
    await console.handle_command("/model gemini-2.0-flash")
    await console.handle_command("What is X?")
    await console.controller.wait()
    request = console.transport.requests[-1]  # type: ignore[attr-defined]
    assert request.initial_search_query_count == 5
    assert request.max_research_loops == 10
    assert request.reasoning_model == "gemini-2.0-flash"


@pytest.mark.asyncio
async def test_cancel_command_resets(
    console: ConsoleSession, capsys: pytest.CaptureFixture[str]
) -> None:
    await console.handle_command("What is X?")
    await console.controller.wait()
    await console.handle_command("/cancel")
    assert console.controller.history == {}
    assert "Session reset" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_status_and_unknown_commands(
    console: ConsoleSession, capsys: pytest.CaptureFixture[str]
) -> None:
    await console.handle_command("/status")
    await console.handle_command("/frobnicate")
    out = capsys.readouterr().out
    assert "phase: idle" in out
    assert "ScriptedTransport" in out
    assert "Unknown command /frobnicate" in out


@pytest.mark.asyncio
async def test_quit_returns_false(console: ConsoleSession) -> None:
    assert await console.handle_command("quit") is False
    assert await console.handle_command("exit") is False


# ---------------------------------------------------------------------------
# main()
# ---------------------------------------------------------------------------


def test_main_quit_command(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("RESEARCH_TRANSPORT", "scripted")
    with patch("builtins.input", side_effect=["quit"]):
        main()
    out = capsys.readouterr().out
    assert "Research console" in out
    assert "Bye!" in out


def test_main_eof(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setenv("RESEARCH_TRANSPORT", "scripted")
    with patch("builtins.input", side_effect=EOFError):
        main()
    assert "Bye!" in capsys.readouterr().out


def test_main_rejects_bad_effort(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RESEARCH_EFFORT", "ludicrous")
    with pytest.raises(SystemExit) as excinfo:
        main()
    assert excinfo.value.code == 2


def test_main_rejects_unknown_transport(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("RESEARCH_EFFORT", raising=False)
    monkeypatch.setenv("RESEARCH_TRANSPORT", "carrier-pigeon")
    with pytest.raises(SystemExit) as excinfo:
        main()
    assert excinfo.value.code == 2
