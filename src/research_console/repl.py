"""Interactive console for a research session."""

from __future__ import annotations

import asyncio
import logging
import sys

from .config import KNOWN_MODELS, SessionConfig
from .conversation import MessageRole
from .effort import ConfigurationError, resolve_effort
from .session import SessionBusyError, SessionController
from .telemetry import configure_tracing
from .timeline import TimelineEntry
from .transport_factory import TransportFactory

_HELP = """\
Commands:
  /effort <low|medium|high>   set research effort for the next turn
  /model <name>               set the reasoning model for the next turn
  /history                    list archived activity per assistant message
  /status                     show session state
  /cancel                     abort the current turn and reset the session
  quit | exit                 leave the console
Anything else is submitted as a question."""


def _print_entry(entry: TimelineEntry) -> None:
    print(f"  * {entry.title}: {entry.data}")


class ConsoleSession:
    """Binds a :class:`SessionController` to terminal input and output."""

    def __init__(self, config: SessionConfig) -> None:
        self.config = config
        self.effort = config.default_effort
        self.model = config.default_model
        self._reported_error: str | None = None
        self.transport = TransportFactory.create(config)
        self.controller = SessionController(
            self.transport,
            on_entry=_print_entry,
            on_archive=self._print_answer,
        )

    def _print_answer(self, message_id: str, entries: list[TimelineEntry]) -> None:
        answer = next(
            (m for m in reversed(self.controller.messages) if m.id == message_id),
            None,
        )
        if answer is not None:
            print()
            print(answer.text)
        print(f"  ({len(entries)} activity entries archived for {message_id})")

    def _print_history(self) -> None:
        history = self.controller.history
        if not history:
            print("  No archived activity yet")
            return
        for message in self.controller.messages:
            if message.role != MessageRole.ASSISTANT or message.id not in history:
                continue
            print(f"  [{message.id}]")
            for entry in history[message.id]:
                print(f"    - {entry.title}: {entry.data}")

    def _print_status(self) -> None:
        for key, value in self.controller.summary().items():
            print(f"  {key}: {value}")
        print(f"  effort: {self.effort}")
        print(f"  model: {self.model}")
        print(f"  transport: {TransportFactory.describe(self.transport)}")

    async def handle_command(self, line: str) -> bool:
        """Handle one console line. Returns ``False`` when the console should exit."""
        if line in ("quit", "exit"):
            return False
        command, _, arg = line.partition(" ")
        arg = arg.strip()

        if command == "/help":
            print(_HELP)
        elif command == "/effort":
            try:
                resolve_effort(arg)
            except ConfigurationError as exc:
                print(f"  {exc}")
            else:
                self.effort = arg
                print(f"  Effort set to {arg}")
        elif command == "/model":
            if not arg:
                print(f"  Known models: {', '.join(KNOWN_MODELS)}")
            else:
                self.model = arg
                print(f"  Model set to {arg}")
        elif command == "/history":
            self._print_history()
        elif command == "/status":
            self._print_status()
        elif command == "/cancel":
            await self.controller.cancel()
            print("  Session reset")
        elif command.startswith("/"):
            print(f"  Unknown command {command}; type /help")
        else:
            await self._submit(line)
        return True

    async def _submit(self, text: str) -> None:
        try:
            await self.controller.submit(text, self.effort, self.model)
        except SessionBusyError:
            print("  Still researching; wait for the answer or /cancel")
            return
        except ConfigurationError as exc:
            print(f"  {exc}")

    async def run(self) -> None:
        print("Research console")
        print(f"Transport: {TransportFactory.describe(self.transport)}")
        print(f"Effort: {self.effort}  Model: {self.model}")
        print("Type /help for commands")
        print()

        while True:
            try:
                line = await asyncio.to_thread(input, "research> ")
            except (EOFError, KeyboardInterrupt):
                print("\nBye!")
                break
            stripped = line.strip()
            if not stripped:
                continue
            if not await self.handle_command(stripped):
                print("Bye!")
                break

            error = self.controller.last_error
            if error and error != self._reported_error:
                print(f"  Error: {error}")
            self._reported_error = error

        await self.controller.cancel()


def main() -> None:
    """Entry point for the ``research-console`` command."""
    try:
        config = SessionConfig.from_env()
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        raise SystemExit(2) from exc

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        console = ConsoleSession(config)
        tracer = configure_tracing(config.telemetry)
    except ValueError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        raise SystemExit(2) from exc

    try:
        asyncio.run(console.run())
    finally:
        tracer.shutdown()


if __name__ == "__main__":
    main()
