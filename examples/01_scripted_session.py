#!/usr/bin/env python3
"""01_scripted_session.py — offline research turn with a live activity timeline.

Replays a canned agent run through the SessionController and prints the
timeline entries as they arrive, then the archived activity for the answer.

Prerequisites:
    pip install -e .

Usage:
    python examples/01_scripted_session.py
"""

from __future__ import annotations

import asyncio

from research_console import ScriptedTransport, SessionController, TimelineEntry


def show(entry: TimelineEntry) -> None:
    print(f"  [{entry.title}] {entry.data}")


async def main() -> None:
    # ------------------------------------------------------------------
    # 1. Wire a controller to the offline transport.
    #    ScriptedTransport imitates one low-effort research loop.
    # ------------------------------------------------------------------
    controller = SessionController(ScriptedTransport(delay=0.2), on_entry=show)

    # ------------------------------------------------------------------
    # 2. Submit a question. Effort "low" means 1 query and 1 loop.
    # ------------------------------------------------------------------
    question = "What is retrieval-augmented generation?"
    print(f"Question: {question}")
    await controller.submit(question, "low", "gemini-2.0-flash")
    await controller.wait()

    # ------------------------------------------------------------------
    # 3. The finished turn is archived under the assistant message id.
    # ------------------------------------------------------------------
    answer = controller.messages[-1]
    print()
    print(f"Answer ({answer.id}): {answer.text}")
    print(f"Archived entries: {len(controller.lookup(answer.id or ''))}")
    print(f"Session: {controller.summary()}")


if __name__ == "__main__":
    asyncio.run(main())
