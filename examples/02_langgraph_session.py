#!/usr/bin/env python3
"""02_langgraph_session.py — research turn against a running LangGraph server.

The server URL comes from RESEARCH_API_URL (or RESEARCH_DEV=1 for the
local dev server on port 2024).

Prerequisites:
    - the research agent served by ``langgraph dev`` or a deployment
    - pip install -e .

Usage:
    RESEARCH_DEV=1 python examples/02_langgraph_session.py "What is X?"
"""

from __future__ import annotations

import asyncio
import logging
import sys

from research_console import SessionConfig, SessionController, TransportFactory


async def main(question: str) -> None:
    config = SessionConfig.from_env()
    transport = TransportFactory.create(config)
    print(f"Transport: {TransportFactory.describe(transport)}")

    controller = SessionController(
        transport,
        on_entry=lambda entry: print(f"  {entry.title}: {entry.data}"),
    )
    await controller.submit(question, config.default_effort, config.default_model)
    await controller.wait()

    if controller.last_error:
        print(f"Run failed: {controller.last_error}")
        return

    answer = controller.messages[-1]
    print()
    print(answer.text)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main(" ".join(sys.argv[1:]) or "What is LangGraph?"))
