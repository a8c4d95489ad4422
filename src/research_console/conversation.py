"""Conversation state — the ordered message list shared with the remote agent."""

from __future__ import annotations

import uuid
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MessageRole(StrEnum):
    """Role tag carried in the ``type`` field of a wire message."""

    HUMAN = "human"
    ASSISTANT = "ai"
    SYSTEM = "system"
    TOOL = "tool"


class Message(BaseModel):
    """Single message in the conversation.

    Human messages get a locally generated id at submission time; assistant
    ids are assigned by the remote side and may be missing while the message
    is still being streamed.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    role: MessageRole = Field(alias="type")
    content: Any = ""
    id: str | None = None

    @property
    def text(self) -> str:
        """Plain-text view of ``content`` (content blocks are concatenated)."""
        if isinstance(self.content, str):
            return self.content
        if isinstance(self.content, list):
            parts = [
                block.get("text", "") if isinstance(block, dict) else str(block)
                for block in self.content
            ]
            return "".join(parts)
        return str(self.content)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


def _new_message_id() -> str:
    return uuid.uuid4().hex


class Conversation:
    """Ordered message history for the current session."""

    def __init__(self) -> None:
        self._messages: list[Message] = []

    @property
    def messages(self) -> list[Message]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def add_human_message(self, content: str) -> Message:
        message = Message(role=MessageRole.HUMAN, content=content, id=_new_message_id())
        self._messages.append(message)
        return message

    def replace(self, messages: list[Message]) -> None:
        """Adopt the authoritative message list reported by the remote side."""
        self._messages = list(messages)

    def last(self) -> Message | None:
        return self._messages[-1] if self._messages else None

    def to_wire(self) -> list[dict[str, Any]]:
        return [m.to_wire() for m in self._messages]

    def clear(self) -> None:
        self._messages.clear()
