"""Effort policy — maps a coarse effort selector to research parameters."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class ConfigurationError(ValueError):
    """Raised when a session setting is outside its allowed set."""


class EffortLevel(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class EffortConfig(BaseModel):
    """Concrete research parameters for one submitted turn."""

    model_config = ConfigDict(frozen=True)

    query_count: int
    loop_count: int


_EFFORT_TABLE: dict[EffortLevel, EffortConfig] = {
    EffortLevel.LOW: EffortConfig(query_count=1, loop_count=1),
    EffortLevel.MEDIUM: EffortConfig(query_count=3, loop_count=3),
    EffortLevel.HIGH: EffortConfig(query_count=5, loop_count=10),
}


def resolve_effort(selector: str | EffortLevel) -> EffortConfig:
    """Return the :class:`EffortConfig` for *selector*.

    Raises:
        ConfigurationError: If *selector* is not ``low``, ``medium`` or ``high``.
    """
    try:
        level = EffortLevel(selector)
    except ValueError:
        valid = ", ".join(e.value for e in EffortLevel)
        msg = f"Unknown effort '{selector}'. Valid values: {valid}"
        raise ConfigurationError(msg) from None
    return _EFFORT_TABLE[level]
