"""Violation models - schedule problems surfaced to the display layer."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

# JSON-serializable value types for violation details
JsonValue = str | int | float | bool | None | dict[str, Any] | list[Any]


class ViolationSeverity(str, Enum):
    """Severity levels for schedule violations."""

    ADVISORY = "advisory"
    BLOCKING = "blocking"


class ViolationKind(str, Enum):
    """Categories of schedule checks."""

    OVERLAP = "overlap"
    OVERNIGHT = "overnight"


class Violation(BaseModel):
    """A schedule problem detected after recalculation.

    Violations never change the schedule; they are advisories for whoever
    renders the day.
    """

    kind: ViolationKind
    code: str  # Machine-usable short code, e.g., "ANCHOR_OVERLAP"
    message: str  # Human-readable description (1-2 sentences)
    severity: ViolationSeverity
    affected_activity_ids: list[str]
    details: dict[str, JsonValue] = Field(default_factory=dict)
