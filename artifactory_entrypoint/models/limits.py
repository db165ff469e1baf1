"""
Pydantic models for the result of the resource-limit check.
"""

from enum import Enum

from pydantic import BaseModel


class LimitStatus(str, Enum):
    OK = "ok"
    LOW = "low"
    TOO_LOW = "too_low"


class LimitCheck(BaseModel):
    """Outcome of comparing one soft limit against its thresholds."""

    name: str
    current: int | None  # None means unlimited
    recommended: int
    minimum: int | None = None
    status: LimitStatus

    @property
    def display_value(self) -> str:
        return "unlimited" if self.current is None else str(self.current)
