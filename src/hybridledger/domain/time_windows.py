"""Rolling day windows used for activity and freshness checks."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    def __call__(self) -> datetime: ...


def utcnow() -> datetime:
    return datetime.now(UTC)


def ensure_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        raise ValueError("Window timestamps must include timezone information")
    return value.astimezone(UTC)


@dataclass(frozen=True, slots=True)
class LookbackWindow:
    """A window reaching ``days`` back from the clock's current time."""

    days: int

    def __post_init__(self) -> None:
        if self.days < 0:
            raise ValueError("Lookback days must be non-negative")

    def cutoff(self, *, clock: Clock = utcnow) -> datetime:
        return ensure_aware(clock()) - timedelta(days=self.days)


def is_within(value: datetime | None, cutoff: datetime) -> bool:
    """Inclusive check; a missing timestamp is never within a window."""

    if value is None:
        return False
    return ensure_aware(value) >= cutoff


__all__ = ["Clock", "LookbackWindow", "ensure_aware", "is_within", "utcnow"]
