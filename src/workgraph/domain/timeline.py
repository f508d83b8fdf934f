"""Timeline attachment carried by project, epic, user-story and task vertices.

The graph treats a :class:`Timeline` as an opaque attribute. The only logic
here is the coarse :class:`Duration` classification: a span is reported in
hours, days, or weeks, always rounded up to the next whole unit.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Final

from workgraph.domain.models import (
    CanonicalModel,
    _as_datetime,
    _as_enum,
    _as_int,
    _expect_object,
    _fail,
)

SECONDS_PER_HOUR: Final[int] = 3600
SECONDS_PER_DAY: Final[int] = 24 * SECONDS_PER_HOUR
SECONDS_PER_WEEK: Final[int] = 7 * SECONDS_PER_DAY


class DurationUnit(StrEnum):
    HOURS = "hours"
    DAYS = "days"
    WEEKS = "weeks"


_UNIT_SECONDS: Final[dict[DurationUnit, int]] = {
    DurationUnit.HOURS: SECONDS_PER_HOUR,
    DurationUnit.DAYS: SECONDS_PER_DAY,
    DurationUnit.WEEKS: SECONDS_PER_WEEK,
}


@dataclass(slots=True)
class Duration(CanonicalModel):
    unit: DurationUnit
    amount: int

    def __post_init__(self) -> None:
        self.unit = _as_enum(DurationUnit, self.unit, "Duration.unit")
        self.amount = _as_int(self.amount, "Duration.amount")

    @classmethod
    def hours(cls, amount: int) -> Duration:
        return cls(DurationUnit.HOURS, amount)

    @classmethod
    def days(cls, amount: int) -> Duration:
        return cls(DurationUnit.DAYS, amount)

    @classmethod
    def weeks(cls, amount: int) -> Duration:
        return cls(DurationUnit.WEEKS, amount)

    @classmethod
    def from_timedelta(cls, delta: timedelta) -> Duration:
        """Classify ``delta`` into the coarsest unit it exceeds, rounding up.

        The delta is first truncated toward zero to whole seconds. Spans longer
        than a week are counted in weeks, longer than a day in days, and
        anything else in hours. The sign of ``delta`` is preserved.
        """
        if not isinstance(delta, timedelta):
            _fail("Duration", f"expected timedelta, got {type(delta).__name__}")

        total_us = (delta.days * SECONDS_PER_DAY + delta.seconds) * 1_000_000 + delta.microseconds
        if total_us == 0:
            return cls.hours(0)

        sign = -1 if total_us < 0 else 1
        secs = abs(total_us) // 1_000_000

        for unit in (DurationUnit.WEEKS, DurationUnit.DAYS):
            size = _UNIT_SECONDS[unit]
            if secs > size:
                return cls(unit, sign * _ceil_div(secs, size))
        return cls(DurationUnit.HOURS, sign * _ceil_div(secs, SECONDS_PER_HOUR))

    @classmethod
    def between(cls, start: datetime, end: datetime) -> Duration:
        return cls.from_timedelta(end - start)

    def to_timedelta(self) -> timedelta:
        return timedelta(seconds=self.amount * _UNIT_SECONDS[self.unit])

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Duration:
        parsed = _expect_object(data, "Duration", required={"unit", "amount"})
        return cls(
            unit=_as_enum(DurationUnit, parsed["unit"], "Duration.unit"),
            amount=_as_int(parsed["amount"], "Duration.amount"),
        )


@dataclass(slots=True)
class Timeline(CanonicalModel):
    start: datetime
    end: datetime | None = None
    duration: Duration | None = None

    def __post_init__(self) -> None:
        self.start = _as_datetime(self.start, "Timeline.start")
        if self.end is not None:
            self.end = _as_datetime(self.end, "Timeline.end")
        if self.duration is not None and not isinstance(self.duration, Duration):
            _fail("Timeline.duration", f"expected Duration, got {type(self.duration).__name__}")

    @classmethod
    def from_start_end(cls, start: datetime, end: datetime) -> Timeline:
        start_at = _as_datetime(start, "Timeline.start")
        end_at = _as_datetime(end, "Timeline.end")
        return cls(start=start_at, end=end_at, duration=Duration.between(start_at, end_at))

    @classmethod
    def from_start_duration(cls, start: datetime, duration: Duration) -> Timeline:
        start_at = _as_datetime(start, "Timeline.start")
        return cls(start=start_at, end=start_at + duration.to_timedelta(), duration=duration)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Timeline:
        parsed = _expect_object(data, "Timeline", required={"start"}, optional={"end", "duration"})
        raw_end = parsed.get("end")
        raw_duration = parsed.get("duration")
        return cls(
            start=_as_datetime(parsed["start"], "Timeline.start"),
            end=None if raw_end is None else _as_datetime(raw_end, "Timeline.end"),
            duration=None if raw_duration is None else Duration.from_dict(_as_mapping(raw_duration)),
        )


def _as_mapping(value: object) -> Mapping[str, object]:
    if not isinstance(value, Mapping):
        _fail("Timeline.duration", f"expected object, got {type(value).__name__}")
    return value


def _ceil_div(value: int, size: int) -> int:
    return (value + size - 1) // size


__all__ = [
    "SECONDS_PER_DAY",
    "SECONDS_PER_HOUR",
    "SECONDS_PER_WEEK",
    "Duration",
    "DurationUnit",
    "Timeline",
]
