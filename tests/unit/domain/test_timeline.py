"""Unit tests for timeline and duration classification."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from workgraph.domain import Duration, DurationUnit, Timeline


@pytest.mark.parametrize(
    ("delta", "expected"),
    [
        (timedelta(0), Duration.hours(0)),
        (timedelta(minutes=30), Duration.hours(1)),
        (timedelta(hours=5), Duration.hours(5)),
        (timedelta(days=1), Duration.hours(24)),
        (timedelta(days=1, seconds=1), Duration.days(2)),
        (timedelta(days=7), Duration.days(7)),
        (timedelta(days=8), Duration.weeks(2)),
        (timedelta(minutes=-90), Duration.hours(-2)),
        (timedelta(days=-10), Duration.weeks(-2)),
    ],
)
def test_duration_classifies_into_coarsest_exceeded_unit(
    delta: timedelta, expected: Duration
) -> None:
    assert Duration.from_timedelta(delta) == expected


def test_duration_truncates_sub_second_precision_before_rounding() -> None:
    assert Duration.from_timedelta(timedelta(hours=1, microseconds=999_999)) == Duration.hours(1)
    assert Duration.from_timedelta(timedelta(microseconds=500)) == Duration.hours(0)


def test_duration_rejects_non_timedelta_and_bad_unit() -> None:
    with pytest.raises(ValueError, match="expected timedelta"):
        Duration.from_timedelta(3600)  # type: ignore[arg-type]
    with pytest.raises(ValueError, match="Duration.unit"):
        Duration("months", 1)  # type: ignore[arg-type]


def test_timeline_from_start_end_derives_duration() -> None:
    start = datetime(2026, 3, 2, 8, 0, tzinfo=UTC)
    timeline = Timeline.from_start_end(start, start + timedelta(days=3, hours=2))

    assert timeline.duration == Duration(DurationUnit.DAYS, 4)
    assert timeline.end == start + timedelta(days=3, hours=2)


def test_timeline_from_start_duration_derives_end() -> None:
    start = datetime(2026, 3, 2, 8, 0, tzinfo=UTC)
    timeline = Timeline.from_start_duration(start, Duration.weeks(2))

    assert timeline.end == start + timedelta(weeks=2)


def test_timeline_normalizes_to_utc_and_requires_aware_datetimes() -> None:
    offset = timezone(timedelta(hours=2))
    timeline = Timeline(start=datetime(2026, 3, 2, 10, 0, tzinfo=offset))
    assert timeline.start == datetime(2026, 3, 2, 8, 0, tzinfo=UTC)
    assert timeline.start.tzinfo is UTC

    with pytest.raises(ValueError, match="timezone-aware"):
        Timeline(start=datetime(2026, 3, 2, 10, 0))


def test_timeline_canonical_dict_roundtrip() -> None:
    start = datetime(2026, 3, 2, 8, 0, tzinfo=UTC)
    timeline = Timeline.from_start_duration(start, Duration.days(3))

    payload = timeline.to_dict()
    assert payload == {
        "start": "2026-03-02T08:00:00.000000Z",
        "end": "2026-03-05T08:00:00.000000Z",
        "duration": {"unit": "days", "amount": 3},
    }
    assert type(payload["duration"]["unit"]) is str  # type: ignore[index]
    assert Timeline.from_dict(payload) == timeline
    assert Timeline.from_json(timeline.to_json()) == timeline


def test_timeline_from_dict_rejects_unknown_fields() -> None:
    with pytest.raises(ValueError, match="unexpected fields"):
        Timeline.from_dict({"start": "2026-03-02T08:00:00Z", "deadline": "soon"})


def test_timeline_rejects_timestamps_outside_the_utc_range() -> None:
    with pytest.raises(ValueError, match="Timeline.start: datetime out of range"):
        Timeline.from_dict({"start": "0001-01-01T00:00:00+05:00"})
