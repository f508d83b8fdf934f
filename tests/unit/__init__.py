"""Shared deterministic builders for workgraph unit tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Final
from uuid import UUID

from workgraph.domain import Duration, Timeline, VertexBuilder, VertexKind, WorkItem, ids

BASE_TS: Final[datetime] = datetime(2026, 2, 2, 9, 0, 0, tzinfo=UTC)


def fixed_now(seed: int) -> datetime:
    return BASE_TS + timedelta(hours=seed)


def make_id(seed: int) -> UUID:
    def _provider(size: int) -> bytes:
        return seed.to_bytes(size, "big")

    return ids.generate_vertex_id(randbytes=_provider)


def make_timeline(seed: int = 0, *, days: int = 5) -> Timeline:
    return Timeline.from_start_duration(fixed_now(seed), Duration.days(days))


def make_vertex(kind: VertexKind | str, seed: int, *, name: str | None = None) -> WorkItem:
    resolved = VertexKind(kind)
    return (
        VertexBuilder()
        .with_id(make_id(seed))
        .with_name(name or f"{resolved.value}-{seed}")
        .with_timeline(make_timeline(seed))
        .build(resolved)
    )
