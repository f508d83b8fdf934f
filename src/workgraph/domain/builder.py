"""Step-wise construction of finished vertex values."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TypeVar
from uuid import UUID

from workgraph.domain.timeline import Timeline
from workgraph.domain.vertices import (
    REQUIRED_ATTRIBUTES,
    VERTEX_ATTRIBUTES,
    VERTEX_TYPES,
    Epic,
    Project,
    Spec,
    Tasks,
    UserStory,
    VertexKind,
    WorkItem,
)
from workgraph.errors import VertexBuildError

_T = TypeVar("_T", bound=WorkItem)


@dataclass(slots=True)
class VertexBuilder:
    """Collects candidate field values, then builds one vertex kind.

    Each ``build_*`` call checks the fields that kind requires and fails with
    :class:`~workgraph.errors.VertexBuildError` naming the first missing one.
    Values the kind does not carry are ignored.
    """

    id: UUID | None = None
    name: str | None = None
    link: str | None = None
    timeline: Timeline | None = None
    owner: str | None = None
    points: int | None = None
    participants: set[str] | None = None

    def with_id(self, vertex_id: UUID) -> VertexBuilder:
        self.id = vertex_id
        return self

    def with_name(self, name: str) -> VertexBuilder:
        self.name = name
        return self

    def with_link(self, link: str) -> VertexBuilder:
        self.link = link
        return self

    def with_timeline(self, timeline: Timeline) -> VertexBuilder:
        self.timeline = timeline
        return self

    def with_owner(self, owner: str) -> VertexBuilder:
        self.owner = owner
        return self

    def with_points(self, points: int) -> VertexBuilder:
        self.points = points
        return self

    def with_participants(self, participants: Iterable[str]) -> VertexBuilder:
        self.participants = set(participants)
        return self

    def build(self, kind: VertexKind | str) -> WorkItem:
        resolved = VertexKind(kind)
        vertex_type = VERTEX_TYPES[resolved]
        label = vertex_type.__name__

        for attribute in REQUIRED_ATTRIBUTES[resolved]:
            if getattr(self, attribute) is None:
                raise VertexBuildError(label, attribute)

        kwargs: dict[str, object] = {}
        for attribute in sorted(VERTEX_ATTRIBUTES[resolved]):
            value = getattr(self, attribute)
            if value is None:
                continue
            kwargs[attribute] = set(value) if isinstance(value, set) else value
        return vertex_type(**kwargs)  # type: ignore[arg-type]

    def build_spec(self) -> Spec:
        return self._build_typed(VertexKind.SPEC, Spec)

    def build_project(self) -> Project:
        return self._build_typed(VertexKind.PROJECT, Project)

    def build_epic(self) -> Epic:
        return self._build_typed(VertexKind.EPIC, Epic)

    def build_user_story(self) -> UserStory:
        return self._build_typed(VertexKind.USER_STORY, UserStory)

    def build_tasks(self) -> Tasks:
        return self._build_typed(VertexKind.TASKS, Tasks)

    def _build_typed(self, kind: VertexKind, expected: type[_T]) -> _T:
        built = self.build(kind)
        if not isinstance(built, expected):
            raise TypeError(f"expected {expected.__name__}, built {type(built).__name__}")
        return built


__all__ = ["VertexBuilder"]
