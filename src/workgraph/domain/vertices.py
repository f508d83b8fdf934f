"""Work-item vertex model: a closed set of kinds sharing an id and a name.

Each kind carries its own attribute set. Which attribute exists on which kind
is recorded once in :data:`VERTEX_ATTRIBUTES`; every variant-gated mutator and
the builder consult that table instead of branching per class.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import ClassVar, Final, TypeVar
from uuid import UUID

from workgraph.domain.models import (
    CanonicalModel,
    JSONValue,
    _as_enum,
    _as_int,
    _as_optional_int,
    _as_optional_str,
    _as_str,
    _as_str_set,
    _as_uuid,
    _expect_object,
    _fail,
)
from workgraph.domain.timeline import Timeline
from workgraph.errors import (
    AttributeNotFoundError,
    IdentifierLockedError,
    UnsupportedAttributeError,
)

_LOG = logging.getLogger(__name__)

TWorkItem = TypeVar("TWorkItem", bound="WorkItem")


class VertexKind(StrEnum):
    SPEC = "spec"
    PROJECT = "project"
    EPIC = "epic"
    USER_STORY = "user_story"
    TASKS = "tasks"


ATTR_ID: Final[str] = "id"
ATTR_NAME: Final[str] = "name"
ATTR_LINK: Final[str] = "link"
ATTR_OWNER: Final[str] = "owner"
ATTR_TIMELINE: Final[str] = "timeline"
ATTR_PARTICIPANTS: Final[str] = "participants"
ATTR_POINTS: Final[str] = "points"

_COMMON: Final[frozenset[str]] = frozenset({ATTR_ID, ATTR_NAME, ATTR_LINK, ATTR_OWNER})

VERTEX_ATTRIBUTES: Final[Mapping[VertexKind, frozenset[str]]] = MappingProxyType(
    {
        VertexKind.SPEC: _COMMON,
        VertexKind.PROJECT: _COMMON | {ATTR_TIMELINE, ATTR_PARTICIPANTS},
        VertexKind.EPIC: _COMMON | {ATTR_TIMELINE, ATTR_POINTS, ATTR_PARTICIPANTS},
        VertexKind.USER_STORY: _COMMON | {ATTR_TIMELINE, ATTR_POINTS},
        VertexKind.TASKS: _COMMON | {ATTR_TIMELINE, ATTR_POINTS},
    }
)

REQUIRED_ATTRIBUTES: Final[Mapping[VertexKind, tuple[str, ...]]] = MappingProxyType(
    {
        VertexKind.SPEC: (ATTR_ID, ATTR_NAME),
        VertexKind.PROJECT: (ATTR_ID, ATTR_NAME),
        VertexKind.EPIC: (ATTR_ID, ATTR_NAME, ATTR_TIMELINE),
        VertexKind.USER_STORY: (ATTR_ID, ATTR_NAME, ATTR_TIMELINE),
        VertexKind.TASKS: (ATTR_ID, ATTR_NAME, ATTR_TIMELINE),
    }
)


@dataclass(slots=True, kw_only=True)
class WorkItem(CanonicalModel):
    """Fields and mutators shared by every vertex kind."""

    kind: ClassVar[VertexKind]

    id: UUID
    name: str
    link: str | None = None
    owner: str | None = None
    _owned: bool = field(default=False, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        label = type(self).__name__
        self.id = _as_uuid(self.id, f"{label}.id")
        self.name = _as_str(self.name, f"{label}.name")
        self.link = _as_optional_str(self.link, f"{label}.link")
        self.owner = _as_optional_str(self.owner, f"{label}.owner")

        if self.supports(ATTR_TIMELINE):
            timeline = getattr(self, ATTR_TIMELINE)
            if timeline is None and ATTR_TIMELINE in REQUIRED_ATTRIBUTES[self.kind]:
                _fail(f"{label}.timeline", "is required")
            if timeline is not None and not isinstance(timeline, Timeline):
                _fail(f"{label}.timeline", f"expected Timeline, got {type(timeline).__name__}")
        if self.supports(ATTR_POINTS):
            points = _as_optional_int(getattr(self, ATTR_POINTS), f"{label}.points", minimum=0)
            setattr(self, ATTR_POINTS, points)
        if self.supports(ATTR_PARTICIPANTS):
            raw = getattr(self, ATTR_PARTICIPANTS)
            if raw is not None:
                setattr(self, ATTR_PARTICIPANTS, _as_str_set(raw, f"{label}.participants"))

    @classmethod
    def supports(cls, attribute: str) -> bool:
        """Whether this vertex kind carries ``attribute``."""
        return attribute in VERTEX_ATTRIBUTES[cls.kind]

    @property
    def is_owned(self) -> bool:
        """True once a graph has taken ownership of this vertex value."""
        return self._owned

    def identifier(self) -> UUID:
        return self.id

    def set_id(self, new_id: UUID | str) -> None:
        """Change the identifier of a detached vertex."""
        if self._owned:
            raise IdentifierLockedError(self.id)
        self.id = _as_uuid(new_id, f"{type(self).__name__}.id")

    def set_name(self, new_name: str) -> None:
        self.name = _as_str(new_name, f"{type(self).__name__}.name")

    def set_link(self, new_link: str) -> None:
        self.link = _as_str(new_link, f"{type(self).__name__}.link")

    def set_owner(self, new_owner: str) -> None:
        self.owner = _as_str(new_owner, f"{type(self).__name__}.owner")

    def set_timeline(self, new_timeline: Timeline) -> None:
        """Store ``new_timeline``; kinds without a timeline ignore the call."""
        if not isinstance(new_timeline, Timeline):
            _fail(
                f"{type(self).__name__}.timeline",
                f"expected Timeline, got {type(new_timeline).__name__}",
            )
        if not self.supports(ATTR_TIMELINE):
            _LOG.debug(
                "timeline ignored for vertex kind without a timeline",
                extra={"vertex_id": str(self.id), "kind": self.kind.value},
            )
            return
        setattr(self, ATTR_TIMELINE, new_timeline)

    def add_participant(self, participant: str) -> None:
        self._require(ATTR_PARTICIPANTS)
        name = _as_str(participant, f"{type(self).__name__}.participants[]")
        participants: set[str] | None = getattr(self, ATTR_PARTICIPANTS)
        if participants is None:
            participants = set()
            setattr(self, ATTR_PARTICIPANTS, participants)
        participants.add(name)

    def remove_participant(self, participant: str) -> None:
        self._require(ATTR_PARTICIPANTS)
        name = _as_str(participant, f"{type(self).__name__}.participants[]")
        participants: set[str] | None = getattr(self, ATTR_PARTICIPANTS)
        if participants is None or name not in participants:
            raise AttributeNotFoundError(ATTR_PARTICIPANTS, name)
        participants.remove(name)

    def set_points(self, new_points: int) -> None:
        self._require(ATTR_POINTS)
        points = _as_int(new_points, f"{type(self).__name__}.points", minimum=0)
        setattr(self, ATTR_POINTS, points)

    def detached_copy(self: TWorkItem) -> TWorkItem:
        """Return a deep copy that no graph owns."""
        duplicate = copy.deepcopy(self)
        duplicate._owned = False
        return duplicate

    def to_dict(self) -> dict[str, JSONValue]:
        payload = CanonicalModel.to_dict(self)
        payload["kind"] = self.kind.value
        return payload

    @classmethod
    def from_dict(cls: type[TWorkItem], data: Mapping[str, object]) -> TWorkItem:
        path = cls.__name__
        required = set(REQUIRED_ATTRIBUTES[cls.kind])
        optional = (set(VERTEX_ATTRIBUTES[cls.kind]) - required) | {"kind"}
        parsed = _expect_object(data, path, required=required, optional=optional)

        if "kind" in parsed:
            declared = _as_enum(VertexKind, parsed["kind"], f"{path}.kind")
            if declared is not cls.kind:
                _fail(f"{path}.kind", f"expected {cls.kind.value!r}, got {declared.value!r}")

        kwargs: dict[str, object] = {}
        for attribute in sorted(VERTEX_ATTRIBUTES[cls.kind]):
            raw = parsed.get(attribute)
            if raw is None:
                if attribute in required:
                    _fail(f"{path}.{attribute}", "is required")
                continue
            if attribute == ATTR_TIMELINE:
                if not isinstance(raw, Mapping):
                    _fail(f"{path}.timeline", f"expected object, got {type(raw).__name__}")
                kwargs[attribute] = Timeline.from_dict(raw)
            else:
                kwargs[attribute] = raw
        return cls(**kwargs)  # type: ignore[arg-type]

    def _mark_owned(self) -> None:
        self._owned = True

    def _require(self, attribute: str) -> None:
        if not self.supports(attribute):
            raise UnsupportedAttributeError(self.kind.value, attribute)


@dataclass(slots=True, kw_only=True)
class Spec(WorkItem):
    kind: ClassVar[VertexKind] = VertexKind.SPEC


@dataclass(slots=True, kw_only=True)
class Project(WorkItem):
    kind: ClassVar[VertexKind] = VertexKind.PROJECT

    timeline: Timeline | None = None
    participants: set[str] | None = None


@dataclass(slots=True, kw_only=True)
class Epic(WorkItem):
    kind: ClassVar[VertexKind] = VertexKind.EPIC

    timeline: Timeline
    points: int | None = None
    participants: set[str] | None = None


@dataclass(slots=True, kw_only=True)
class UserStory(WorkItem):
    kind: ClassVar[VertexKind] = VertexKind.USER_STORY

    timeline: Timeline
    points: int | None = None


@dataclass(slots=True, kw_only=True)
class Tasks(WorkItem):
    kind: ClassVar[VertexKind] = VertexKind.TASKS

    timeline: Timeline
    points: int | None = None


Vertex = Spec | Project | Epic | UserStory | Tasks

VERTEX_TYPES: Final[Mapping[VertexKind, type[WorkItem]]] = MappingProxyType(
    {
        VertexKind.SPEC: Spec,
        VertexKind.PROJECT: Project,
        VertexKind.EPIC: Epic,
        VertexKind.USER_STORY: UserStory,
        VertexKind.TASKS: Tasks,
    }
)


def vertex_from_dict(data: Mapping[str, object]) -> WorkItem:
    """Rebuild a vertex from its ``kind``-tagged canonical form."""
    if not isinstance(data, Mapping):
        _fail("Vertex", f"expected object, got {type(data).__name__}")
    if "kind" not in data:
        _fail("Vertex", "missing required fields: ['kind']")
    kind = _as_enum(VertexKind, data["kind"], "Vertex.kind")
    return VERTEX_TYPES[kind].from_dict(data)


__all__ = [
    "REQUIRED_ATTRIBUTES",
    "VERTEX_ATTRIBUTES",
    "VERTEX_TYPES",
    "Epic",
    "Project",
    "Spec",
    "Tasks",
    "UserStory",
    "Vertex",
    "VertexKind",
    "WorkItem",
    "vertex_from_dict",
]
