"""Static compatibility table deciding which typed relationships are legal.

The table encodes the containment hierarchy
``Spec > Project > Epic > UserStory > Tasks`` plus coordination edges between
items at the same (or an adjacent) level. It is intentionally asymmetric: a
user story may block an epic, never the other way around.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Final

from workgraph.domain.vertices import VertexKind
from workgraph.planning.dependency_types import DependencyType

_SPEC = VertexKind.SPEC
_PROJECT = VertexKind.PROJECT
_EPIC = VertexKind.EPIC
_STORY = VertexKind.USER_STORY
_TASKS = VertexKind.TASKS

_CONTAINS = DependencyType.CONTAINS
_BLOCKS = DependencyType.BLOCKS
_RESOURCES = DependencyType.RESOURCES_REQUIRED_FOR

COMPATIBILITY_TABLE: Final[Mapping[tuple[VertexKind, VertexKind], frozenset[DependencyType]]] = (
    MappingProxyType(
        {
            (_SPEC, _SPEC): frozenset({_CONTAINS}),
            (_SPEC, _PROJECT): frozenset({_CONTAINS}),
            (_PROJECT, _PROJECT): frozenset({_CONTAINS, _BLOCKS, _RESOURCES}),
            (_PROJECT, _EPIC): frozenset({_CONTAINS}),
            (_PROJECT, _STORY): frozenset({_CONTAINS}),
            (_EPIC, _STORY): frozenset({_CONTAINS}),
            (_EPIC, _EPIC): frozenset({_BLOCKS, _RESOURCES}),
            (_STORY, _TASKS): frozenset({_CONTAINS}),
            (_STORY, _STORY): frozenset({_BLOCKS, _RESOURCES}),
            (_STORY, _EPIC): frozenset({_BLOCKS}),
            (_TASKS, _TASKS): frozenset({_BLOCKS, _RESOURCES}),
            (_TASKS, _STORY): frozenset({_RESOURCES}),
        }
    )
)


def allowed_dependency_types(
    source_kind: VertexKind | str, target_kind: VertexKind | str
) -> frozenset[DependencyType]:
    """Return every relationship kind permitted from ``source_kind`` to ``target_kind``."""
    return COMPATIBILITY_TABLE.get((VertexKind(source_kind), VertexKind(target_kind)), frozenset())


def is_valid_connection(
    source_kind: VertexKind | str,
    target_kind: VertexKind | str,
    dependency_type: DependencyType | str,
) -> bool:
    """Whether ``source_kind -> target_kind`` labelled ``dependency_type`` is legal."""
    return DependencyType(dependency_type) in allowed_dependency_types(source_kind, target_kind)


__all__ = [
    "COMPATIBILITY_TABLE",
    "allowed_dependency_types",
    "is_valid_connection",
]
