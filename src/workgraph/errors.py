"""Typed failures raised by the work-item graph and its collaborators."""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID


class WorkGraphError(Exception):
    """Base exception for all workgraph failures."""

    def __init__(self, message: str, *, details: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class DuplicateIdentifierError(WorkGraphError):
    """Raised when a vertex identifier is already present in the graph."""

    def __init__(self, vertex_id: UUID) -> None:
        super().__init__(
            f"vertex {vertex_id} has already been inserted into the graph",
            details={"vertex_id": str(vertex_id)},
        )
        self.vertex_id = vertex_id


class InvalidRelationshipError(WorkGraphError):
    """Raised when the compatibility policy rejects a (kind, kind, type) triple."""

    def __init__(self, source_kind: str, target_kind: str, dependency_type: str) -> None:
        super().__init__(
            f"{source_kind} -> {target_kind} via {dependency_type} is not a valid relationship",
            details={
                "source_kind": source_kind,
                "target_kind": target_kind,
                "dependency_type": dependency_type,
            },
        )
        self.source_kind = source_kind
        self.target_kind = target_kind
        self.dependency_type = dependency_type


class UnknownVertexError(WorkGraphError):
    """Raised when an edge endpoint is not present in the graph."""

    def __init__(self, vertex_ids: Iterable[UUID]) -> None:
        missing = tuple(vertex_ids)
        rendered = ", ".join(str(item) for item in missing)
        super().__init__(
            f"vertex not found in graph: {rendered}",
            details={"vertex_ids": [str(item) for item in missing]},
        )
        self.vertex_ids = missing


class CycleError(WorkGraphError):
    """Raised when a tentative edge would close a directed cycle."""

    cycle: tuple[UUID, ...]

    def __init__(self, cycle: Iterable[UUID]) -> None:
        self.cycle = tuple(cycle)
        if not self.cycle:
            message = "connection would create a cycle"
        else:
            message = "connection would create a cycle: " + " -> ".join(
                str(item) for item in self.cycle
            )
        super().__init__(message, details={"cycle": [str(item) for item in self.cycle]})


class UnsupportedAttributeError(WorkGraphError):
    """Raised when a vertex kind does not carry the requested attribute."""

    def __init__(self, kind: str, attribute: str) -> None:
        super().__init__(
            f"{kind} vertices do not support {attribute}",
            details={"kind": kind, "attribute": attribute},
        )
        self.kind = kind
        self.attribute = attribute


class AttributeNotFoundError(WorkGraphError):
    """Raised when removing a value that the vertex does not hold."""

    def __init__(self, attribute: str, value: str) -> None:
        super().__init__(
            f"{attribute} does not contain {value!r}",
            details={"attribute": attribute, "value": value},
        )
        self.attribute = attribute
        self.value = value


class IdentifierLockedError(WorkGraphError):
    """Raised when changing the identifier of a vertex owned by a graph."""

    def __init__(self, vertex_id: UUID) -> None:
        super().__init__(
            f"vertex {vertex_id} is owned by a graph; its identifier cannot change",
            details={"vertex_id": str(vertex_id)},
        )
        self.vertex_id = vertex_id


class VertexBuildError(WorkGraphError):
    """Raised when the builder is missing a field required by the vertex kind."""

    def __init__(self, kind: str, missing_field: str) -> None:
        super().__init__(
            f"failed to build {kind}: missing {kind} {missing_field}",
            details={"kind": kind, "missing_field": missing_field},
        )
        self.kind = kind
        self.missing_field = missing_field


class GraphDocumentError(WorkGraphError):
    """Raised when a graph document cannot be read, parsed, or replayed."""


__all__ = [
    "AttributeNotFoundError",
    "CycleError",
    "DuplicateIdentifierError",
    "GraphDocumentError",
    "IdentifierLockedError",
    "InvalidRelationshipError",
    "UnknownVertexError",
    "UnsupportedAttributeError",
    "VertexBuildError",
    "WorkGraphError",
]
