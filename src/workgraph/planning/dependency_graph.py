"""Acyclic dependency graph over work-item vertices.

The graph owns its vertices in an arena (a list whose positions never move)
and keeps an ``id -> position`` index for constant-time lookup. Outgoing edges
are stored per position as ``(target_position, DependencyType)`` pairs.

Every mutating call leaves three invariants intact: no directed cycle over any
mix of edge types, unique vertex identifiers, and edges whose
``(source kind, target kind, type)`` triple the compatibility policy permits.
The graph has no internal locking; callers sharing one across threads must
hold a single exclusive lock around each operation.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from enum import StrEnum
from uuid import UUID

from workgraph.domain import ids as domain_ids
from workgraph.domain.models import (
    SCHEMA_VERSION,
    JSONValue,
    _as_enum,
    _as_int,
    _as_sequence,
    _as_uuid,
    _expect_object,
    _fail,
)
from workgraph.domain.vertices import VertexKind, WorkItem, vertex_from_dict
from workgraph.errors import (
    CycleError,
    DuplicateIdentifierError,
    InvalidRelationshipError,
    UnknownVertexError,
)
from workgraph.planning.dependency_types import DependencyType
from workgraph.planning.policy import is_valid_connection

_LOG = logging.getLogger(__name__)

Endpoint = WorkItem | UUID | str
Dependency = tuple[UUID, DependencyType]


class CycleCheck(StrEnum):
    """How ``connect`` verifies acyclicity after the tentative edge is added.

    ``FULL`` rescans the whole graph (O(V+E) per call). ``INCREMENTAL`` only
    searches for a path from the new edge's target back to its source, which
    is sufficient because the graph was acyclic before the edge was added.
    """

    FULL = "full"
    INCREMENTAL = "incremental"


class DependencyGraph:
    """Directed acyclic graph of work items joined by typed edges."""

    __slots__ = ("_vertices", "_index", "_outgoing", "_cycle_check")

    def __init__(self, *, cycle_check: CycleCheck | str = CycleCheck.FULL) -> None:
        self._vertices: list[WorkItem] = []
        self._index: dict[UUID, int] = {}
        self._outgoing: list[list[tuple[int, DependencyType]]] = []
        self._cycle_check = CycleCheck(cycle_check)

    @classmethod
    def from_config(cls, config: Mapping[str, object]) -> DependencyGraph:
        """Create an empty graph using the ``[graph]`` section of a loaded config."""
        section = config.get("graph", {})
        if not isinstance(section, Mapping):
            raise ValueError("config section 'graph' must be an object")
        return cls(cycle_check=str(section.get("cycle_check", CycleCheck.FULL.value)))

    @property
    def cycle_check(self) -> CycleCheck:
        return self._cycle_check

    @property
    def vertices(self) -> tuple[WorkItem, ...]:
        """All vertices in insertion order."""
        return tuple(self._vertices)

    @property
    def edges(self) -> tuple[tuple[UUID, UUID, DependencyType], ...]:
        """All edges as ``(source, target, type)``, grouped by source in adjacency order."""
        ordered: list[tuple[UUID, UUID, DependencyType]] = []
        for position, outgoing in enumerate(self._outgoing):
            source_id = self._vertices[position].id
            for target, dependency_type in outgoing:
                ordered.append((source_id, self._vertices[target].id, dependency_type))
        return tuple(ordered)

    @property
    def edge_count(self) -> int:
        return sum(len(outgoing) for outgoing in self._outgoing)

    def __len__(self) -> int:
        return len(self._vertices)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, WorkItem):
            return item.id in self._index
        try:
            return domain_ids.coerce_vertex_id(item) in self._index
        except ValueError:
            return False

    def __iter__(self) -> Iterator[WorkItem]:
        return iter(tuple(self._vertices))

    def insert(self, vertex: WorkItem) -> None:
        """Add ``vertex`` to the graph.

        The graph stores and owns a copy; the identifier of the stored copy can
        no longer change. Raises ``DuplicateIdentifierError`` when a vertex with
        the same identifier is already present.
        """
        if not isinstance(vertex, WorkItem):
            raise TypeError(f"expected a vertex, got {type(vertex).__name__}")
        if vertex.id in self._index:
            _LOG.info("vertex rejected: duplicate identifier", extra={"vertex_id": str(vertex.id)})
            raise DuplicateIdentifierError(vertex.id)

        stored = vertex.detached_copy()
        stored._mark_owned()

        position = len(self._vertices)
        self._vertices.append(stored)
        self._outgoing.append([])
        self._index[stored.id] = position
        _LOG.debug(
            "vertex inserted",
            extra={"vertex_id": str(stored.id), "kind": stored.kind.value, "position": position},
        )

    def connect(
        self,
        source: Endpoint,
        target: Endpoint,
        dependency_type: DependencyType | str,
    ) -> None:
        """Add a typed edge ``source -> target``.

        Endpoints are vertex values or identifiers. When both endpoints are
        vertex values the compatibility policy is checked before existence, so
        type errors are reported even for vertices that were never inserted.

        Raises ``InvalidRelationshipError``, ``UnknownVertexError`` or
        ``CycleError``. On any failure the graph is exactly as before the call.
        """
        resolved_type = DependencyType(dependency_type)

        if isinstance(source, WorkItem) and isinstance(target, WorkItem):
            self._check_policy(source.kind, target.kind, resolved_type)

        source_id = self._endpoint_id(source)
        target_id = self._endpoint_id(target)
        missing = [item for item in dict.fromkeys((source_id, target_id)) if item not in self._index]
        if missing:
            _LOG.info(
                "edge rejected: unknown vertex",
                extra={"vertex_ids": [str(item) for item in missing]},
            )
            raise UnknownVertexError(missing)

        source_position = self._index[source_id]
        target_position = self._index[target_id]
        self._check_policy(
            self._vertices[source_position].kind,
            self._vertices[target_position].kind,
            resolved_type,
        )

        outgoing = self._outgoing[source_position]
        outgoing.append((target_position, resolved_type))

        if self._cycle_check is CycleCheck.INCREMENTAL:
            cycle = self._cycle_through(source_position, target_position)
        else:
            cycle = self._scan_for_cycle()

        if cycle is not None:
            # Parallel edges cannot close a new cycle, so the last entry is the tentative edge.
            outgoing.pop()
            cycle_ids = tuple(self._vertices[position].id for position in cycle)
            _LOG.info(
                "edge rejected: would create cycle",
                extra={
                    "source_id": str(source_id),
                    "target_id": str(target_id),
                    "dependency_type": resolved_type.value,
                    "cycle": [str(item) for item in cycle_ids],
                },
            )
            raise CycleError(cycle_ids)

        _LOG.debug(
            "edge committed",
            extra={
                "source_id": str(source_id),
                "target_id": str(target_id),
                "dependency_type": resolved_type.value,
            },
        )

    def lookup(self, vertex_id: UUID | str) -> WorkItem | None:
        """Return the stored vertex for ``vertex_id`` or ``None`` when absent."""
        position = self._index.get(domain_ids.coerce_vertex_id(vertex_id))
        if position is None:
            return None
        return self._vertices[position]

    def dependencies_of(self, vertex_id: UUID | str) -> tuple[Dependency, ...] | None:
        """Return outgoing ``(target_id, type)`` pairs in adjacency order.

        Returns ``None`` when ``vertex_id`` is not in the graph.
        """
        position = self._index.get(domain_ids.coerce_vertex_id(vertex_id))
        if position is None:
            return None
        return tuple(
            (self._vertices[target].id, dependency_type)
            for target, dependency_type in self._outgoing[position]
        )

    def find_cycle(self) -> tuple[UUID, ...] | None:
        """Scan the whole graph and return one closed cycle path, if any exists."""
        cycle = self._scan_for_cycle()
        if cycle is None:
            return None
        return tuple(self._vertices[position].id for position in cycle)

    def serialize(self) -> dict[str, JSONValue]:
        """Serialize the graph to a stable JSON-friendly mapping."""
        return {
            "schema_version": SCHEMA_VERSION,
            "vertices": [vertex.to_dict() for vertex in self._vertices],
            "edges": [
                {"source": str(source), "target": str(target), "type": dependency_type.value}
                for source, target, dependency_type in self.edges
            ],
        }

    @classmethod
    def deserialize(
        cls,
        payload: Mapping[str, object],
        *,
        cycle_check: CycleCheck | str = CycleCheck.FULL,
    ) -> DependencyGraph:
        """Rebuild a graph from :meth:`serialize` output.

        Vertices and edges are replayed through :meth:`insert` and
        :meth:`connect`, so a document that breaks any invariant is rejected
        with the same errors those calls raise.
        """
        parsed = _expect_object(
            payload,
            "DependencyGraph",
            required={"vertices"},
            optional={"schema_version", "edges"},
        )
        version = _as_int(
            parsed.get("schema_version", SCHEMA_VERSION),
            "DependencyGraph.schema_version",
            minimum=1,
        )
        if version > SCHEMA_VERSION:
            _fail(
                "DependencyGraph.schema_version",
                f"version {version} is newer than supported {SCHEMA_VERSION}",
            )

        graph = cls(cycle_check=cycle_check)
        for index, raw_vertex in enumerate(
            _as_sequence(parsed["vertices"], "DependencyGraph.vertices")
        ):
            if not isinstance(raw_vertex, Mapping):
                _fail(f"DependencyGraph.vertices[{index}]", "expected object")
            graph.insert(vertex_from_dict(raw_vertex))

        for index, raw_edge in enumerate(
            _as_sequence(parsed.get("edges", []), "DependencyGraph.edges")
        ):
            path = f"DependencyGraph.edges[{index}]"
            edge = _expect_object(raw_edge, path, required={"source", "target", "type"})
            graph.connect(
                _as_uuid(edge["source"], f"{path}.source"),
                _as_uuid(edge["target"], f"{path}.target"),
                _as_enum(DependencyType, edge["type"], f"{path}.type"),
            )
        return graph

    def _check_policy(
        self,
        source_kind: VertexKind,
        target_kind: VertexKind,
        dependency_type: DependencyType,
    ) -> None:
        if is_valid_connection(source_kind, target_kind, dependency_type):
            return
        _LOG.info(
            "edge rejected: invalid relationship",
            extra={
                "source_kind": source_kind.value,
                "target_kind": target_kind.value,
                "dependency_type": dependency_type.value,
            },
        )
        raise InvalidRelationshipError(source_kind.value, target_kind.value, dependency_type.value)

    @staticmethod
    def _endpoint_id(endpoint: Endpoint) -> UUID:
        if isinstance(endpoint, WorkItem):
            return endpoint.id
        return domain_ids.coerce_vertex_id(endpoint)

    def _scan_for_cycle(self) -> list[int] | None:
        # Iterative three-colour DFS: 0 unvisited, 1 on the current path, 2 finished.
        state = [0] * len(self._vertices)
        stack: list[int] = []
        stack_index: dict[int, int] = {}

        for start in range(len(self._vertices)):
            if state[start] != 0:
                continue

            state[start] = 1
            stack.append(start)
            stack_index[start] = 0
            frames: list[tuple[int, Iterator[tuple[int, DependencyType]]]] = [
                (start, iter(self._outgoing[start]))
            ]

            while frames:
                node, child_iter = frames[-1]

                try:
                    child, _ = next(child_iter)
                except StopIteration:
                    frames.pop()
                    state[node] = 2
                    stack.pop()
                    del stack_index[node]
                    continue

                if state[child] == 0:
                    state[child] = 1
                    stack_index[child] = len(stack)
                    stack.append(child)
                    frames.append((child, iter(self._outgoing[child])))
                    continue

                if state[child] == 1:
                    return stack[stack_index[child] :] + [child]

        return None

    def _cycle_through(self, source: int, target: int) -> list[int] | None:
        path = self._path_between(target, source)
        if path is None:
            return None
        return [source, *path]

    def _path_between(self, start: int, goal: int) -> list[int] | None:
        if start == goal:
            return [start]

        parents: dict[int, int] = {}
        visited = {start}
        pending = [start]
        while pending:
            node = pending.pop()
            for child, _ in self._outgoing[node]:
                if child in visited:
                    continue
                visited.add(child)
                parents[child] = node
                if child == goal:
                    path = [goal]
                    while path[-1] != start:
                        path.append(parents[path[-1]])
                    path.reverse()
                    return path
                pending.append(child)
        return None


__all__ = ["CycleCheck", "Dependency", "DependencyGraph", "Endpoint"]
