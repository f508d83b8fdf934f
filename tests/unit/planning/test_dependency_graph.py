"""Unit tests for planning.dependency_graph."""

from __future__ import annotations

import logging
from itertools import product

import pytest

from workgraph.domain import VertexKind
from workgraph.errors import (
    CycleError,
    DuplicateIdentifierError,
    IdentifierLockedError,
    InvalidRelationshipError,
    UnknownVertexError,
)
from workgraph.planning import CycleCheck, DependencyGraph, DependencyType, is_valid_connection

from .. import make_id, make_vertex

_MODES = [CycleCheck.FULL, CycleCheck.INCREMENTAL]
_DISALLOWED = [
    triple
    for triple in product(VertexKind, VertexKind, DependencyType)
    if not is_valid_connection(*triple)
]


def _graph_with(mode: CycleCheck, *kinds: VertexKind) -> tuple[DependencyGraph, list]:
    graph = DependencyGraph(cycle_check=mode)
    vertices = [make_vertex(kind, seed) for seed, kind in enumerate(kinds, start=1)]
    for vertex in vertices:
        graph.insert(vertex)
    return graph, vertices


@pytest.mark.parametrize("mode", _MODES)
def test_project_epics_blocks_cycle_is_rejected(mode: CycleCheck) -> None:
    graph, (project, epic_1, epic_2) = _graph_with(
        mode, VertexKind.PROJECT, VertexKind.EPIC, VertexKind.EPIC
    )

    graph.connect(project, epic_1, DependencyType.CONTAINS)
    graph.connect(project, epic_2, DependencyType.CONTAINS)
    graph.connect(epic_1, epic_2, DependencyType.BLOCKS)
    snapshot = graph.serialize()

    with pytest.raises(CycleError) as error:
        graph.connect(epic_2, epic_1, DependencyType.BLOCKS)

    cycle = error.value.cycle
    assert cycle[0] == cycle[-1]
    assert set(cycle) == {epic_1.id, epic_2.id}
    assert graph.serialize() == snapshot
    assert graph.dependencies_of(epic_2.id) == ()
    assert graph.edge_count == 3


@pytest.mark.parametrize("mode", _MODES)
def test_cycle_across_mixed_edge_types_is_rejected(mode: CycleCheck) -> None:
    graph, (story_a, story_b, tasks) = _graph_with(
        mode, VertexKind.USER_STORY, VertexKind.USER_STORY, VertexKind.TASKS
    )
    graph.connect(story_a, tasks, DependencyType.CONTAINS)
    graph.connect(tasks, story_b, DependencyType.RESOURCES_REQUIRED_FOR)

    with pytest.raises(CycleError) as error:
        graph.connect(story_b, story_a, DependencyType.BLOCKS)

    assert set(error.value.cycle) == {story_a.id, story_b.id, tasks.id}
    assert graph.find_cycle() is None


@pytest.mark.parametrize("mode", _MODES)
def test_self_loop_is_a_cycle(mode: CycleCheck) -> None:
    graph, (epic,) = _graph_with(mode, VertexKind.EPIC)

    with pytest.raises(CycleError) as error:
        graph.connect(epic, epic, DependencyType.BLOCKS)

    assert error.value.cycle == (epic.id, epic.id)
    assert graph.edge_count == 0


def test_invalid_relationship_is_checked_before_existence() -> None:
    graph = DependencyGraph()
    spec = make_vertex(VertexKind.SPEC, 1)
    tasks = make_vertex(VertexKind.TASKS, 2)

    with pytest.raises(InvalidRelationshipError) as error:
        graph.connect(spec, tasks, DependencyType.CONTAINS)

    assert (error.value.source_kind, error.value.target_kind) == ("spec", "tasks")
    assert len(graph) == 0


@pytest.mark.parametrize(("source_kind", "target_kind", "dependency_type"), _DISALLOWED)
def test_connect_rejects_every_pair_outside_the_table(
    source_kind: VertexKind, target_kind: VertexKind, dependency_type: DependencyType
) -> None:
    graph, (source, target) = _graph_with(CycleCheck.FULL, source_kind, target_kind)

    with pytest.raises(InvalidRelationshipError, match="not a valid relationship"):
        graph.connect(source, target, dependency_type)
    assert graph.edges == ()

    with pytest.raises(InvalidRelationshipError):
        graph.connect(source.id, target.id, dependency_type)
    assert graph.edges == ()


def test_invalid_relationship_by_identifier_uses_stored_kinds() -> None:
    graph, (spec, tasks) = _graph_with(CycleCheck.FULL, VertexKind.SPEC, VertexKind.TASKS)

    with pytest.raises(InvalidRelationshipError):
        graph.connect(spec.id, str(tasks.id), "contains")
    assert graph.edge_count == 0


def test_unknown_endpoints_are_reported() -> None:
    graph, (project,) = _graph_with(CycleCheck.FULL, VertexKind.PROJECT)
    stray = make_vertex(VertexKind.EPIC, 99)

    with pytest.raises(UnknownVertexError) as error:
        graph.connect(project, stray, DependencyType.CONTAINS)
    assert error.value.vertex_ids == (stray.id,)

    with pytest.raises(UnknownVertexError) as error:
        graph.connect(make_id(50), make_id(51), DependencyType.BLOCKS)
    assert error.value.vertex_ids == (make_id(50), make_id(51))
    assert graph.edge_count == 0


def test_duplicate_identifier_is_rejected_without_side_effects() -> None:
    graph, (epic,) = _graph_with(CycleCheck.FULL, VertexKind.EPIC)
    impostor = make_vertex(VertexKind.TASKS, 1, name="impostor")

    with pytest.raises(DuplicateIdentifierError) as error:
        graph.insert(impostor)

    assert error.value.vertex_id == epic.id
    assert len(graph) == 1
    stored = graph.lookup(epic.id)
    assert stored is not None and stored.name == epic.name


def test_lookup_is_idempotent_and_returns_none_when_absent() -> None:
    graph, (story,) = _graph_with(CycleCheck.FULL, VertexKind.USER_STORY)

    first = graph.lookup(story.id)
    second = graph.lookup(str(story.id))
    assert first is second
    assert first == story
    assert graph.lookup(make_id(404)) is None
    assert graph.dependencies_of(make_id(404)) is None


def test_graph_owns_a_copy_and_locks_its_identifier() -> None:
    graph, (tasks,) = _graph_with(CycleCheck.FULL, VertexKind.TASKS)

    tasks.set_name("edited outside")
    tasks.set_id(make_id(77))
    stored = graph.lookup(make_id(1))
    assert stored is not None
    assert stored.name == "tasks-1"
    assert stored.is_owned

    with pytest.raises(IdentifierLockedError):
        stored.set_id(make_id(78))
    assert graph.lookup(make_id(1)) is stored


def test_dependencies_keep_adjacency_order_and_allow_parallel_edges() -> None:
    graph, (project, epic, other, story) = _graph_with(
        CycleCheck.FULL,
        VertexKind.PROJECT,
        VertexKind.EPIC,
        VertexKind.PROJECT,
        VertexKind.USER_STORY,
    )
    graph.connect(project, story, DependencyType.CONTAINS)
    graph.connect(project, epic, DependencyType.CONTAINS)
    graph.connect(project, other, DependencyType.BLOCKS)
    graph.connect(project, other, DependencyType.RESOURCES_REQUIRED_FOR)
    graph.connect(project, epic, DependencyType.CONTAINS)

    assert graph.dependencies_of(project.id) == (
        (story.id, DependencyType.CONTAINS),
        (epic.id, DependencyType.CONTAINS),
        (other.id, DependencyType.BLOCKS),
        (other.id, DependencyType.RESOURCES_REQUIRED_FOR),
        (epic.id, DependencyType.CONTAINS),
    )
    assert graph.dependencies_of(epic.id) == ()
    assert graph.edge_count == 5


def test_container_protocol() -> None:
    graph, (spec, project) = _graph_with(CycleCheck.FULL, VertexKind.SPEC, VertexKind.PROJECT)

    assert len(graph) == 2
    assert spec in graph
    assert str(project.id) in graph
    assert "not-an-id" not in graph
    assert [vertex.id for vertex in graph] == [spec.id, project.id]


def test_from_config_reads_cycle_check_mode() -> None:
    graph = DependencyGraph.from_config({"graph": {"cycle_check": "incremental"}})
    assert graph.cycle_check is CycleCheck.INCREMENTAL
    assert DependencyGraph.from_config({}).cycle_check is CycleCheck.FULL

    with pytest.raises(ValueError):
        DependencyGraph(cycle_check="sometimes")


def test_serialize_deserialize_preserves_vertices_and_edges() -> None:
    graph, (spec, project, epic, story, tasks) = _graph_with(
        CycleCheck.FULL,
        VertexKind.SPEC,
        VertexKind.PROJECT,
        VertexKind.EPIC,
        VertexKind.USER_STORY,
        VertexKind.TASKS,
    )
    graph.connect(spec, project, DependencyType.CONTAINS)
    graph.connect(project, epic, DependencyType.CONTAINS)
    graph.connect(epic, story, DependencyType.CONTAINS)
    graph.connect(story, tasks, DependencyType.CONTAINS)

    payload = graph.serialize()
    assert payload["schema_version"] == 1
    assert payload["edges"][0] == {
        "source": str(spec.id),
        "target": str(project.id),
        "type": "contains",
    }
    duration = payload["vertices"][1]["timeline"]["duration"]
    assert duration == {"amount": 5, "unit": "days"}
    assert type(duration["unit"]) is str
    assert type(payload["edges"][0]["type"]) is str

    restored = DependencyGraph.deserialize(payload, cycle_check="incremental")
    assert restored.serialize() == payload
    assert restored.cycle_check is CycleCheck.INCREMENTAL
    assert all(vertex.is_owned for vertex in restored)


def test_deserialize_rejects_documents_that_break_invariants() -> None:
    graph, (epic_1, epic_2) = _graph_with(CycleCheck.FULL, VertexKind.EPIC, VertexKind.EPIC)
    graph.connect(epic_1, epic_2, DependencyType.BLOCKS)
    payload = graph.serialize()

    cyclic = dict(payload)
    cyclic["edges"] = [
        *payload["edges"],
        {"source": str(epic_2.id), "target": str(epic_1.id), "type": "blocks"},
    ]
    with pytest.raises(CycleError):
        DependencyGraph.deserialize(cyclic)

    duplicated = dict(payload)
    duplicated["vertices"] = [*payload["vertices"], payload["vertices"][0]]
    with pytest.raises(DuplicateIdentifierError):
        DependencyGraph.deserialize(duplicated)

    newer = dict(payload)
    newer["schema_version"] = 2
    with pytest.raises(ValueError, match="newer than supported"):
        DependencyGraph.deserialize(newer)


def test_rejections_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    graph, (epic,) = _graph_with(CycleCheck.FULL, VertexKind.EPIC)

    with caplog.at_level(logging.INFO, logger="workgraph.planning.dependency_graph"):
        with pytest.raises(CycleError):
            graph.connect(epic, epic, DependencyType.BLOCKS)

    messages = [record.getMessage() for record in caplog.records]
    assert "edge rejected: would create cycle" in messages
    record = next(item for item in caplog.records if "cycle" in item.getMessage())
    assert record.cycle == [str(epic.id), str(epic.id)]
