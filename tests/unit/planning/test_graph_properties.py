"""Property tests for dependency graph invariants under arbitrary edge sequences."""

from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from workgraph.domain import VertexKind
from workgraph.errors import CycleError, WorkGraphError
from workgraph.planning import CycleCheck, DependencyGraph, DependencyType

from .. import make_vertex

_KINDS = st.sampled_from([VertexKind.EPIC, VertexKind.USER_STORY, VertexKind.TASKS])
_TYPES = st.sampled_from(list(DependencyType))


@st.composite
def _graph_case(
    draw: st.DrawFn,
) -> tuple[list[VertexKind], list[tuple[int, int, DependencyType]]]:
    kinds = draw(st.lists(_KINDS, min_size=2, max_size=8))
    index = st.integers(min_value=0, max_value=len(kinds) - 1)
    attempts = draw(st.lists(st.tuples(index, index, _TYPES), max_size=30))
    return kinds, attempts


def _build(kinds: list[VertexKind], mode: CycleCheck) -> tuple[DependencyGraph, list]:
    graph = DependencyGraph(cycle_check=mode)
    vertices = [make_vertex(kind, seed) for seed, kind in enumerate(kinds, start=1)]
    for vertex in vertices:
        graph.insert(vertex)
    return graph, vertices


@given(case=_graph_case())
@settings(max_examples=60, derandomize=True, deadline=None)
def test_every_connect_leaves_graph_acyclic_and_failures_are_atomic(
    case: tuple[list[VertexKind], list[tuple[int, int, DependencyType]]],
) -> None:
    kinds, attempts = case
    graph, vertices = _build(kinds, CycleCheck.FULL)

    for source, target, dependency_type in attempts:
        before = graph.edges
        try:
            graph.connect(vertices[source], vertices[target], dependency_type)
        except WorkGraphError:
            assert graph.edges == before
        else:
            assert len(graph.edges) == len(before) + 1
            outgoing = graph.dependencies_of(vertices[source].id)
            assert outgoing is not None
            assert outgoing[-1] == (vertices[target].id, dependency_type)
        assert graph.find_cycle() is None


@given(case=_graph_case())
@settings(max_examples=60, derandomize=True, deadline=None)
def test_full_and_incremental_cycle_checks_agree(
    case: tuple[list[VertexKind], list[tuple[int, int, DependencyType]]],
) -> None:
    kinds, attempts = case
    full, full_vertices = _build(kinds, CycleCheck.FULL)
    incremental, incremental_vertices = _build(kinds, CycleCheck.INCREMENTAL)

    for source, target, dependency_type in attempts:
        outcomes = []
        for graph, vertices in ((full, full_vertices), (incremental, incremental_vertices)):
            try:
                graph.connect(vertices[source], vertices[target], dependency_type)
            except WorkGraphError as exc:
                outcomes.append(type(exc))
            else:
                outcomes.append(None)
        assert outcomes[0] is outcomes[1]

    assert full.serialize() == incremental.serialize()


@given(size=st.integers(min_value=2, max_value=12))
@settings(max_examples=20, derandomize=True, deadline=None)
def test_closing_a_chain_always_fails_with_the_full_loop(size: int) -> None:
    graph, vertices = _build([VertexKind.TASKS] * size, CycleCheck.INCREMENTAL)
    for left, right in zip(vertices, vertices[1:], strict=False):
        graph.connect(left, right, DependencyType.BLOCKS)

    try:
        graph.connect(vertices[-1], vertices[0], DependencyType.RESOURCES_REQUIRED_FOR)
    except CycleError as exc:
        assert exc.cycle[0] == exc.cycle[-1]
        assert set(exc.cycle) == {vertex.id for vertex in vertices}
    else:
        raise AssertionError("closing edge was accepted")
    assert graph.edge_count == size - 1
