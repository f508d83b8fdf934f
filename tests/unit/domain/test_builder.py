"""Unit tests for domain.builder."""

from __future__ import annotations

import pytest

from workgraph.domain import Epic, Spec, VertexBuilder, VertexKind
from workgraph.errors import VertexBuildError

from .. import make_id, make_timeline


def test_builder_is_fluent_and_builds_each_kind() -> None:
    builder = (
        VertexBuilder()
        .with_id(make_id(1))
        .with_name("Payments")
        .with_link("https://tracker.example/PAY")
        .with_owner("erin")
        .with_timeline(make_timeline())
        .with_points(13)
        .with_participants(["erin", "frank"])
    )

    epic = builder.build_epic()
    assert isinstance(epic, Epic)
    assert epic.points == 13
    assert epic.participants == {"erin", "frank"}
    assert epic.owner == "erin"

    spec = builder.build_spec()
    assert isinstance(spec, Spec)
    assert spec.to_dict() == {
        "id": str(make_id(1)),
        "kind": "spec",
        "link": "https://tracker.example/PAY",
        "name": "Payments",
        "owner": "erin",
    }

    for kind in VertexKind:
        assert builder.build(kind).kind is kind


def test_built_vertices_do_not_share_participant_sets() -> None:
    builder = (
        VertexBuilder(id=make_id(1), name="Roadmap", timeline=make_timeline())
        .with_participants(["gus"])
    )
    first = builder.build_project()
    second = builder.build_project()

    first.add_participant("hana")
    assert second.participants == {"gus"}
    assert builder.participants == {"gus"}


@pytest.mark.parametrize(
    ("builder", "kind", "missing"),
    [
        (VertexBuilder(name="x"), VertexKind.SPEC, "id"),
        (VertexBuilder(id=make_id(1)), VertexKind.PROJECT, "name"),
        (VertexBuilder(id=make_id(1), name="x"), VertexKind.EPIC, "timeline"),
        (VertexBuilder(id=make_id(1), name="x"), VertexKind.TASKS, "timeline"),
    ],
)
def test_builder_reports_first_missing_required_field(
    builder: VertexBuilder, kind: VertexKind, missing: str
) -> None:
    with pytest.raises(VertexBuildError) as error:
        builder.build(kind)
    assert error.value.missing_field == missing
    assert str(error.value).endswith(f"missing {error.value.kind} {missing}")


def test_project_timeline_is_optional() -> None:
    project = VertexBuilder(id=make_id(1), name="Roadmap").build_project()
    assert project.timeline is None


def test_typed_build_rejects_mismatched_class(monkeypatch: pytest.MonkeyPatch) -> None:
    builder = VertexBuilder().with_id(make_id(1)).with_name("Mismatch")
    spec = builder.build_spec()
    monkeypatch.setattr(VertexBuilder, "build", lambda self, kind: spec)

    with pytest.raises(TypeError, match="expected Epic, built Spec"):
        builder.build_epic()
