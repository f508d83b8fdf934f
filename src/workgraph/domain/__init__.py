"""
Domain types for work-item graphs: vertices, timelines, identifiers, builder.

The domain layer is free of IO side effects and never imports the planning
layer.
"""

from workgraph.domain.builder import VertexBuilder
from workgraph.domain.ids import coerce_vertex_id, generate_vertex_id, short_id
from workgraph.domain.timeline import Duration, DurationUnit, Timeline
from workgraph.domain.vertices import (
    REQUIRED_ATTRIBUTES,
    VERTEX_ATTRIBUTES,
    VERTEX_TYPES,
    Epic,
    Project,
    Spec,
    Tasks,
    UserStory,
    Vertex,
    VertexKind,
    WorkItem,
    vertex_from_dict,
)

__all__ = [
    "REQUIRED_ATTRIBUTES",
    "VERTEX_ATTRIBUTES",
    "VERTEX_TYPES",
    "Duration",
    "DurationUnit",
    "Epic",
    "Project",
    "Spec",
    "Tasks",
    "Timeline",
    "UserStory",
    "Vertex",
    "VertexBuilder",
    "VertexKind",
    "WorkItem",
    "coerce_vertex_id",
    "generate_vertex_id",
    "short_id",
    "vertex_from_dict",
]
