"""
Planning layer: dependency types, the compatibility policy, and the acyclic
dependency graph that enforces both on every mutation.
"""

from __future__ import annotations

from workgraph.planning.dependency_graph import CycleCheck, Dependency, DependencyGraph
from workgraph.planning.dependency_types import DependencyType
from workgraph.planning.documents import dump_graph, load_graph
from workgraph.planning.policy import (
    COMPATIBILITY_TABLE,
    allowed_dependency_types,
    is_valid_connection,
)

__all__ = [
    "COMPATIBILITY_TABLE",
    "CycleCheck",
    "Dependency",
    "DependencyGraph",
    "DependencyType",
    "allowed_dependency_types",
    "dump_graph",
    "is_valid_connection",
    "load_graph",
]
