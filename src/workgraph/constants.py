"""Stable constants shared across workgraph layers."""

from __future__ import annotations

from typing import Final

# Schema versions for persisted contracts.
CONFIG_SCHEMA_VERSION: Final[int] = 1
GRAPH_DOCUMENT_SCHEMA_VERSION: Final[int] = 1

DEFAULT_CONFIG_FILE: Final[str] = "workgraph.toml"
ENV_PREFIX: Final[str] = "WORKGRAPH_"

__all__ = [
    "CONFIG_SCHEMA_VERSION",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "GRAPH_DOCUMENT_SCHEMA_VERSION",
]
