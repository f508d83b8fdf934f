"""Relationship kinds used to label dependency edges."""

from __future__ import annotations

from enum import StrEnum


class DependencyType(StrEnum):
    BLOCKS = "blocks"
    RESOURCES_REQUIRED_FOR = "resources_required_for"
    CONTAINS = "contains"


__all__ = ["DependencyType"]
