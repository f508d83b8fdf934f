"""Read and write dependency graphs as JSON or YAML documents."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Final

import yaml

from workgraph.errors import GraphDocumentError, WorkGraphError
from workgraph.planning.dependency_graph import CycleCheck, DependencyGraph

JSON_SUFFIXES: Final[frozenset[str]] = frozenset({".json"})
YAML_SUFFIXES: Final[frozenset[str]] = frozenset({".yaml", ".yml"})

PathLike = str | Path


def load_graph(
    path: PathLike,
    *,
    cycle_check: CycleCheck | str = CycleCheck.FULL,
) -> DependencyGraph:
    """Load a graph document and replay it into a new :class:`DependencyGraph`.

    Any document that is unreadable, malformed, or violates a graph invariant
    raises :class:`~workgraph.errors.GraphDocumentError`; the original error is
    chained as ``__cause__``.
    """
    source = Path(path).expanduser()
    payload = _read_payload(source)
    try:
        return DependencyGraph.deserialize(payload, cycle_check=cycle_check)
    except (ValueError, WorkGraphError) as exc:
        raise GraphDocumentError(
            f"invalid graph document {source}: {exc}",
            details={"path": source.as_posix()},
        ) from exc


def dump_graph(graph: DependencyGraph, path: PathLike) -> Path:
    """Write ``graph`` to ``path``; the format follows the file suffix."""
    target = Path(path).expanduser()
    suffix = _document_suffix(target)
    payload = graph.serialize()

    if suffix in YAML_SUFFIXES:
        text = yaml.safe_dump(payload, sort_keys=True, allow_unicode=True)
    else:
        text = json.dumps(payload, sort_keys=True, indent=2, ensure_ascii=False) + "\n"

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise GraphDocumentError(
            f"unable to write graph document {target}: {exc}",
            details={"path": target.as_posix()},
        ) from exc
    return target


def _read_payload(source: Path) -> Mapping[str, object]:
    suffix = _document_suffix(source)
    try:
        with source.open("r", encoding="utf-8") as handle:
            if suffix in YAML_SUFFIXES:
                payload = yaml.safe_load(handle)
            else:
                payload = json.load(handle)
    except OSError as exc:
        raise GraphDocumentError(
            f"unable to read graph document {source}: {exc}",
            details={"path": source.as_posix()},
        ) from exc
    except yaml.YAMLError as exc:
        raise GraphDocumentError(
            f"invalid YAML in {source}: {exc}",
            details={"path": source.as_posix()},
        ) from exc
    except json.JSONDecodeError as exc:
        raise GraphDocumentError(
            f"invalid JSON in {source}: {exc}",
            details={"path": source.as_posix()},
        ) from exc
    except UnicodeDecodeError as exc:
        raise GraphDocumentError(
            f"graph document is not valid UTF-8: {source}: {exc}",
            details={"path": source.as_posix()},
        ) from exc

    if not isinstance(payload, Mapping):
        raise GraphDocumentError(
            f"graph document root must be an object: {source}",
            details={"path": source.as_posix()},
        )
    return payload


def _document_suffix(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix not in JSON_SUFFIXES | YAML_SUFFIXES:
        raise GraphDocumentError(
            f"unsupported graph document type {suffix or '(none)'!r}: {path}",
            details={"path": path.as_posix()},
        )
    return suffix


__all__ = ["JSON_SUFFIXES", "YAML_SUFFIXES", "dump_graph", "load_graph"]
