"""Command-line interface router for workgraph."""

from __future__ import annotations

import argparse
import json
import sys
from collections import Counter
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from workgraph.config import (
    ConfigLoadError,
    ConfigValidationError,
    effective_config,
    load_config,
)
from workgraph.domain import coerce_vertex_id, short_id
from workgraph.errors import GraphDocumentError
from workgraph.observability import setup_logging
from workgraph.planning import DependencyGraph, load_graph


class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="workgraph",
        description=(
            "workgraph — acyclic dependency graphs of project work items.\n\n"
            "Common workflows:\n"
            "  workgraph check plan.yaml          Validate a graph document\n"
            "  workgraph deps plan.yaml <id>      List a vertex's dependencies\n"
            "  workgraph config                   Show effective configuration\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to workgraph TOML config (default: ./workgraph.toml if present).",
    )
    common.add_argument("--json", action="store_true", help="Emit deterministic JSON output")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # check ---------------------------------------------------------------
    check_parser = subparsers.add_parser(
        "check",
        parents=[common],
        help="Validate a graph document",
        description=(
            "Load a JSON or YAML graph document, replaying every vertex and edge\n"
            "through the graph so each invariant is re-checked.\n\n"
            "Examples:\n"
            "  workgraph check plan.yaml\n"
            "  workgraph check plan.json --json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    check_parser.add_argument("document", help="Path to a .json, .yaml or .yml graph document")
    check_parser.set_defaults(handler=_cmd_check)

    # deps ----------------------------------------------------------------
    deps_parser = subparsers.add_parser(
        "deps",
        parents=[common],
        help="List the outgoing dependencies of a vertex",
        description=(
            "Print the (target, type) pairs leaving a vertex, in the order they\n"
            "were added.\n\n"
            "Examples:\n"
            "  workgraph deps plan.yaml 2f1c...\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    deps_parser.add_argument("document", help="Path to a .json, .yaml or .yml graph document")
    deps_parser.add_argument("vertex_id", help="Identifier of the source vertex")
    deps_parser.set_defaults(handler=_cmd_deps)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Show effective configuration",
        description=(
            "Display the effective config after merging defaults, file, and env.\n\n"
            "Examples:\n"
            "  workgraph config\n"
            "  WORKGRAPH_GRAPH_CYCLE_CHECK=incremental workgraph config --json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    config_parser.set_defaults(handler=_cmd_config)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    try:
        result = handler(namespace)
    except CLIError as exc:
        if _flag(namespace, "json"):
            _emit_json(
                {"command": namespace.command, "ok": False, "error": exc.message}
            )
        else:
            print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_check(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    graph = _load_document(args, config)

    kinds = Counter(vertex.kind.value for vertex in graph)
    types = Counter(dependency_type.value for _, _, dependency_type in graph.edges)
    payload: dict[str, object] = {
        "command": "check",
        "ok": True,
        "document": Path(args.document).as_posix(),
        "vertices": len(graph),
        "edges": graph.edge_count,
        "vertices_by_kind": dict(sorted(kinds.items())),
        "edges_by_type": dict(sorted(types.items())),
    }

    if _flag(args, "json"):
        _emit_json(payload)
        return 0

    print(f"{args.document}: ok ({len(graph)} vertices, {graph.edge_count} edges)")
    for kind, count in sorted(kinds.items()):
        print(f"  {kind}: {count}")
    for dependency_type, count in sorted(types.items()):
        print(f"  {dependency_type} edges: {count}")
    return 0


def _cmd_deps(args: argparse.Namespace) -> int:
    try:
        vertex_id = coerce_vertex_id(args.vertex_id)
    except ValueError as exc:
        raise CLIError(str(exc), exit_code=2) from exc

    config = _load_effective_config(args)
    graph = _load_document(args, config)

    dependencies = graph.dependencies_of(vertex_id)
    if dependencies is None:
        raise CLIError(f"vertex not found in graph: {vertex_id}", exit_code=1)

    rows: list[dict[str, object]] = []
    for target_id, dependency_type in dependencies:
        target = graph.lookup(target_id)
        rows.append(
            {
                "target": str(target_id),
                "type": dependency_type.value,
                "kind": target.kind.value if target is not None else None,
                "name": target.name if target is not None else None,
            }
        )

    if _flag(args, "json"):
        _emit_json({"command": "deps", "ok": True, "vertex": str(vertex_id), "dependencies": rows})
        return 0

    if not rows:
        print(f"{short_id(vertex_id)} has no dependencies")
        return 0
    for row in rows:
        print(f"{row['type']} -> {short_id(str(row['target']))} [{row['kind']}] {row['name']}")
    return 0


def _cmd_config(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    rendered = effective_config(config)

    if _flag(args, "json"):
        _emit_json({"command": "config", "ok": True, "config": rendered})
        return 0

    print(json.dumps(rendered, indent=2, sort_keys=True, ensure_ascii=False))
    return 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _load_effective_config(args: argparse.Namespace) -> dict[str, Any]:
    config_path = getattr(args, "config_path", None)

    try:
        loaded = load_config(config_path)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=2) from exc

    observability = loaded.get("observability")
    setup_logging(observability if isinstance(observability, Mapping) else None)
    return loaded


def _load_document(args: argparse.Namespace, config: Mapping[str, Any]) -> DependencyGraph:
    cycle_check = config.get("graph", {}).get("cycle_check", "full")
    try:
        return load_graph(args.document, cycle_check=cycle_check)
    except GraphDocumentError as exc:
        raise CLIError(str(exc), exit_code=1) from exc


def _flag(args: argparse.Namespace, name: str) -> bool:
    return bool(getattr(args, name, False))


__all__ = ["CLIError", "build_parser", "run_cli"]
