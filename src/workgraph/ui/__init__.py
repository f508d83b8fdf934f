"""Command-line surface for workgraph."""

from workgraph.ui.cli import CLIError, build_parser, run_cli

__all__ = ["CLIError", "build_parser", "run_cli"]
