"""Module entrypoint for ``python -m workgraph``."""

from __future__ import annotations

from workgraph.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
