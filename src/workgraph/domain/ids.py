"""Vertex identifier generation and validation.

The graph never generates identifiers; these helpers are the identifier source
for callers and the validation used by builders and document loading.
"""

from __future__ import annotations

import secrets
from collections.abc import Callable
from typing import Final
from uuid import UUID

VERTEX_ID_BYTES: Final[int] = 16
SHORT_ID_LENGTH: Final[int] = 8

_RandBytes = Callable[[int], bytes]

__all__ = [
    "SHORT_ID_LENGTH",
    "VERTEX_ID_BYTES",
    "coerce_vertex_id",
    "generate_vertex_id",
    "short_id",
    "validate_vertex_id",
]


def generate_vertex_id(*, randbytes: _RandBytes | None = None) -> UUID:
    """Generate a random (version 4) 128-bit vertex identifier."""
    return UUID(bytes=_resolve_random_bytes(randbytes), version=4)


def coerce_vertex_id(value: object) -> UUID:
    """Return ``value`` as a ``UUID`` or raise ``ValueError`` with precise context."""
    if isinstance(value, UUID):
        return value
    if not isinstance(value, str):
        raise ValueError(f"vertex id must be a UUID or string, got {type(value).__name__}")
    text = value.strip()
    if not text:
        raise ValueError("vertex id must be non-empty")
    try:
        return UUID(text)
    except ValueError as exc:
        raise ValueError(f"invalid vertex id {value!r}: {exc}") from exc


def validate_vertex_id(value: object) -> None:
    """Validate a vertex identifier and raise ``ValueError`` on failure."""
    _ = coerce_vertex_id(value)


def short_id(value: UUID | str) -> str:
    """Return the last 8 hex characters of an ID for compact display."""
    return coerce_vertex_id(value).hex[-SHORT_ID_LENGTH:]


def _resolve_random_bytes(randbytes: _RandBytes | None) -> bytes:
    provider = secrets.token_bytes if randbytes is None else randbytes
    raw = provider(VERTEX_ID_BYTES)
    if not isinstance(raw, (bytes, bytearray, memoryview)):
        raise ValueError("randbytes must return a bytes-like object")
    as_bytes = bytes(raw)
    if len(as_bytes) != VERTEX_ID_BYTES:
        raise ValueError(f"randbytes must return exactly {VERTEX_ID_BYTES} bytes")
    return as_bytes
