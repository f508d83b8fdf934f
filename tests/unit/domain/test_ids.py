"""Unit tests for vertex identifier helpers."""

from __future__ import annotations

from uuid import UUID

import pytest

from workgraph.domain import ids


def _ff_bytes(size: int) -> bytes:
    return b"\xff" * size


def test_generate_vertex_id_no_collision_10000() -> None:
    generated = {ids.generate_vertex_id() for _ in range(10_000)}
    assert len(generated) == 10_000


def test_generated_ids_are_version_4_and_deterministic_with_injected_bytes() -> None:
    first = ids.generate_vertex_id(randbytes=_ff_bytes)
    second = ids.generate_vertex_id(randbytes=_ff_bytes)

    assert first == second
    assert first.version == 4


def test_randbytes_provider_must_return_exact_size() -> None:
    with pytest.raises(ValueError, match="exactly 16 bytes"):
        ids.generate_vertex_id(randbytes=lambda size: b"\x00" * (size - 1))
    with pytest.raises(ValueError, match="bytes-like"):
        ids.generate_vertex_id(randbytes=lambda size: "x" * size)  # type: ignore[arg-type,return-value]


def test_coerce_accepts_uuid_and_canonical_text() -> None:
    value = UUID("12345678-1234-4234-8234-123456789abc")

    assert ids.coerce_vertex_id(value) is value
    assert ids.coerce_vertex_id(" 12345678-1234-4234-8234-123456789ABC ") == value
    ids.validate_vertex_id(str(value))


@pytest.mark.parametrize(
    ("raw", "message"),
    [
        ("", "non-empty"),
        ("not-a-uuid", "invalid vertex id"),
        (42, "UUID or string"),
        (None, "UUID or string"),
    ],
)
def test_coerce_rejects_invalid_values(raw: object, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        ids.coerce_vertex_id(raw)


def test_short_id_uses_trailing_hex_digits() -> None:
    value = UUID("12345678-1234-4234-8234-123456789abc")
    assert ids.short_id(value) == "56789abc"
    assert len(ids.short_id(str(value))) == ids.SHORT_ID_LENGTH
