"""Rule Normalization - coerce stored column values into strict domain types.

Invariants:
    - normalize_segment_lengths returns a non-empty tuple of positive ints or raises ConfigParseError
    - normalize_case_mode never raises (unknown values render as preserve)
    - Called once per row at the store boundary; the formatter never sees raw column values

Design Decisions:
    - Accepts list/tuple, JSON text "[5,4]", PostgreSQL array literal "{5,4}" and bare "5,4":
      rows written by the legacy INTEGER[] schema come back as array literals
"""

import json
from collections.abc import Sequence
from typing import Any

from idformat.core.domain_types import CaseMode
from idformat.core.errors import ConfigParseError


def normalize_segment_lengths(value: Any) -> tuple[int, ...]:
    """Normalize a stored segment_lengths value into a tuple of positive ints."""
    items = _split_text(value) if isinstance(value, str) else value
    if not isinstance(items, Sequence) or isinstance(items, (str, bytes)):
        raise ConfigParseError(value, "expected a sequence of integers")
    if not items:
        raise ConfigParseError(value, "at least one segment length is required")
    return tuple(_coerce_length(value, item) for item in items)


def normalize_case_mode(value: Any) -> CaseMode:
    if isinstance(value, CaseMode):
        return value
    try:
        return CaseMode(str(value).lower())
    except ValueError:
        return CaseMode.PRESERVE


def _split_text(text: str) -> list[Any]:
    stripped = text.strip()
    if stripped.startswith("["):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError as e:
            raise ConfigParseError(text, f"invalid JSON array ({e.msg})") from e
    stripped = stripped.strip("{}")
    if not stripped:
        return []
    return [part.strip() for part in stripped.split(",")]


def _coerce_length(original: Any, item: Any) -> int:
    # bool is an int subclass; True must not read as a length of 1
    if isinstance(item, bool):
        raise ConfigParseError(original, f"boolean {item!r} is not a length")
    if isinstance(item, int):
        length = item
    elif isinstance(item, str) and _is_ascii_number(item.strip()):
        length = int(item.strip())
    else:
        raise ConfigParseError(original, f"{item!r} is not an integer")
    if length <= 0:
        raise ConfigParseError(original, f"segment length {length} must be positive")
    return length


def _is_ascii_number(text: str) -> bool:
    # str.isdigit() also accepts superscripts and other Unicode digits int() rejects
    return text.isascii() and text.isdigit()
