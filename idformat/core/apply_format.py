"""Formatter - render a raw identifier with a format rule.

Invariants:
    - apply_format(raw, None) == raw (absence of a rule is never an error)
    - Case transform runs before partitioning
    - Characters beyond sum(segment_lengths) are dropped, never appended as a tail segment
    - prefix/suffix are attached with no extra separator
    - Pure: no IO, never raises for a normalized rule
"""

from idformat.core.domain_types import CaseMode, FormatRule


def apply_format(raw: str, rule: FormatRule | None) -> str:
    """Return the display rendering of raw under rule."""
    if rule is None or not raw:
        return raw
    processed = _apply_case(raw, rule.case_mode)
    segments = partition(processed, rule.segment_lengths)
    return f"{rule.prefix}{rule.separator.join(segments)}{rule.suffix}"


def partition(value: str, segment_lengths: tuple[int, ...]) -> list[str]:
    """Split value into consecutive groups; stops when value or lengths run out."""
    segments: list[str] = []
    pos = 0
    for length in segment_lengths:
        if pos >= len(value):
            break
        segments.append(value[pos:pos + length])
        pos += length
    return segments


def _apply_case(value: str, case_mode: CaseMode) -> str:
    if case_mode is CaseMode.UPPER:
        return value.upper()
    if case_mode is CaseMode.LOWER:
        return value.lower()
    return value
