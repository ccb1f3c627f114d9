"""Domain Types - rich types that replace bare primitives across the codebase.

Invariants:
    - FormatRule.segment_lengths is always a tuple of positive ints (normalized at the store boundary)
    - FormatRule / FormatOverride / IdentifierClassification are frozen - the cache shares them freely
    - CaseMode encodes every valid display case - no raw string matching

Design Decisions:
    - NewType over wrapper classes: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
    - Domain dataclasses detached from ORM rows: cached values never touch a DB session
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

FormatRuleId = NewType("FormatRuleId", int)


# ─── Enums ───────────────────────────────────────────────────────

class CaseMode(str, Enum):
    """Case transform applied before partitioning."""
    UPPER = "upper"
    LOWER = "lower"
    PRESERVE = "preserve"


# ─── Entities ────────────────────────────────────────────────────

@dataclass(frozen=True)
class FormatRule:
    """A named rendering recipe for identifiers."""
    id: FormatRuleId
    code: str
    name: str
    segment_lengths: tuple[int, ...]
    total_length: int
    separator: str = ""
    case_mode: CaseMode = CaseMode.UPPER
    prefix: str = ""
    suffix: str = ""
    is_default: bool = False
    applies_to_scope: str | None = None
    applies_to_mode: str | None = None
    description: str | None = None
    created_by: str = "SYSTEM"
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class FormatOverride:
    """Binding that forces one rule for one identifier."""
    identifier: str
    format_rule_id: FormatRuleId
    created_at: datetime | None = None


@dataclass(frozen=True)
class IdentifierClassification:
    """Read-only classification supplied by the identifier registry."""
    identifier: str
    scope: str | None = None
    mode: str | None = None


@dataclass(frozen=True)
class FormatResult:
    """Raw identifier alongside its display rendering."""
    raw: str
    formatted: str
    rule_code: str | None = None
