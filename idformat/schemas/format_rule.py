"""Format Schemas - Pydantic models with field-level validation for the admin surface.

Invariants:
    - FormatRuleCreate.code: letter first, then letters/digits/_/- (never all digits,
      so /formats/{id_or_code} is unambiguous)
    - segment_lengths: 1+ positive ints
    - FormatRuleUpdate: every field optional; explicit null rejected for non-nullable columns
    - PreviewRequest: exactly one of format_id / format_code
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, model_validator

from idformat.core.domain_types import CaseMode

CODE_PATTERN = r"^[A-Za-z][A-Za-z0-9_\-]*$"
# matches the format_overrides.identifier column
IDENTIFIER_MAX_LENGTH = 64

_NON_NULLABLE = (
    "code", "name", "separator", "segment_lengths", "total_length",
    "case_mode", "prefix", "suffix", "is_default",
)


class FormatRuleCreate(BaseModel):
    """Format rule creation."""
    code: str = Field(min_length=1, max_length=50, pattern=CODE_PATTERN)
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    separator: str = Field("", max_length=5)
    segment_lengths: list[PositiveInt] = Field(min_length=1)
    total_length: PositiveInt | None = None
    case_mode: CaseMode = CaseMode.UPPER
    prefix: str = Field("", max_length=20)
    suffix: str = Field("", max_length=20)
    is_default: bool = False
    applies_to_scope: str | None = Field(None, max_length=50)
    applies_to_mode: str | None = Field(None, max_length=50)
    created_by: str = Field("API", max_length=100)


class FormatRuleUpdate(BaseModel):
    """Partial update - only fields present in the request body are applied."""
    code: str | None = Field(None, min_length=1, max_length=50, pattern=CODE_PATTERN)
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    separator: str | None = Field(None, max_length=5)
    segment_lengths: list[PositiveInt] | None = Field(None, min_length=1)
    total_length: PositiveInt | None = None
    case_mode: CaseMode | None = None
    prefix: str | None = Field(None, max_length=20)
    suffix: str | None = Field(None, max_length=20)
    is_default: bool | None = None
    applies_to_scope: str | None = Field(None, max_length=50)
    applies_to_mode: str | None = Field(None, max_length=50)

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        for name in _NON_NULLABLE:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def to_patch(self) -> dict:
        return self.model_dump(exclude_unset=True)


class FormatRuleResponse(BaseModel):
    """Format rule as returned by the admin API."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str
    description: str | None
    separator: str
    segment_lengths: list[int]
    total_length: int
    case_mode: CaseMode
    prefix: str
    suffix: str
    is_default: bool
    applies_to_scope: str | None
    applies_to_mode: str | None
    created_by: str
    created_at: datetime | None
    updated_at: datetime | None


class FormatRuleList(BaseModel):
    formats: list[FormatRuleResponse]


# --- Overrides ----------------------------------------------------------------

class OverrideSet(BaseModel):
    format_rule_id: PositiveInt


class OverrideResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    identifier: str
    format_rule_id: int
    created_at: datetime | None


# --- Display ------------------------------------------------------------------

class PreviewRequest(BaseModel):
    """Preview - render an arbitrary identifier with a named rule."""
    identifier: str = Field(min_length=1, max_length=IDENTIFIER_MAX_LENGTH)
    format_id: PositiveInt | None = None
    format_code: str | None = Field(None, max_length=50)

    @model_validator(mode="after")
    def validate_rule_reference(self):
        if (self.format_id is None) == (self.format_code is None):
            raise ValueError("provide exactly one of format_id or format_code")
        return self

    @property
    def rule_ref(self) -> int | str:
        return self.format_id if self.format_id is not None else self.format_code


class DisplayResponse(BaseModel):
    """Raw identifier with its rendering and the rule code used."""
    model_config = ConfigDict(from_attributes=True)

    raw: str
    formatted: str
    rule_code: str | None = None


class DisplayBatchRequest(BaseModel):
    identifiers: list[str] = Field(min_length=1, max_length=500)


class DisplayBatchResponse(BaseModel):
    results: list[DisplayResponse]
