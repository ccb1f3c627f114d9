"""Format Index - multi-key lookup over a full rule set.

Invariants:
    - Built from the complete rule list in one pass; never mutated afterwards
    - Later rules win a shared slot (default, scope, mode) - callers pass rules ordered by id
    - pick() precedence: scope > mode > default > None

Design Decisions:
    - Frozen dataclass with dict slots: the cache swaps whole indexes, so readers
      never observe a half-built one
"""

from dataclasses import dataclass, field

from idformat.core.domain_types import FormatRule, FormatRuleId


@dataclass(frozen=True)
class FormatIndex:
    """Rules keyed by id, code, default flag, scope and mode."""
    by_id: dict[FormatRuleId, FormatRule] = field(default_factory=dict)
    by_code: dict[str, FormatRule] = field(default_factory=dict)
    by_scope: dict[str, FormatRule] = field(default_factory=dict)
    by_mode: dict[str, FormatRule] = field(default_factory=dict)
    default: FormatRule | None = None

    @classmethod
    def build(cls, rules: list[FormatRule]) -> "FormatIndex":
        by_id: dict[FormatRuleId, FormatRule] = {}
        by_code: dict[str, FormatRule] = {}
        by_scope: dict[str, FormatRule] = {}
        by_mode: dict[str, FormatRule] = {}
        default = None
        for rule in rules:
            by_id[rule.id] = rule
            by_code[rule.code] = rule
            if rule.is_default:
                default = rule
            if rule.applies_to_scope:
                by_scope[rule.applies_to_scope] = rule
            if rule.applies_to_mode:
                by_mode[rule.applies_to_mode] = rule
        return cls(
            by_id=by_id, by_code=by_code,
            by_scope=by_scope, by_mode=by_mode, default=default,
        )

    def is_empty(self) -> bool:
        return not self.by_id

    def lookup(self, id_or_code: int | str) -> FormatRule | None:
        """Find a rule by numeric id or by code."""
        if isinstance(id_or_code, int):
            return self.by_id.get(FormatRuleId(id_or_code))
        return self.by_code.get(id_or_code)

    def pick(self, scope: str | None = None, mode: str | None = None) -> FormatRule | None:
        """Select the rule for a classification: scope, then mode, then default."""
        if scope and scope in self.by_scope:
            return self.by_scope[scope]
        if mode and mode in self.by_mode:
            return self.by_mode[mode]
        return self.default
