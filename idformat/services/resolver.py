"""Format Resolver - picks the rule for an identifier and renders it.

Invariants:
    - Precedence, first match wins: override → scope rule → mode rule → default → None
    - An override bypasses classification entirely
    - Without explicit scope/mode, classification comes from the identifier registry;
      an unregistered identifier has neither and falls to the default
    - format() never raises for a missing rule: no rule means the raw value is shown

Design Decisions:
    - Rules are read from the cache index; overrides and classification are
      read from the store on every call (they are not cached)
    - An override whose rule is missing from the index (cross-process staleness)
      is logged and resolution continues with the classification path
"""

import logging

from idformat.core.apply_format import apply_format
from idformat.core.domain_types import FormatResult, FormatRule
from idformat.core.errors import ErrorContext, NotFoundError
from idformat.core.format_index import FormatIndex
from idformat.services.config_store import FormatConfigStore
from idformat.services.format_cache import FormatCache

logger = logging.getLogger(__name__)


class FormatResolver:
    """Resolves display rules and produces formatted identifiers."""

    def __init__(self, store: FormatConfigStore, cache: FormatCache):
        self.store = store
        self.cache = cache

    async def resolve(
        self,
        identifier: str,
        scope: str | None = None,
        mode: str | None = None,
    ) -> FormatRule | None:
        """Return the rule that applies to identifier, or None."""
        index = await self._index()

        override = await self.store.get_override(identifier)
        if override is not None:
            rule = index.by_id.get(override.format_rule_id)
            if rule is not None:
                return rule
            logger.warning(
                "Override references a rule missing from the cache",
                extra={"identifier": identifier, "rule_id": override.format_rule_id},
            )

        if scope is None and mode is None:
            classification = await self.store.get_classification(identifier)
            if classification is not None:
                scope, mode = classification.scope, classification.mode

        return index.pick(scope, mode)

    async def format(
        self,
        identifier: str,
        scope: str | None = None,
        mode: str | None = None,
    ) -> FormatResult:
        rule = await self.resolve(identifier, scope, mode)
        return _result(identifier, rule)

    async def format_many(self, identifiers: list[str]) -> list[FormatResult]:
        """Format a batch of identifiers in request order."""
        return [await self.format(identifier) for identifier in identifiers]

    async def preview(self, raw: str, id_or_code: int | str) -> FormatResult:
        """Render an arbitrary value with an explicitly named rule."""
        index = await self._index()
        rule = index.lookup(id_or_code)
        if rule is None:
            raise NotFoundError(
                "FormatRule", str(id_or_code), ErrorContext(identifier=raw),
            )
        return _result(raw, rule)

    async def _index(self) -> FormatIndex:
        return await self.cache.current(self.store.load_rules)


def _result(raw: str, rule: FormatRule | None) -> FormatResult:
    return FormatResult(
        raw=raw,
        formatted=apply_format(raw, rule),
        rule_code=rule.code if rule is not None else None,
    )
