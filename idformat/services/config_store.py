"""Format Config Store - durable CRUD over format rules and per-identifier overrides.

Invariants:
    - format_code is unique: create/rename to an existing code raises ValidationError
      (also when a concurrent writer wins the race to the unique index)
    - At most one default: setting is_default unsets the previous default in the same transaction
    - The default rule is never deleted (ProtectedRecordError); neither is a rule bound by overrides
    - segment_lengths is normalized exactly once, here, when a row becomes a FormatRule
    - Every mutation commits first, then invalidates the cache

Design Decisions:
    - Returns frozen domain FormatRule values, never ORM rows: callers cannot
      mutate persisted state by accident
    - load_rules skips rows that fail normalization (logged) so one bad row
      cannot stop display formatting; explicit lookups raise ConfigParseError
    - populate_existing on reads: sessions use expire_on_commit=False, so a
      long-lived session would otherwise serve stale identity-map rows
"""

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from idformat.core.domain_types import (
    FormatOverride, FormatRule, FormatRuleId, IdentifierClassification,
)
from idformat.core.errors import (
    ConfigParseError, ErrorContext, NotFoundError, ProtectedRecordError, ValidationError,
)
from idformat.core.normalize_rule import normalize_case_mode, normalize_segment_lengths
from idformat.core.repository_protocols import IdentifierRegistry
from idformat.infrastructure.database import violated_field
from idformat.infrastructure.identifier_registry import SqlIdentifierRegistry
from idformat.models.format_override import FormatOverrideRow
from idformat.models.format_rule import FormatRuleRow
from idformat.services.format_cache import FormatCache

logger = logging.getLogger(__name__)

# domain field name → column name
_COLUMNS = {
    "code": "format_code",
    "name": "name",
    "description": "description",
    "separator": "separator",
    "segment_lengths": "segment_lengths",
    "total_length": "total_length",
    "case_mode": "display_case",
    "prefix": "prefix",
    "suffix": "suffix",
    "is_default": "is_default",
    "applies_to_scope": "applies_to_scope",
    "applies_to_mode": "applies_to_mode",
    "created_by": "created_by",
}

# unique-violation marker in the driver message → domain field
_UNIQUE_FIELDS = {
    "single_default": "is_default",
    "format_rules.is_default": "is_default",
    "format_code": "code",
}


class FormatConfigStore:
    """CRUD over format_rules / format_overrides with cache invalidation."""

    def __init__(
        self,
        db: AsyncSession,
        cache: FormatCache,
        registry: IdentifierRegistry | None = None,
    ):
        self.db = db
        self.cache = cache
        self.registry = registry or SqlIdentifierRegistry(db)

    # ─── Rule mutations ─────────────────────────────────────────

    async def create(self, data: dict[str, Any]) -> FormatRule:
        """Insert a new rule. Raises ValidationError on duplicate code."""
        values = _to_columns(data)
        code = values.get("format_code")
        if not code:
            raise ValidationError("Format code is required", "code")
        if "segment_lengths" not in values:
            raise ValidationError("Segment lengths are required", "segment_lengths")
        if await self._row_by_code(code) is not None:
            raise ValidationError(
                f"Format code '{code}' already exists", "code",
                ErrorContext(rule_code=code),
            )
        if values.get("total_length") is None:
            values["total_length"] = sum(values["segment_lengths"])
        if values.get("is_default"):
            await self._clear_default()

        row = FormatRuleRow(**values)
        self.db.add(row)
        await self._commit_rule(ErrorContext(rule_code=code))
        self.cache.invalidate()
        logger.info(
            f"Created format rule {code}",
            extra={"rule_code": code, "rule_id": row.id},
        )
        return _to_domain(row)

    async def update(self, rule_id: int, patch: dict[str, Any]) -> FormatRule:
        """Apply a partial update and bump updated_at."""
        row = await self._row_by_id(rule_id)
        if row is None:
            raise NotFoundError(
                "FormatRule", str(rule_id), ErrorContext(rule_id=rule_id),
            )
        values = _to_columns(patch)
        new_code = values.get("format_code")
        if new_code and new_code != row.format_code:
            if await self._row_by_code(new_code) is not None:
                raise ValidationError(
                    f"Format code '{new_code}' already exists", "code",
                    ErrorContext(rule_code=new_code, rule_id=rule_id),
                )
        if values.get("is_default") and not row.is_default:
            await self._clear_default()

        for column, value in values.items():
            setattr(row, column, value)
        row.updated_at = datetime.now(timezone.utc)
        await self._commit_rule(ErrorContext(
            rule_code=values.get("format_code", row.format_code), rule_id=rule_id,
        ))
        self.cache.invalidate()
        logger.info(
            f"Updated format rule {row.format_code}",
            extra={"rule_code": row.format_code, "rule_id": row.id},
        )
        return _to_domain(row)

    async def delete(self, rule_id: int) -> bool:
        """Delete a rule. Returns False when no such rule exists."""
        row = await self._row_by_id(rule_id)
        if row is None:
            return False
        context = ErrorContext(rule_code=row.format_code, rule_id=row.id)
        if row.is_default:
            raise ProtectedRecordError(
                f"Format rule '{row.format_code}' is the default and cannot be deleted",
                context,
            )
        bound = await self.db.scalar(
            select(func.count())
            .select_from(FormatOverrideRow)
            .where(FormatOverrideRow.format_rule_id == row.id),
        )
        if bound:
            raise ProtectedRecordError(
                f"Format rule '{row.format_code}' is bound by {bound} override(s)",
                context,
            )

        await self.db.delete(row)
        await self.db.commit()
        self.cache.invalidate()
        logger.info(
            f"Deleted format rule {context.rule_code}",
            extra={"rule_code": context.rule_code, "rule_id": rule_id},
        )
        return True

    # ─── Override mutations ─────────────────────────────────────

    async def upsert_override(self, identifier: str, rule_id: int) -> FormatOverride:
        """Bind identifier to rule_id, replacing any existing binding."""
        if await self._row_by_id(rule_id) is None:
            raise NotFoundError(
                "FormatRule", str(rule_id),
                ErrorContext(rule_id=rule_id, identifier=identifier),
            )
        row = await self.db.get(
            FormatOverrideRow, identifier, populate_existing=True,
        )
        if row is None:
            row = FormatOverrideRow(identifier=identifier, format_rule_id=rule_id)
            self.db.add(row)
        else:
            row.format_rule_id = rule_id
        await self.db.commit()
        self.cache.invalidate()
        logger.info(
            "Set format override",
            extra={"identifier": identifier, "rule_id": rule_id},
        )
        return _override_to_domain(row)

    async def delete_override(self, identifier: str) -> bool:
        result = await self.db.execute(
            delete(FormatOverrideRow)
            .where(FormatOverrideRow.identifier == identifier),
        )
        await self.db.commit()
        self.cache.invalidate()
        removed = result.rowcount > 0
        if removed:
            logger.info("Removed format override", extra={"identifier": identifier})
        return removed

    # ─── Reads ──────────────────────────────────────────────────

    async def list_rules(self) -> list[FormatRule]:
        """All rules, default first, then by name."""
        result = await self.db.execute(
            select(FormatRuleRow)
            .order_by(FormatRuleRow.is_default.desc(), FormatRuleRow.name.asc())
            .execution_options(populate_existing=True),
        )
        return [_to_domain(row) for row in result.scalars().all()]

    async def load_rules(self) -> list[FormatRule]:
        """Full rule set ordered by id, for the cache. Malformed rows are skipped."""
        result = await self.db.execute(
            select(FormatRuleRow)
            .order_by(FormatRuleRow.id.asc())
            .execution_options(populate_existing=True),
        )
        rules = []
        for row in result.scalars().all():
            try:
                rules.append(_to_domain(row))
            except ConfigParseError as e:
                logger.error(
                    f"Skipping malformed format rule: {e.message}",
                    extra={"rule_code": row.format_code, "error_code": e.code},
                )
        return rules

    async def get_rule(self, id_or_code: int | str) -> FormatRule | None:
        """Look up by numeric id or by code."""
        if isinstance(id_or_code, int):
            row = await self._row_by_id(id_or_code)
        else:
            row = await self._row_by_code(id_or_code)
        return _to_domain(row) if row is not None else None

    async def require_rule(self, id_or_code: int | str) -> FormatRule:
        rule = await self.get_rule(id_or_code)
        if rule is None:
            raise NotFoundError("FormatRule", str(id_or_code))
        return rule

    async def get_override(self, identifier: str) -> FormatOverride | None:
        row = await self.db.get(
            FormatOverrideRow, identifier, populate_existing=True,
        )
        return _override_to_domain(row) if row is not None else None

    async def get_classification(
        self, identifier: str,
    ) -> IdentifierClassification | None:
        return await self.registry.get_classification(identifier)

    # ─── Helpers ────────────────────────────────────────────────

    async def _commit_rule(self, context: ErrorContext) -> None:
        """Commit a rule write; a unique index lost to a concurrent writer is a ValidationError."""
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            field = violated_field(e, _UNIQUE_FIELDS)
            if field is None:
                raise
            logger.warning(
                f"Concurrent write conflict on {field}",
                extra={"rule_code": context.rule_code, "rule_id": context.rule_id},
            )
            if field == "code":
                raise ValidationError(
                    f"Format code '{context.rule_code}' already exists", field, context,
                ) from e
            raise ValidationError(
                "Another rule became the default concurrently; retry", field, context,
            ) from e

    async def _row_by_id(self, rule_id: int) -> FormatRuleRow | None:
        return await self.db.get(FormatRuleRow, rule_id, populate_existing=True)

    async def _row_by_code(self, code: str) -> FormatRuleRow | None:
        result = await self.db.execute(
            select(FormatRuleRow)
            .where(FormatRuleRow.format_code == code)
            .execution_options(populate_existing=True),
        )
        return result.scalar_one_or_none()

    async def _clear_default(self) -> None:
        """Unset the current default; runs inside the caller's transaction."""
        await self.db.execute(
            update(FormatRuleRow)
            .where(FormatRuleRow.is_default.is_(True))
            .values(is_default=False)
            .execution_options(synchronize_session="fetch"),
        )


def _to_columns(data: dict[str, Any]) -> dict[str, Any]:
    """Map domain field names to column values, normalizing as we go."""
    unknown = set(data) - set(_COLUMNS)
    if unknown:
        raise ValidationError(
            f"Unknown format rule field(s): {', '.join(sorted(unknown))}",
            sorted(unknown)[0],
        )
    values = {_COLUMNS[key]: value for key, value in data.items()}
    if "segment_lengths" in values:
        try:
            values["segment_lengths"] = list(
                normalize_segment_lengths(values["segment_lengths"]),
            )
        except ConfigParseError as e:
            raise ValidationError(e.message, "segment_lengths") from e
    if "display_case" in values:
        values["display_case"] = normalize_case_mode(values["display_case"]).value
    return values


def _to_domain(row: FormatRuleRow) -> FormatRule:
    return FormatRule(
        id=FormatRuleId(row.id),
        code=row.format_code,
        name=row.name,
        description=row.description,
        separator=row.separator or "",
        segment_lengths=normalize_segment_lengths(row.segment_lengths),
        total_length=row.total_length,
        case_mode=normalize_case_mode(row.display_case),
        prefix=row.prefix or "",
        suffix=row.suffix or "",
        is_default=bool(row.is_default),
        applies_to_scope=row.applies_to_scope,
        applies_to_mode=row.applies_to_mode,
        created_by=row.created_by,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _override_to_domain(row: FormatOverrideRow) -> FormatOverride:
    return FormatOverride(
        identifier=row.identifier,
        format_rule_id=FormatRuleId(row.format_rule_id),
        created_at=row.created_at,
    )
