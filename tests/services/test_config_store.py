"""Format Config Store - CRUD, uniqueness, default protection, normalization, invalidation.

Invariants:
    - Duplicate code → ValidationError (create and rename)
    - Only one default at a time; the default cannot be deleted
    - Every mutation leaves the cache stale
"""

import pytest

from idformat.core.domain_types import CaseMode, IdentifierClassification
from idformat.core.errors import (
    ConfigParseError, NotFoundError, ProtectedRecordError, ValidationError,
)
from idformat.models.format_override import FormatOverrideRow
from idformat.models.format_rule import FormatRuleRow
from idformat.models.identifier_record import IdentifierRecord

from tests.services.rule_payloads import rule_data


# -- create --------------------------------------------------------------------

async def test_create_returns_normalized_rule(store):
    rule = await store.create(rule_data("SHORT_ID", segment_lengths="{4,4,4}"))
    assert rule.id is not None
    assert rule.code == "SHORT_ID"
    assert rule.segment_lengths == (4, 4, 4)
    assert rule.total_length == 12
    assert rule.case_mode is CaseMode.UPPER
    assert rule.created_at is not None


async def test_create_keeps_explicit_total_length(store):
    rule = await store.create(rule_data("OSIA", total_length=19))
    assert rule.total_length == 19


async def test_create_duplicate_code_raises_validation_error(store):
    await store.create(rule_data("TAX_ID"))
    with pytest.raises(ValidationError) as exc_info:
        await store.create(rule_data("TAX_ID", name="Another"))
    assert exc_info.value.field == "code"


async def test_create_rejects_unparseable_segments(store):
    with pytest.raises(ValidationError) as exc_info:
        await store.create(rule_data("BAD", segment_lengths="{4,x}"))
    assert exc_info.value.field == "segment_lengths"


async def test_create_rejects_unicode_digit_segments(store):
    with pytest.raises(ValidationError) as exc_info:
        await store.create(rule_data("SUP", segment_lengths="²,4"))
    assert exc_info.value.field == "segment_lengths"


async def test_create_rejects_unknown_fields(store):
    with pytest.raises(ValidationError):
        await store.create(rule_data("ODD", colour="red"))


async def test_create_second_default_unsets_first(store):
    first = await store.create(rule_data("FIRST", is_default=True))
    second = await store.create(rule_data("SECOND", is_default=True))
    assert second.is_default
    assert not (await store.get_rule(first.id)).is_default
    defaults = [r for r in await store.list_rules() if r.is_default]
    assert [r.code for r in defaults] == ["SECOND"]


# -- update --------------------------------------------------------------------

async def test_update_applies_patch_and_bumps_timestamp(store):
    rule = await store.create(rule_data("DOTTED"))
    updated = await store.update(rule.id, {"separator": ".", "prefix": "ID:"})
    assert updated.separator == "."
    assert updated.prefix == "ID:"
    assert updated.name == rule.name
    assert updated.updated_at > rule.updated_at


async def test_update_unknown_rule_raises_not_found(store):
    with pytest.raises(NotFoundError):
        await store.update(4242, {"separator": "."})


async def test_update_rename_to_existing_code_raises(store):
    await store.create(rule_data("TAKEN"))
    other = await store.create(rule_data("FREE"))
    with pytest.raises(ValidationError):
        await store.update(other.id, {"code": "TAKEN"})


async def test_update_keeping_own_code_is_allowed(store):
    rule = await store.create(rule_data("SAME"))
    updated = await store.update(rule.id, {"code": "SAME", "name": "Renamed"})
    assert updated.name == "Renamed"


async def test_update_to_default_moves_default(store):
    old = await store.create(rule_data("OLD", is_default=True))
    new = await store.create(rule_data("NEW"))
    await store.update(new.id, {"is_default": True})
    assert (await store.get_rule(new.id)).is_default
    assert not (await store.get_rule(old.id)).is_default


# -- delete --------------------------------------------------------------------

async def test_delete_default_is_refused_and_rule_survives(store):
    default = await store.create(rule_data("STD", is_default=True))
    with pytest.raises(ProtectedRecordError):
        await store.delete(default.id)
    assert (await store.get_rule(default.id)).code == "STD"


async def test_delete_removes_rule(store):
    rule = await store.create(rule_data("GONE"))
    assert await store.delete(rule.id) is True
    assert await store.get_rule(rule.id) is None


async def test_delete_missing_rule_returns_false(store):
    assert await store.delete(999) is False


async def test_delete_rule_bound_by_override_is_refused(store):
    rule = await store.create(rule_data("BOUND"))
    await store.upsert_override("UIN0001", rule.id)
    with pytest.raises(ProtectedRecordError):
        await store.delete(rule.id)


# -- overrides -----------------------------------------------------------------

async def test_upsert_override_inserts_then_replaces(store):
    a = await store.create(rule_data("A"))
    b = await store.create(rule_data("B"))
    await store.upsert_override("UIN0001", a.id)
    replaced = await store.upsert_override("UIN0001", b.id)
    assert replaced.format_rule_id == b.id
    assert (await store.get_override("UIN0001")).format_rule_id == b.id


async def test_upsert_override_unknown_rule_raises(store):
    with pytest.raises(NotFoundError):
        await store.upsert_override("UIN0001", 77)


async def test_delete_override_reports_removal(store):
    rule = await store.create(rule_data("A"))
    await store.upsert_override("UIN0001", rule.id)
    assert await store.delete_override("UIN0001") is True
    assert await store.delete_override("UIN0001") is False
    assert await store.get_override("UIN0001") is None


# -- reads ---------------------------------------------------------------------

async def test_list_rules_default_first_then_by_name(store):
    await store.create(rule_data("ZULU", name="Zulu"))
    await store.create(rule_data("ALPHA", name="Alpha"))
    await store.create(rule_data("MIKE", name="Mike", is_default=True))
    assert [r.code for r in await store.list_rules()] == ["MIKE", "ALPHA", "ZULU"]


async def test_get_rule_by_id_or_code(store):
    rule = await store.create(rule_data("HEALTH_ID"))
    assert (await store.get_rule(rule.id)).code == "HEALTH_ID"
    assert (await store.get_rule("HEALTH_ID")).id == rule.id
    assert await store.get_rule("NOPE") is None


async def test_require_rule_raises_not_found(store):
    with pytest.raises(NotFoundError):
        await store.require_rule("NOPE")


async def test_get_classification_reads_registry(store, test_db):
    test_db.add(IdentifierRecord(identifier="UIN0001", scope="health", mode="sector_token"))
    await test_db.commit()
    assert await store.get_classification("UIN0001") == IdentifierClassification(
        identifier="UIN0001", scope="health", mode="sector_token",
    )
    assert await store.get_classification("UNKNOWN") is None


# -- storage boundary ----------------------------------------------------------

async def test_legacy_array_literal_is_normalized_on_read(store, test_db):
    test_db.add(FormatRuleRow(
        format_code="LEGACY", name="Legacy", segment_lengths="{5,4,4,4,2}",
        total_length=19,
    ))
    await test_db.commit()
    assert (await store.get_rule("LEGACY")).segment_lengths == (5, 4, 4, 4, 2)


async def test_malformed_row_skipped_by_load_but_raised_on_lookup(store, test_db):
    await store.create(rule_data("GOOD"))
    test_db.add(FormatRuleRow(
        format_code="BROKEN", name="Broken", segment_lengths="{5,x}",
        total_length=5,
    ))
    await test_db.commit()
    assert [r.code for r in await store.load_rules()] == ["GOOD"]
    with pytest.raises(ConfigParseError):
        await store.get_rule("BROKEN")


async def test_unicode_digit_row_skipped_by_load(store, test_db):
    await store.create(rule_data("GOOD"))
    test_db.add(FormatRuleRow(
        format_code="SUPERSCRIPT", name="Superscript", segment_lengths="{²,4}",
        total_length=6,
    ))
    await test_db.commit()
    assert [r.code for r in await store.load_rules()] == ["GOOD"]


# -- cache invalidation --------------------------------------------------------

async def test_every_mutation_invalidates_cache(store, cache):
    async def prime():
        await cache.current(store.load_rules)
        assert not cache.is_stale()

    rule = await store.create(rule_data("BASE", is_default=True))
    other = await store.create(rule_data("OTHER"))

    await prime()
    await store.update(rule.id, {"separator": "."})
    assert cache.is_stale()

    await prime()
    await store.upsert_override("UIN0001", other.id)
    assert cache.is_stale()

    await prime()
    await store.delete_override("UIN0001")
    assert cache.is_stale()

    await prime()
    await store.delete(other.id)
    assert cache.is_stale()

    await prime()
    await store.create(rule_data("LATE"))
    assert cache.is_stale()


async def test_override_row_points_at_rule(test_db, store):
    rule = await store.create(rule_data("A"))
    await store.upsert_override("UIN0002", rule.id)
    row = await test_db.get(FormatOverrideRow, "UIN0002")
    assert row.format_rule_id == rule.id
