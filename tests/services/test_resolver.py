"""Format Resolver - precedence, registry classification, cache coherence, preview.

Invariants:
    - override → scope → mode → default → None, first match wins
    - Zero rules: raw identifier comes back unchanged with no rule code
    - A store mutation is visible on the very next resolution
"""

import pytest
from sqlalchemy import update

from idformat.core.domain_types import FormatResult
from idformat.core.errors import NotFoundError
from idformat.models.format_override import FormatOverrideRow
from idformat.models.format_rule import FormatRuleRow
from idformat.models.identifier_record import IdentifierRecord

from tests.services.rule_payloads import rule_data


@pytest.fixture
async def catalogue(store):
    """Default, scope, and mode rules - the usual production shape."""
    return {
        "default": await store.create(rule_data(
            "OSIA_STANDARD", separator=".", segment_lengths=[5, 4, 4, 4, 2],
            is_default=True, applies_to_mode="foundational",
        )),
        "health": await store.create(rule_data(
            "HEALTH_ID", segment_lengths=[8, 4], prefix="HLT-",
            applies_to_scope="health",
        )),
        "random": await store.create(rule_data(
            "SHORT_ID", segment_lengths=[4, 4, 4], applies_to_mode="random",
        )),
    }


async def _register(test_db, identifier, scope=None, mode=None):
    test_db.add(IdentifierRecord(identifier=identifier, scope=scope, mode=mode))
    await test_db.commit()


async def test_zero_rules_returns_raw_identifier(resolver):
    result = await resolver.format("abc123def456")
    assert result == FormatResult(raw="abc123def456", formatted="abc123def456", rule_code=None)


async def test_unregistered_identifier_uses_default(resolver, catalogue):
    result = await resolver.format("abcde1234fghi5678jk")
    assert result.formatted == "ABCDE.1234.FGHI.5678.JK"
    assert result.rule_code == "OSIA_STANDARD"


async def test_scope_rule_from_registry(resolver, catalogue, test_db):
    await _register(test_db, "abcdefgh1234", scope="health", mode="random")
    result = await resolver.format("abcdefgh1234")
    assert result.formatted == "HLT-ABCDEFGH-1234"
    assert result.rule_code == "HEALTH_ID"


async def test_mode_rule_when_scope_has_no_rule(resolver, catalogue, test_db):
    await _register(test_db, "abcd1234efgh", scope="tax", mode="random")
    result = await resolver.format("abcd1234efgh")
    assert result.formatted == "ABCD-1234-EFGH"
    assert result.rule_code == "SHORT_ID"


async def test_default_when_classification_matches_nothing(resolver, catalogue, test_db):
    await _register(test_db, "abcd1234efgh", scope="tax", mode="sector_token")
    assert (await resolver.format("abcd1234efgh")).rule_code == "OSIA_STANDARD"


async def test_override_beats_scope(resolver, store, catalogue, test_db):
    await _register(test_db, "abcdefgh1234", scope="health")
    await store.upsert_override("abcdefgh1234", catalogue["random"].id)
    rule = await resolver.resolve("abcdefgh1234")
    assert rule.code == "SHORT_ID"
    assert (await resolver.resolve("abcdefgh1234", scope="health")).code == "SHORT_ID"


async def test_explicit_scope_and_mode_skip_registry(resolver, catalogue, test_db):
    await _register(test_db, "abcdefgh1234", scope="health")
    rule = await resolver.resolve("abcdefgh1234", mode="random")
    assert rule.code == "SHORT_ID"


async def test_override_to_missing_rule_falls_back_to_classification(
    resolver, catalogue, test_db,
):
    test_db.add(FormatOverrideRow(identifier="abcdefgh1234", format_rule_id=9999))
    await test_db.commit()
    await _register(test_db, "abcdefgh1234", scope="health")
    assert (await resolver.resolve("abcdefgh1234")).code == "HEALTH_ID"


async def test_updated_default_separator_visible_immediately(resolver, store, catalogue):
    before = await resolver.format("abcde1234fghi5678jk")
    assert before.formatted == "ABCDE.1234.FGHI.5678.JK"

    await store.update(catalogue["default"].id, {"separator": "-"})

    after = await resolver.format("abcde1234fghi5678jk")
    assert after.formatted == "ABCDE-1234-FGHI-5678-JK"


async def test_out_of_band_change_visible_after_ttl(resolver, catalogue, test_db, clock):
    await resolver.format("abcde1234fghi5678jk")
    await test_db.execute(
        update(FormatRuleRow)
        .where(FormatRuleRow.format_code == "OSIA_STANDARD")
        .values(separator=" "),
    )
    await test_db.commit()

    assert (await resolver.format("abcde1234fghi5678jk")).formatted == "ABCDE.1234.FGHI.5678.JK"
    clock.advance(60)
    assert (await resolver.format("abcde1234fghi5678jk")).formatted == "ABCDE 1234 FGHI 5678 JK"


async def test_new_default_takes_over(resolver, store, catalogue):
    await store.create(rule_data(
        "OSIA_DASHED", segment_lengths=[5, 4, 4, 4, 2], is_default=True,
    ))
    assert (await resolver.format("abcde1234fghi5678jk")).rule_code == "OSIA_DASHED"


async def test_format_many_resolves_each(resolver, store, catalogue, test_db):
    await _register(test_db, "abcdefgh1234", scope="health")
    results = await resolver.format_many(["abcdefgh1234", "abcde1234fghi5678jk"])
    assert [r.rule_code for r in results] == ["HEALTH_ID", "OSIA_STANDARD"]


async def test_preview_by_code_and_id(resolver, catalogue):
    by_code = await resolver.preview("abc123defghi", "SHORT_ID")
    by_id = await resolver.preview("abc123defghi", catalogue["random"].id)
    assert by_code.formatted == by_id.formatted == "ABC1-23DE-FGHI"
    assert by_code.rule_code == "SHORT_ID"


async def test_preview_unknown_rule_raises(resolver, catalogue):
    with pytest.raises(NotFoundError):
        await resolver.preview("abc123defghi", "NOPE")
