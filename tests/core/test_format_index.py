"""Format index - multi-key slots and scope > mode > default selection."""

from idformat.core.format_index import FormatIndex

from tests.core.rule_factory import make_rule


def _index():
    return FormatIndex.build([
        make_rule(1, code="STD", is_default=True),
        make_rule(2, code="HEALTH", applies_to_scope="health"),
        make_rule(3, code="RANDOM", applies_to_mode="random"),
        make_rule(4, code="BOTH", applies_to_scope="tax", applies_to_mode="sector_token"),
    ])


def test_empty_index():
    index = FormatIndex.build([])
    assert index.is_empty()
    assert index.default is None
    assert index.pick("health", "random") is None


def test_lookup_by_id_and_code():
    index = _index()
    assert index.lookup(2).code == "HEALTH"
    assert index.lookup("RANDOM").id == 3
    assert index.lookup(99) is None
    assert index.lookup("MISSING") is None


def test_scope_wins_over_mode():
    assert _index().pick("health", "random").code == "HEALTH"


def test_mode_used_when_scope_unmatched():
    assert _index().pick("unknown", "random").code == "RANDOM"


def test_default_when_nothing_matches():
    assert _index().pick("unknown", "unknown").code == "STD"
    assert _index().pick().code == "STD"


def test_last_seen_rule_wins_shared_slots():
    index = FormatIndex.build([
        make_rule(1, code="OLD_DEFAULT", is_default=True, applies_to_scope="health"),
        make_rule(2, code="NEW_DEFAULT", is_default=True, applies_to_scope="health"),
    ])
    assert index.default.code == "NEW_DEFAULT"
    assert index.by_scope["health"].code == "NEW_DEFAULT"


def test_same_rules_build_equal_indexes():
    rules = [make_rule(1, is_default=True), make_rule(2, applies_to_mode="random")]
    assert FormatIndex.build(rules) == FormatIndex.build(list(rules))
