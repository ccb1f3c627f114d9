"""JSON log formatter - base fields plus known extras."""

import json
import logging

from idformat.infrastructure.observability import JSONFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "idformat.services.config_store", logging.INFO, __file__, 1,
        "Created format rule %s", ("TAX_ID",), None,
    )
    record.__dict__.update(extra)
    return record


def test_base_fields():
    log = json.loads(JSONFormatter().format(_record()))
    assert log["level"] == "INFO"
    assert log["logger"] == "idformat.services.config_store"
    assert log["message"] == "Created format rule TAX_ID"
    assert "timestamp" in log


def test_known_extras_surface_and_unknown_ignored():
    log = json.loads(JSONFormatter().format(
        _record(rule_code="TAX_ID", rule_id=3, favourite_colour="teal"),
    ))
    assert log["rule_code"] == "TAX_ID"
    assert log["rule_id"] == 3
    assert "favourite_colour" not in log
