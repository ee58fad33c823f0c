from __future__ import annotations

import logging

from ppcalc.errors import (
    ConfigurationError,
    InvalidInputError,
    PpcalcError,
    build_error_payload,
    log_error,
)


def test_payload_sanitises_context_values() -> None:
    payload = build_error_payload(
        "bad input", category="input", context={"index": 3, "values": [1, 2], "note": None}
    )

    assert payload.as_dict() == {
        "category": "input",
        "message": "bad input",
        "context": {"index": 3, "values": "[1, 2]", "note": None},
    }


def test_error_hierarchy_carries_categories() -> None:
    error = InvalidInputError("negative count", context={"field": "great"})

    assert isinstance(error, PpcalcError)
    assert isinstance(error, ValueError)
    assert error.payload.category == "input"
    assert error.context == {"field": "great"}
    assert ConfigurationError("broken").payload.category == "configuration"
    assert PpcalcError("boom").payload.context == {}


def test_log_error_emits_structured_record(caplog) -> None:
    caplog.set_level(logging.ERROR, logger="ppcalc")
    payload = ConfigurationError("broken table", context={"section": "skills"}).payload

    log_error(payload)

    (record,) = [entry for entry in caplog.records if entry.name == "ppcalc"]
    assert record.getMessage() == "broken table"
    assert record.event == "configuration.error"
    assert record.context == {"section": "skills"}
