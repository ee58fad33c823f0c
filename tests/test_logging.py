from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from ppcalc.logging import JsonFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("ppcalc.test", logging.WARNING, __file__, 10, "hello %s", ("world",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields() -> None:
    payload = json.loads(JsonFormatter().format(_record(event="test.event", skill="aim")))

    assert payload["message"] == "hello world"
    assert payload["level"] == "warning"
    assert payload["logger"] == "ppcalc.test"
    assert payload["event"] == "test.event"
    assert payload["skill"] == "aim"
    assert "args" not in payload
    assert "timestamp" in payload


def test_json_formatter_serialises_unknown_objects() -> None:
    payload = json.loads(JsonFormatter().format(_record(path=Path("maps"))))

    assert payload["path"] == "maps"


@pytest.mark.usefixtures("restore_package_loggers")
def test_setup_logging_writes_json_to_file(tmp_path: Path) -> None:
    destination = tmp_path / "ppcalc.log"

    loggers = setup_logging({"logging": {"level": "debug", "output": str(destination)}})
    logging.getLogger("ppcalc.difficulty").debug("computed", extra={"event": "difficulty.calculated"})
    for logger in loggers:
        for handler in logger.handlers:
            handler.flush()

    assert [logger.name for logger in loggers] == ["ppcalc", "ppcore"]
    assert all(logger.level == logging.DEBUG for logger in loggers)
    line = destination.read_text(encoding="utf8").strip().splitlines()[-1]
    assert json.loads(line)["event"] == "difficulty.calculated"


@pytest.mark.usefixtures("restore_package_loggers")
def test_setup_logging_replaces_previous_handler() -> None:
    setup_logging()
    setup_logging({"logging": {"format": "text", "output": "stdout"}})

    handlers = [
        handler
        for handler in logging.getLogger("ppcalc").handlers
        if getattr(handler, "_ppcalc_handler", False)
    ]
    assert len(handlers) == 1
    assert not isinstance(handlers[0].formatter, JsonFormatter)
    assert logging.getLogger("ppcore").handlers[-1] is handlers[0]


@pytest.mark.parametrize(
    "options",
    [{"level": "chatty"}, {"format": "xml"}],
)
def test_setup_logging_rejects_unknown_options(options) -> None:
    with pytest.raises(ValueError):
        setup_logging({"logging": options})
