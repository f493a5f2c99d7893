"""
Tests for the JSON log formatter
"""

import json
import logging

from abacus.logger import JsonFormatter, get_logger


def test_child_loggers_share_the_root():
    root = get_logger()
    child = get_logger("abacus.buisness.assets")

    assert root.name == "abacus"
    assert child.name == "abacus.buisness.assets"
    assert child.propagate
    assert root.handlers, "Handlers live on the shared root"


def test_json_formatter_outputs_requested_fields():
    formatter = JsonFormatter({"level": "levelname", "logger": "name", "message": "message"})
    record = logging.LogRecord("abacus.test", logging.WARNING, __file__, 10, "Asset %s rejected", (7,), None)

    payload = json.loads(formatter.format(record))

    assert payload == {"level": "WARNING", "logger": "abacus.test", "message": "Asset 7 rejected"}
