import json
import logging

from authcore.logging import UTCJsonFormatter, setup_logging


def test_formatter_emits_json_with_extras():
    formatter = UTCJsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    record = logging.LogRecord(
        "authcore.test", logging.INFO, __file__, 1, "cache sweep finished", None, None
    )
    record.deleted = 3
    payload = json.loads(formatter.format(record))
    assert payload["message"] == "cache sweep finished"
    assert payload["levelname"] == "INFO"
    assert payload["deleted"] == 3


def test_setup_logging_installs_single_handler():
    root = logging.getLogger()
    saved = root.handlers[:], root.level
    try:
        setup_logging("debug")
        setup_logging("debug")
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, UTCJsonFormatter)
        assert root.level == logging.DEBUG
    finally:
        root.handlers[:], level = saved
        root.setLevel(level)
