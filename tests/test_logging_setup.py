import json
import logging

from cloudsql_scheduler.config import SchedulerConfig
from cloudsql_scheduler.logging_setup import JsonFormatter, configure_logging


def _handlers(logger):
    return [h for h in logger.handlers if getattr(h, "_scheduler_handler", False)]


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord("cloudsql_scheduler.dispatcher", logging.INFO, __file__, 1, "Patched %s", ("db1",), None)
    record.instance = "db1"

    entry = json.loads(JsonFormatter().format(record))

    assert entry["severity"] == "INFO"
    assert entry["message"] == "Patched db1"
    assert entry["instance"] == "db1"
    assert entry["logger"] == "cloudsql_scheduler.dispatcher"


def test_configure_logging_is_idempotent():
    logger = configure_logging(SchedulerConfig(structured_logging=True, log_level="DEBUG"))
    configure_logging(SchedulerConfig(structured_logging=False, log_level="WARNING"))

    handlers = _handlers(logger)
    assert len(handlers) == 1
    assert not isinstance(handlers[0].formatter, JsonFormatter)
    assert logger.level == logging.WARNING
