"""Tests for logging setup."""

import json
import logging
import sys

from db_demo_worker.config.settings import LoggingConfig
from db_demo_worker.utils.logging import JSONFormatter, TextFormatter, setup_logging


def _record(message="[Postgres] Inserted 2024-01-01T00:00:00+00:00", **extra):
    record = logging.LogRecord(
        name="db_demo_worker.worker",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter():
    output = json.loads(JSONFormatter().format(_record(service="db-demo-worker")))

    assert output["level"] == "INFO"
    assert output["logger"] == "db_demo_worker.worker"
    assert output["message"] == "[Postgres] Inserted 2024-01-01T00:00:00+00:00"
    assert output["service"] == "db-demo-worker"
    assert output["timestamp"].endswith("Z")
    assert "msg" not in output


def test_text_formatter_without_colors():
    output = TextFormatter(use_colors=False).format(_record())

    assert "[INFO] db_demo_worker.worker: [Postgres] Inserted" in output


def test_setup_logging_json(restore_root_logger, capsys):
    setup_logging(LoggingConfig(level="WARNING", format="json", output="stdout"), "test-worker")

    root = restore_root_logger
    assert root.level == logging.WARNING
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, JSONFormatter)
    assert logging.getLogger("asyncpg").level == logging.WARNING

    logging.getLogger("db_demo_worker.test").warning("[MySQL] Inserted now")
    line = capsys.readouterr().out.strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["message"] == "[MySQL] Inserted now"
    assert payload["service"] == "test-worker"


def test_setup_logging_to_file(restore_root_logger, tmp_path):
    log_file = tmp_path / "worker.log"

    setup_logging(LoggingConfig(level="INFO", format="text", output=str(log_file)))
    logging.getLogger("db_demo_worker.test").info("hello")
    for handler in restore_root_logger.handlers:
        handler.flush()

    assert "hello" in log_file.read_text()


def test_json_formatter_keeps_extras_and_drops_record_internals():
    try:
        raise ConnectionResetError("server closed the connection")
    except ConnectionResetError:
        record = _record(backend="mysql")
        record.exc_info = sys.exc_info()

    output = json.loads(JSONFormatter().format(record))

    assert output["backend"] == "mysql"
    assert "ConnectionResetError" in output["exception"]
    for internal in ("args", "exc_info", "levelno", "created", "thread", "msecs"):
        assert internal not in output
