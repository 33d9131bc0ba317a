import logging

import pytest

from cloudcall.infrastructure.monitoring.logger_setup import setup_logging


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    saved = (root.level, root.handlers[:])
    sdk_levels = {name: logging.getLogger(name).level for name in ("boto3", "botocore")}
    yield
    for handler in root.handlers[:]:
        if handler not in saved[1]:
            handler.close()
    root.setLevel(saved[0])
    root.handlers[:] = saved[1]
    for name, level in sdk_levels.items():
        logging.getLogger(name).setLevel(level)


def test_sdk_loggers_quiet_by_default():
    setup_logging(log_level=logging.INFO)
    assert logging.getLogger().level == logging.INFO
    assert logging.getLogger("botocore").level == logging.WARNING
    assert logging.getLogger("boto3").level == logging.WARNING


def test_sdk_debug_enables_wire_logging():
    setup_logging(log_level=logging.WARNING, sdk_debug=True)
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("botocore").level == logging.DEBUG


def test_file_handler(tmp_path):
    log_file = tmp_path / "cloudcall.log"
    setup_logging(log_level=logging.INFO, log_file=str(log_file))

    logging.getLogger("cloudcall.test").info("hello from test")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert "hello from test" in log_file.read_text()
    assert len(logging.getLogger().handlers) == 2
