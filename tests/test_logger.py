# File: tests/test_logger.py
import logging

import pytest

from index_ping.logger import configure, get_logger


@pytest.mark.parametrize(
    "value,expected",
    [
        ("debug", logging.DEBUG),
        (" Warning ", logging.WARNING),
        ("verbose", logging.INFO),
        ("", logging.INFO),
    ],
)
def test_level_from_environment(monkeypatch, value, expected):
    monkeypatch.setenv("INDEXPING_LOG_LEVEL", value)
    assert configure().level == expected


def test_explicit_level_wins(monkeypatch):
    monkeypatch.setenv("INDEXPING_LOG_LEVEL", "verbose")
    assert configure(level="ERROR").level == logging.ERROR


def test_component_loggers_share_project_handlers(tmp_path):
    log_file = tmp_path / "indexping.log"
    configure(level="INFO", log_file=log_file)

    get_logger("submitter").info("batch accepted")
    for handler in logging.getLogger("IndexPing").handlers:
        handler.flush()

    line = log_file.read_text(encoding="utf-8")
    assert "IndexPing.submitter" in line
    assert "batch accepted" in line
