"""Tests for logging configuration."""

import logging
from typing import Iterator
from unittest.mock import patch

import pytest

from tidetime import logging_utils


@pytest.fixture
def restore_root_logger() -> Iterator[logging.Logger]:
    root = logging.getLogger()
    handlers, filters, level = root.handlers[:], root.filters[:], root.level
    chatty = {
        name: logging.getLogger(name).level for name in logging_utils.CHATTY_LOGGERS
    }
    yield root
    root.handlers[:] = handlers
    root.filters[:] = filters
    root.setLevel(level)
    for name, chatty_level in chatty.items():
        logging.getLogger(name).setLevel(chatty_level)


@pytest.mark.parametrize(
    "level,expected",
    [
        (logging.DEBUG, logging.DEBUG),
        ("warning", logging.WARNING),
        (" Error ", logging.ERROR),
        ("INFO", logging.INFO),
    ],
)
def test_parse_level(level: object, expected: int) -> None:
    assert logging_utils.parse_level(level) == expected  # type: ignore[arg-type]


def test_parse_level_unknown() -> None:
    with pytest.raises(ValueError, match="Unknown log level"):
        logging_utils.parse_level("chatty")


def test_relative_path_filter() -> None:
    record = logging.LogRecord(
        "test",
        logging.INFO,
        f"{logging_utils.PROJECT_ROOT}/tidetime/api.py",
        10,
        "message",
        None,
        None,
    )
    assert logging_utils.RelativePathFilter().filter(record)
    assert record.relativepath == "tidetime/api.py"


def test_setup_logging_local(
    restore_root_logger: logging.Logger, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv(logging_utils.CLOUD_RUN_ENV, raising=False)
    logging_utils.setup_logging("DEBUG")

    root = restore_root_logger
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    handler = root.handlers[0]
    assert isinstance(handler, logging.StreamHandler)
    assert any(
        isinstance(f, logging_utils.RelativePathFilter) for f in handler.filters
    )
    # Library loggers stay at WARNING even in debug mode
    assert logging.getLogger("urllib3").level == logging.WARNING

    # Calling again doesn't stack handlers or filters
    logging_utils.setup_logging()
    assert root.level == logging.INFO
    assert len(root.handlers) == 1
    assert (
        sum(isinstance(f, logging_utils.RelativePathFilter) for f in root.filters)
        == 1
    )


def test_setup_logging_unknown_level(restore_root_logger: logging.Logger) -> None:
    with pytest.raises(ValueError):
        logging_utils.setup_logging("loud")


def test_setup_logging_cloud_run(
    restore_root_logger: logging.Logger, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv(logging_utils.CLOUD_RUN_ENV, "tidetime")
    with patch.object(logging_utils.google.cloud.logging, "Client") as mock_client:
        logging_utils.setup_logging(logging.WARNING)
    mock_client.return_value.setup_logging.assert_called_once_with(
        log_level=logging.WARNING
    )
