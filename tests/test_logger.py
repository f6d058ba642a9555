"""Unit tests for logging setup."""

from __future__ import annotations

import logging
import sys

import pytest

from putioarr.utils.logger import get_logger, parse_level, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_setup_logging_writes_to_stderr(restore_root_logger) -> None:
    setup_logging("debug")

    stream_handlers = [h for h in restore_root_logger.handlers if isinstance(h, logging.StreamHandler)]
    assert len(stream_handlers) == 1
    assert stream_handlers[0].stream is sys.stderr
    assert restore_root_logger.level == logging.DEBUG


@pytest.mark.parametrize(
    ("name", "expected"),
    [("info", logging.INFO), ("WARN", logging.WARNING), ("trace", logging.DEBUG), ("bogus", logging.INFO)],
)
def test_parse_level(name: str, expected: int) -> None:
    assert parse_level(name) == expected


def test_get_logger_namespaces_under_putioarr() -> None:
    assert get_logger("producer").name == "putioarr.producer"
