# jqline:header:start
#
#   project      : jqline
#   file         : test_logging_setup.py
#   file_relpath : tests/config/test_logging_setup.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Unit tests for the TRACE-capable logging setup."""

from __future__ import annotations

import logging as std_logging

import pytest

from jqline.config.logging import (
    TRACE_LEVEL,
    JqlineLogger,
    get_logger,
    resolve_env_log_level,
    setup_logging,
)
from jqline.constants import ENV_LOG_LEVEL
from tests.conftest import parametrize


@parametrize(
    "raw, level",
    [
        ("trace", TRACE_LEVEL),
        ("DEBUG", std_logging.DEBUG),
        (" warn ", std_logging.WARNING),
        ("15", 15),
        ("bogus", None),
    ],
)
def test_resolve_env_log_level(
    monkeypatch: pytest.MonkeyPatch, raw: str, level: int | None
) -> None:
    monkeypatch.setenv(ENV_LOG_LEVEL, raw)

    assert resolve_env_log_level() == level


def test_unset_env_log_level() -> None:
    assert resolve_env_log_level() is None


def test_loggers_support_trace(caplog: pytest.LogCaptureFixture) -> None:
    logger = get_logger("jqline.tests.trace")
    assert isinstance(logger, JqlineLogger)

    with caplog.at_level(TRACE_LEVEL, logger="jqline.tests.trace"):
        logger.trace("value %d", 42)

    assert [r.levelname for r in caplog.records] == ["TRACE"]
    assert caplog.records[0].getMessage() == "value 42"


def test_setup_logging_defaults_to_critical() -> None:
    try:
        setup_logging()
        assert std_logging.getLogger().level == std_logging.CRITICAL
        assert len(std_logging.getLogger().handlers) == 1
    finally:
        setup_logging(level=TRACE_LEVEL)
