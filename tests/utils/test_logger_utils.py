from __future__ import annotations

import logging

import pytest

from utils.logger_utils import DEFAULT_NAMESPACE, LoggerUtils


def test_module_loggers_live_below_namespace() -> None:
    assert LoggerUtils.get_logger("core.trans.service").name == f"{DEFAULT_NAMESPACE}.core.trans.service"
    assert LoggerUtils.get_logger().name == DEFAULT_NAMESPACE


def test_set_level_round_trip() -> None:
    original: int = LoggerUtils.get_logger().level
    try:
        LoggerUtils.set_level("DEBUG")
        assert LoggerUtils.get_level().name == "DEBUG"
        assert LoggerUtils.get_level().value == logging.DEBUG
    finally:
        LoggerUtils.get_logger().setLevel(original)


def test_unknown_level_falls_back_to_info(caplog: pytest.LogCaptureFixture) -> None:
    original: int = LoggerUtils.get_logger().level
    try:
        LoggerUtils.set_level("LOUD")  # type: ignore[arg-type]
        assert LoggerUtils.get_level().name == "INFO"
        assert any("Unknown logging level" in rec.message for rec in caplog.records)
    finally:
        LoggerUtils.get_logger().setLevel(original)
