from __future__ import annotations

from collections.abc import Iterator

import pytest

from utils.logger_utils import LoggerUtils


@pytest.fixture(autouse=True)
def _restore_namespace_log_level() -> Iterator[None]:
    """Keep log-level changes made by one test from leaking into the next."""
    logger = LoggerUtils.get_logger()
    original: int = logger.level
    yield
    logger.setLevel(original)
