"""Shared fixtures for procspy tests."""

import logging

import pytest

from procspy.models import ProcessRecord, Snapshot


def build_snapshot(count: int, start_pid: int = 100, truncated: bool = False) -> Snapshot:
    records = tuple(
        ProcessRecord(pid=start_pid + i, owner="user", command=f"/bin/proc{i}")
        for i in range(count)
    )
    return Snapshot(records=records, truncated=truncated)


@pytest.fixture()
def make_snapshot():
    return build_snapshot


@pytest.fixture()
def procspy_logger():
    """The package logger, restored to its prior handlers and level afterwards."""
    logger = logging.getLogger("procspy")
    level = logger.level
    handlers = list(logger.handlers)
    yield logger
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
