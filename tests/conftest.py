"""Shared fixtures for taskpath tests."""

import logging

import pytest


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo the handlers installed by LoggerParams.configure."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
