"""Pytest configuration.

The worker tests use PySide6 signals, which expect a Qt application object.
We create a single `QCoreApplication` for the session as early as possible
and shut it down at the end.
"""

from __future__ import annotations

import shutil
import sys
from typing import Any

import pytest

_APP: Any | None = None


def pytest_configure(config) -> None:  # noqa: ARG001
    """Ensure a QCoreApplication exists before collecting/running tests."""

    # Import lazily so non-Qt environments can still import this conftest.
    try:
        from PySide6.QtCore import QCoreApplication
    except ImportError:
        return

    global _APP

    app = QCoreApplication.instance()
    if app is None:
        # Keep a strong ref so it isn't GC'd mid-session.
        _APP = QCoreApplication([])
    else:
        _APP = app


def pytest_sessionfinish(session, exitstatus) -> None:  # noqa: ARG001
    """Attempt a clean Qt shutdown to avoid lingering threads at interpreter exit."""

    try:
        from PySide6.QtCore import QCoreApplication
    except ImportError:
        return

    app = QCoreApplication.instance()
    if app is None:
        return

    app.quit()
    app.processEvents()


@pytest.fixture
def gif_bytes() -> bytes:
    """100x100, 10 frames, delay 5."""
    from tests.helpers.gifs import make_gif

    return make_gif()


@pytest.fixture
def python_bin() -> str:
    return sys.executable


@pytest.fixture
def gifsicle_path() -> str:
    path = shutil.which("gifsicle")
    if path is None:
        pytest.skip("gifsicle not installed")
    return path
