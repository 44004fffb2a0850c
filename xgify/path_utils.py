"""Temporary path helpers.

Keep this module free of Qt dependencies.
"""

from __future__ import annotations

import os
import tempfile
import uuid
from pathlib import Path


def abs_path(path: str | Path) -> Path:
    """Return an absolute path without requiring that it exists."""
    p = Path(path).expanduser()
    try:
        # strict=False avoids exceptions for non-existent paths.
        return p.resolve(strict=False)
    except OSError:
        return p.absolute()


def temporary_file(extension: str | None = None, directory: str | Path | None = None) -> str:
    """Return a fresh path inside the temp directory.

    The file is not created; the caller (or the external tool) writes it.
    """
    base = abs_path(directory) if directory else Path(tempfile.gettempdir())
    name = uuid.uuid4().hex
    if extension:
        name = f"{name}.{extension.lstrip('.')}"
    return os.fspath(base / name)
