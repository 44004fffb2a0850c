from __future__ import annotations

import json
import os
import shutil
from typing import Any

from .logger import get_logger

_logger = get_logger("settings")

_MIN_OPTIMIZE_LEVEL = 1
_MAX_OPTIMIZE_LEVEL = 3


class SettingsManager:
    """JSON-backed settings with built-in defaults.

    The file location comes from `settings_path` or the XGIFY_SETTINGS env
    var. Without either, settings live in memory only.
    """

    def __init__(self, settings_path: str | None = None):
        self.settings_path = settings_path or os.getenv("XGIFY_SETTINGS") or None
        self._settings: dict[str, Any] = {}
        self.load()

    DEFAULTS: dict[str, Any] = {
        "gifsicle_path": None,
        "optimize_level": 3,
        "temp_dir": None,
    }

    def load(self) -> None:
        try:
            if self.settings_path and os.path.exists(self.settings_path):
                with open(self.settings_path, encoding="utf-8") as f:
                    data = json.load(f)
                    if isinstance(data, dict):
                        self._settings = data
                        _logger.debug("settings loaded: %s", self.settings_path)
                        return
        except (OSError, ValueError) as e:
            _logger.warning("settings load failed: %s", e)
        self._settings = {}

    def save(self) -> None:
        if not self.settings_path:
            return
        try:
            parent = os.path.dirname(self.settings_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(self.settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings, f, ensure_ascii=False, indent=2)
            _logger.debug("settings saved: %s", self.settings_path)
        except OSError as e:
            _logger.error("settings save failed: %s", e)

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._settings:
            return self._settings[key]
        if default is not None:
            return default
        return self.DEFAULTS.get(key)

    def has(self, key: str) -> bool:
        return key in self._settings

    def set(self, key: str, value: Any) -> None:
        self._settings[key] = value
        self.save()

    @property
    def data(self) -> dict[str, Any]:
        return self._settings

    @property
    def gifsicle_path(self) -> str:
        env_path = (os.getenv("XGIFY_GIFSICLE_PATH") or "").strip()
        if env_path:
            return env_path
        val = self.get("gifsicle_path")
        if isinstance(val, str) and val:
            return val
        return shutil.which("gifsicle") or "gifsicle"

    @property
    def optimize_flag(self) -> str:
        try:
            level = int(self.get("optimize_level"))
        except (TypeError, ValueError):
            _logger.warning("optimize_level invalid: %r", self.get("optimize_level"))
            level = self.DEFAULTS["optimize_level"]
        level = max(_MIN_OPTIMIZE_LEVEL, min(_MAX_OPTIMIZE_LEVEL, level))
        return f"-O{level}"

    @property
    def temp_dir(self) -> str | None:
        val = self.get("temp_dir")
        return val if isinstance(val, str) and os.path.isdir(val) else None
