"""Settings file management with validation and change notifications."""

from __future__ import annotations

import json
import logging
import os
import sys
from copy import deepcopy
from pathlib import Path
from typing import Any

from jsonschema import ValidationError
from PySide6.QtCore import QObject, Signal

from cropview.errors import SettingsLoadError, SettingsValidationError
from cropview.utils.jsonio import read_json, write_json
from .schema import DEFAULT_SETTINGS, ViewerSettings, merge_with_defaults

_LOGGER = logging.getLogger(__name__)

_APP_DIR = "cropview"
_FILE_NAME = "settings.json"


def _config_root() -> Path:
    if os.name == "nt":
        appdata = os.environ.get("APPDATA")
        return Path(appdata) if appdata else Path.home() / "AppData" / "Roaming"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    xdg = os.environ.get("XDG_CONFIG_HOME")
    return Path(xdg) if xdg else Path.home() / ".config"


def default_settings_path() -> Path:
    """Return the default settings.json location for the current platform."""

    return _config_root() / _APP_DIR / _FILE_NAME


class SettingsManager(QObject):
    """Load, validate and persist viewer settings.

    Every successful :meth:`set` writes the file and emits
    ``settingsChanged(key, value)``; rejected values leave both the in-memory
    state and the file untouched.
    """

    settingsChanged = Signal(str, object)

    def __init__(self, path: Path | None = None) -> None:
        super().__init__()
        self._path = path
        self._data: dict[str, Any] = deepcopy(DEFAULT_SETTINGS)

    @property
    def path(self) -> Path:
        if self._path is None:
            self._path = default_settings_path()
        return self._path

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def load(self) -> None:
        """Read the settings file, merge it with defaults and write it back.

        Raises
        ------
        SettingsLoadError
            If the file exists but cannot be read or parsed.
        SettingsValidationError
            If the stored values violate the schema.
        """

        payload = self._read_payload(self.path)
        try:
            self._data = merge_with_defaults(payload)
        except ValidationError as exc:
            raise SettingsValidationError(f"{self.path}: {exc.message}") from exc
        _LOGGER.debug("Loaded settings from %s", self.path)
        write_json(self.path, self._data)

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return the value for *key*, supporting dotted access for nested keys."""

        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        """Update *key* with *value*, validate and persist the change."""

        if isinstance(value, Path):
            value = str(value)

        candidate = deepcopy(self._data)
        *parents, leaf = key.split(".")
        branch = candidate
        for part in parents:
            child = branch.get(part)
            if not isinstance(child, dict):
                child = branch[part] = {}
            branch = child
        branch[leaf] = value

        try:
            merged = merge_with_defaults(candidate)
        except ValidationError as exc:
            raise SettingsValidationError(f"Invalid value for {key!r}: {exc.message}") from exc
        self._data = merged
        write_json(self.path, self._data)
        self.settingsChanged.emit(key, value)

    def viewer(self) -> ViewerSettings:
        """Return the ``viewer`` section as a typed snapshot."""

        return ViewerSettings.from_mapping(self._data.get("viewer"))

    # ------------------------------------------------------------------
    # Internal utilities
    # ------------------------------------------------------------------
    @staticmethod
    def _read_payload(path: Path) -> dict[str, Any] | None:
        if not path.exists():
            return None
        try:
            payload = read_json(path)
        except (OSError, json.JSONDecodeError) as exc:
            raise SettingsLoadError(f"Cannot read {path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise SettingsValidationError(f"{path} does not contain a JSON object")
        return payload


__all__ = ["SettingsManager", "default_settings_path"]
