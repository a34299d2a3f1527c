"""Schema, defaults and typed view of the viewer settings file."""

from __future__ import annotations

import os
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Mapping

from jsonschema import Draft202012Validator

from cropview.config import DEFAULT_BACKGROUND, OVERLAY_ALPHA, RESIZE_SETTLE_MS

SCHEMA_TAG = "cropview/settings@1"

_VIEWER_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "resize_settle_ms": {"type": "integer", "minimum": 0},
        "show_grid": {"type": "boolean"},
        "background": {"type": "string", "minLength": 1},
        "overlay_alpha": {"type": "integer", "minimum": 0, "maximum": 255},
    },
    "additionalProperties": True,
}

SETTINGS_SCHEMA: dict[str, Any] = {
    "$id": "cropview/settings.schema.json",
    "type": "object",
    "required": ["schema", "viewer"],
    "properties": {
        "schema": {"const": SCHEMA_TAG},
        "last_open_path": {"type": ["string", "null"]},
        "viewer": _VIEWER_SCHEMA,
    },
    "additionalProperties": True,
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "schema": SCHEMA_TAG,
    "last_open_path": None,
    "viewer": {
        "resize_settle_ms": RESIZE_SETTLE_MS,
        "show_grid": False,
        "background": DEFAULT_BACKGROUND,
        "overlay_alpha": OVERLAY_ALPHA,
    },
}

_validator = Draft202012Validator(SETTINGS_SCHEMA)


@dataclass(frozen=True)
class ViewerSettings:
    """Typed snapshot of the ``viewer`` section consumed by the viewport."""

    resize_settle_ms: int = RESIZE_SETTLE_MS
    show_grid: bool = False
    background: str = DEFAULT_BACKGROUND
    overlay_alpha: int = OVERLAY_ALPHA

    @classmethod
    def from_mapping(cls, section: Mapping[str, Any] | None) -> ViewerSettings:
        section = section or {}
        defaults = cls()
        return cls(
            resize_settle_ms=int(section.get("resize_settle_ms", defaults.resize_settle_ms)),
            show_grid=bool(section.get("show_grid", defaults.show_grid)),
            background=str(section.get("background", defaults.background)),
            overlay_alpha=int(section.get("overlay_alpha", defaults.overlay_alpha)),
        )


def _coerce_path(value: Any) -> str | None:
    if value in (None, ""):
        return None
    try:
        return os.fspath(value)
    except TypeError:
        return None


def merge_with_defaults(data: Mapping[str, Any] | None) -> dict[str, Any]:
    """Overlay *data* on :data:`DEFAULT_SETTINGS` and validate the result.

    The ``viewer`` section is merged key by key so a partial file keeps the
    defaults it does not mention.  Raises ``jsonschema.ValidationError``.
    """

    merged = deepcopy(DEFAULT_SETTINGS)
    for key, value in (data or {}).items():
        if key == "viewer" and isinstance(value, Mapping):
            merged["viewer"].update(value)
        elif key == "last_open_path":
            merged[key] = _coerce_path(value)
        else:
            merged[key] = value
    _validator.validate(merged)
    return merged


def validate_settings(data: dict[str, Any]) -> None:
    """Validate *data* against the settings schema."""

    _validator.validate(data)


__all__ = [
    "DEFAULT_SETTINGS",
    "SCHEMA_TAG",
    "SETTINGS_SCHEMA",
    "ViewerSettings",
    "merge_with_defaults",
    "validate_settings",
]
