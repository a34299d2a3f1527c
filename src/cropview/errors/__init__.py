"""Custom exception hierarchy for cropview."""

from __future__ import annotations


class CropViewError(Exception):
    """Base class for all custom errors raised by cropview."""


# --- 3-layer hierarchy ---

class DomainError(CropViewError):
    """Base class for domain-level errors."""


class InfrastructureError(CropViewError):
    """Base class for infrastructure-level errors."""


# --- Domain errors ---

class InvalidCropError(DomainError):
    """Raised when a crop rectangle is empty or leaves the image bounds."""


# --- Infrastructure errors ---

class PixelBufferError(InfrastructureError):
    """Raised when a pixel buffer cannot be accessed or has an invalid layout."""


class ImageLoadError(InfrastructureError):
    """Raised when an image file cannot be decoded."""


class ImageSaveError(InfrastructureError):
    """Raised when an image cannot be written to disk."""


# --- Settings ---

class SettingsError(CropViewError):
    """Base class for settings related failures."""


class SettingsLoadError(SettingsError):
    """Raised when the settings file cannot be read."""


class SettingsValidationError(SettingsError):
    """Raised when settings fail schema validation."""


__all__ = [
    "CropViewError",
    "DomainError",
    "ImageLoadError",
    "ImageSaveError",
    "InfrastructureError",
    "InvalidCropError",
    "PixelBufferError",
    "SettingsError",
    "SettingsLoadError",
    "SettingsValidationError",
]
