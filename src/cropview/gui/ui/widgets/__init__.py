"""Reusable widgets for the cropview desktop shell."""

from .crop_viewport import CropViewport

__all__ = ["CropViewport"]
