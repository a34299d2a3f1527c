"""Interactive image viewport with drag-to-crop selection."""

__version__ = "0.1.0"
