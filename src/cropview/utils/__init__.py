"""Utility helpers for file and image I/O."""
