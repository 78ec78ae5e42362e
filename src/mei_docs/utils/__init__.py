"""Formatting and text layout helpers."""
