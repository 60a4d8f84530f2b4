"""Utility helpers for reusable functionality."""

from .datetime import ensure_naive_utc, ensure_utc, format_instant, now_utc

__all__ = [
    "ensure_naive_utc",
    "ensure_utc",
    "format_instant",
    "now_utc",
]
