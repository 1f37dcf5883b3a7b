"""Shared utilities for normalization and change detection."""

from .normalize import interaction_hash, normalize_isbn, normalize_text, serialize_snapshot

__all__ = [
    "interaction_hash",
    "normalize_isbn",
    "normalize_text",
    "serialize_snapshot",
]
