"""Helpers for reading loosely shaped event payloads."""

from __future__ import annotations

from typing import Any, Mapping


def first_value(payload: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first non-empty value found under ``keys``.

    Publishers are not consistent about casing (``application_id`` versus
    ``applicationId``), so callers list every accepted spelling.
    """

    for key in keys:
        value = payload.get(key)
        if value not in (None, ""):
            return value
    return default


__all__ = ["first_value"]
