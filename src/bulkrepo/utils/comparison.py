"""Structural comparison helpers for JSON-like documents."""

import json
from collections.abc import Iterable
from typing import Any


def normalize_for_comparison(obj: Any, sort_lists: bool = True) -> Any:
    """Recursively normalize a structure so key order (and optionally list order) does not matter."""
    if isinstance(obj, dict):
        return {k: normalize_for_comparison(v, sort_lists) for k, v in sorted(obj.items())}
    if isinstance(obj, list):
        normalized = [normalize_for_comparison(item, sort_lists) for item in obj]
        if sort_lists:
            return sorted(normalized, key=lambda x: json.dumps(x, sort_keys=True))
        return normalized
    return obj


def structurally_equal(left: Any, right: Any, sort_lists: bool = True) -> bool:
    """Deep equality ignoring dict key order, and list order unless ``sort_lists`` is False."""
    return normalize_for_comparison(left, sort_lists) == normalize_for_comparison(
        right, sort_lists
    )


def pick(document: dict[str, Any], keys: Iterable[str]) -> dict[str, Any]:
    """Subset of ``document`` restricted to ``keys`` that are present."""
    return {k: document[k] for k in keys if k in document}
