"""Utility helpers."""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping


def merge_params(defaults: Mapping[str, Any], overrides: Mapping[str, Any] | None) -> Dict[str, Any]:
    merged = dict(defaults)
    merged.update(overrides or {})
    return merged


def json_pretty(data: Any) -> str:
    return json.dumps(data, indent=4, ensure_ascii=False, default=str)


def context_block(context: Mapping[str, Any] | None) -> str:
    if not context:
        return ""
    return "\n\nContext:\n" + json_pretty(dict(context))


def dotted_get(data: Mapping[str, Any] | None, path: str, default: Any = None) -> Any:
    current: Any = data
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return default
        current = current[part]
    return current
