"""Coercion of raw query-string values into typed query arguments."""

import re
from typing import List, get_args

from ..errors import ValidationError
from ..models.news import SortBy


DEFAULT_MAX_RESULTS = 10

_LEADING_INT = re.compile(r"^\s*[+-]?\d+")
_SORT_MODES = get_args(SortBy)


def parse_max(value: str | int | None, default: int = DEFAULT_MAX_RESULTS) -> int:
    """Parse a result cap, falling back to `default` instead of failing.

    Only the leading integer of a string counts ("15abc" -> 15). Missing,
    non-numeric and non-positive values yield the default.
    """

    if value is None:
        return default
    if isinstance(value, int):
        return value if value > 0 else default

    match = _LEADING_INT.match(value)
    if match is None:
        return default
    parsed = int(match.group())
    return parsed if parsed > 0 else default


def parse_keywords(value: str | None) -> List[str]:
    if not value:
        return []
    return [keyword.strip() for keyword in value.split(",") if keyword.strip()]


def parse_sort(value: str | None) -> SortBy | None:
    if not value:
        return None
    if value not in _SORT_MODES:
        raise ValidationError(f"Parameter \"sortby\" must be one of: {', '.join(_SORT_MODES)}")
    return value
