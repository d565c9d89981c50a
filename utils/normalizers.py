"""
Value normalization shared by the PDF renderer, the template filler and storage.

Every helper is total: any input (None, lists, numbers, strings) yields a string
or bool and nothing raises.
"""

import re
from typing import Any

YES_VALUES = frozenset({"yes", "true", "1", "on", "checked"})
NO_VALUES = frozenset({"no", "false", "0", "off"})

ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


def normalize_value(value: Any) -> str:
    """
    Lists become their trimmed, non-empty items joined by ", ".
    None becomes "". Anything else is converted to a trimmed string.
    """
    if isinstance(value, (list, tuple)):
        items = (str(item).strip() for item in value)
        return ", ".join(item for item in items if item)
    if value is None:
        return ""
    return str(value).strip()


def to_yes_no(value: Any) -> str:
    normalized = normalize_value(value)
    lowered = normalized.lower()
    if not lowered:
        return ""
    if lowered in YES_VALUES:
        return "YES"
    if lowered in NO_VALUES:
        return "NO"
    return normalized


def to_boolean_field(value: Any) -> bool:
    """Checkbox style coercion used for boolean database columns."""
    return normalize_value(value).lower() in YES_VALUES


def format_date(value: Any) -> str:
    """Rewrite YYYY-MM-DD as MM/DD/YYYY; other shapes pass through unchanged."""
    normalized = normalize_value(value)
    match = ISO_DATE_RE.match(normalized)
    if not match:
        return normalized
    year, month, day = match.groups()
    return f"{month}/{day}/{year}"


def value_or_placeholder(value: Any, show_placeholder: bool = True, placeholder: str = "-") -> str:
    normalized = normalize_value(value)
    if normalized:
        return normalized
    return placeholder if show_placeholder else ""
