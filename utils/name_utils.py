from __future__ import annotations

import re
from typing import Any, Mapping, Tuple

from utils.normalizers import normalize_value

SPACE_RE = re.compile(r"\s+")


def compose_name(first: Any, last: Any) -> str:
    """
    Join first and last name with a single space. Empty parts collapse, so
    ("Ada", "") gives "Ada" and ("", "") gives "".
    """
    parts = (normalize_value(first), normalize_value(last))
    return " ".join(part for part in parts if part)


def owner_name(record: Mapping[str, Any]) -> str:
    return compose_name(record.get("owner_first_name"), record.get("owner_last_name"))


def additional_owner_name(record: Mapping[str, Any]) -> str:
    return compose_name(
        record.get("additional_owner_first_name"),
        record.get("additional_owner_last_name"),
    )


def preferred_contact_name(record: Mapping[str, Any]) -> str:
    return compose_name(record.get("first_name"), record.get("last_name"))


def split_name(value: str | None) -> Tuple[str, str]:
    """
    Split a full name into the first token and the remaining tokens.
    """
    normalized = normalize_value(value)
    if not normalized:
        return "", ""

    parts = SPACE_RE.split(normalized)
    first = parts[0]
    last = " ".join(parts[1:]) if len(parts) > 1 else ""
    return first, last
