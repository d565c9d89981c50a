"""
Utility modules for the funding application backend.
"""

# Re-export commonly used utilities
from utils.normalizers import (
    normalize_value,
    to_yes_no,
    to_boolean_field,
    format_date,
    value_or_placeholder,
)
from utils.name_utils import (
    compose_name,
    owner_name,
    additional_owner_name,
    preferred_contact_name,
    split_name,
)

__all__ = [
    "normalize_value",
    "to_yes_no",
    "to_boolean_field",
    "format_date",
    "value_or_placeholder",
    "compose_name",
    "owner_name",
    "additional_owner_name",
    "preferred_contact_name",
    "split_name",
]
