"""Argument checks shared by capability modules and the registry."""

import re
from datetime import datetime

_API_VERSION_PATTERN = re.compile(r"^(v\d+|\d{4}-\d{2}-\d{2})$")
_ORDER_ID_PATTERN = re.compile(r"^\d{3}-\d{7}-\d{7}$")
_CAPABILITY_PATTERN = re.compile(r"^[a-z][A-Za-z0-9]*$")


def validate_iso8601_date(date_string: str) -> bool:
    """Check that a timestamp parses as ISO 8601.

    Args:
        date_string: Timestamp such as ``2024-01-01T00:00:00Z``

    Returns:
        True if the string parses, with or without a trailing ``Z``
    """
    if not isinstance(date_string, str):
        return False
    try:
        datetime.fromisoformat(date_string[:-1] + "+00:00" if date_string.endswith("Z") else date_string)
    except ValueError:
        return False
    return True


def validate_amazon_order_id(order_id: str) -> bool:
    """Validate an Amazon order ID (e.g. 123-1234567-1234567)."""
    return isinstance(order_id, str) and bool(_ORDER_ID_PATTERN.match(order_id))


def validate_api_version(api_version: str) -> bool:
    """Validate an API version string: ``v0``-style or a release date."""
    return isinstance(api_version, str) and bool(_API_VERSION_PATTERN.match(api_version))


def validate_capability_name(name: str) -> bool:
    """Capability names are camelCase identifiers such as ``easyShip``."""
    return isinstance(name, str) and bool(_CAPABILITY_PATTERN.match(name))


def validate_page_size(value: int, max_value: int = 100) -> bool:
    # bool is an int subclass but never a page size
    return isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= max_value
