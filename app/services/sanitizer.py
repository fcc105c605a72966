"""Cleanup of CMS view payloads."""

from collections.abc import Mapping
from typing import Any, List, Optional


def sanitize_view(data: Any) -> Optional[List[Any]]:
    """Return the flat record list of a Drupal view response, or *None*.

    Drupal views wrap every result set in an array, and an empty result comes
    back as arrays nested to varying depth (``[]``, ``[[]]``, ``[[[]]]``).
    A response counts as having results when its first element is a record
    (a mapping); anything else is treated as empty or malformed.
    """
    if not isinstance(data, list):
        return None

    if not data or not isinstance(data[0], Mapping):
        return None

    return data
