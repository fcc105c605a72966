"""Data normalisation utilities: navigation trees, content digests, node types."""

import hashlib
import json
from collections.abc import Mapping
from typing import Any, Iterable, List

from app.models.nav import NavItem

# Every Drupal content node type carries this namespace, e.g. ``node__building``
NODE_TYPE_PREFIX = "node__"


class NodeTypeError(ValueError):
    """A content node type is missing the expected namespace prefix."""


def strip_type_prefix(node_type: str) -> str:
    """Return the bundle name of a namespaced node type (``node__page`` -> ``page``)."""
    if not node_type.startswith(NODE_TYPE_PREFIX):
        raise NodeTypeError(
            f"Node type '{node_type}' does not start with '{NODE_TYPE_PREFIX}'."
        )
    return node_type[len(NODE_TYPE_PREFIX):]


def normalize_nav(raw_items: Iterable[Any]) -> List[NavItem]:
    """Transform raw CMS navigation items into a tree of :class:`NavItem`.

    ``text`` and ``to`` are always copied.  ``description`` is kept only when
    it is a non-empty string and ``children`` only when the source list is
    non-empty and yields at least one item.  Source order is preserved at
    every level.
    """
    result: List[NavItem] = []
    for item in raw_items:
        if not isinstance(item, Mapping):
            continue
        fields = {"text": item.get("text"), "to": item.get("to")}

        description = item.get("description")
        if isinstance(description, str) and description:
            fields["description"] = description

        children = item.get("children")
        if isinstance(children, list) and children:
            normalized_children = normalize_nav(children)
            if normalized_children:
                fields["children"] = normalized_children

        result.append(NavItem(**fields))
    return result


def nav_to_data(items: List[NavItem]) -> List[dict]:
    """Serialise a navigation tree, omitting absent optional keys."""
    return [item.model_dump(exclude_none=True) for item in items]


def content_digest(data: Any) -> str:
    """Return a stable digest of JSON-serialisable *data*."""
    encoded = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    return hashlib.md5(encoded.encode("utf-8")).hexdigest()
