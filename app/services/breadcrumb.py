"""Breadcrumb resolution for content nodes."""

import logging
from collections.abc import Mapping
from typing import Any, List, Optional

from app.models.node import BreadcrumbItem, ContentNode
from app.services.fetcher import FetchExhausted
from app.services.store import BuildSession

logger = logging.getLogger(__name__)

# Upper bound on parent links followed; guards against cyclic CMS data
MAX_BREADCRUMB_DEPTH = 32


def build_breadcrumb(data: Any, current_title: str) -> Optional[List[BreadcrumbItem]]:
    """Turn a CMS breadcrumb payload into a root-first chain.

    The payload is a list whose first element is the immediate parent of the
    current page; each item links to its own parent through ``parent[0]``.
    Items are collected child-to-root, reversed, and the current page is
    appended without a link.

    Returns *None* when the payload carries no breadcrumb items, or when an
    item has a non-string ``text`` or ``to``.
    """
    if not isinstance(data, list) or not data or not isinstance(data[0], Mapping):
        return None

    chain: List[BreadcrumbItem] = []
    item: Any = data[0]
    while isinstance(item, Mapping):
        if len(chain) >= MAX_BREADCRUMB_DEPTH:
            logger.warning(
                "Breadcrumb for '%s' exceeds %d levels; truncating",
                current_title,
                MAX_BREADCRUMB_DEPTH,
            )
            break
        text, to = item.get("text"), item.get("to")
        if not isinstance(text, str) or not (to is None or isinstance(to, str)):
            logger.warning(
                "Malformed breadcrumb item for '%s' (text=%r, to=%r)", current_title, text, to
            )
            return None
        chain.append(BreadcrumbItem(text=text, to=to))

        parent = item.get("parent")
        item = parent[0] if isinstance(parent, list) and parent else None

    chain.reverse()
    chain.append(BreadcrumbItem(text=current_title))
    return chain


async def resolve_breadcrumb(session: BuildSession, node: ContentNode) -> None:
    """Fetch and attach the ``breadcrumb`` field of *node*.

    Nothing is attached when the node has no breadcrumb endpoint, when the
    endpoint returns no items, or when the CMS cannot be reached.
    """
    if not node.field_breadcrumb:
        return

    try:
        data = await session.fetch_json(node.field_breadcrumb)
    except FetchExhausted as exc:
        logger.warning("Skipping breadcrumb for node %s: %s", node.id, exc)
        return

    breadcrumb = build_breadcrumb(data, node.title)
    if breadcrumb is None:
        logger.debug("No breadcrumb items for node %s", node.id)
        return

    session.store.create_node_field(node, "breadcrumb", breadcrumb)
