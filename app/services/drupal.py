"""Drupal JSON:API content loader."""

import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional, Tuple

from app.models.node import ContentNode
from app.services.fetcher import FetchExhausted
from app.services.store import BuildSession

logger = logging.getLogger(__name__)

# Relationships resolved inline so page generation can read the template selector
_INCLUDES = ("field_design_template",)

# Node attributes copied onto ContentNode fields
_COPIED_ATTRIBUTES = (
    "title",
    "path",
    "field_breadcrumb",
    "field_parent_menu",
    "field_child_menu",
)


class ContentSourceError(RuntimeError):
    """The content listing for a node bundle could not be loaded."""


def _node_type(jsonapi_type: str) -> str:
    """Map a JSON:API resource type to a node type (``node--page`` -> ``node__page``)."""
    return jsonapi_type.replace("--", "__", 1)


def _index_included(included: Iterable[Any]) -> Dict[Tuple[str, str], dict]:
    index: Dict[Tuple[str, str], dict] = {}
    for entity in included:
        if isinstance(entity, Mapping) and entity.get("type") and entity.get("id"):
            index[(entity["type"], entity["id"])] = dict(entity.get("attributes") or {})
    return index


def _resolve_relationships(
    relationships: Mapping, included: Dict[Tuple[str, str], dict]
) -> Dict[str, Any]:
    """Replace single-entity relationship linkage with the included entity's attributes."""
    resolved: Dict[str, Any] = {}
    for name, relationship in relationships.items():
        if not isinstance(relationship, Mapping):
            continue
        linkage = relationship.get("data")
        if isinstance(linkage, Mapping):
            key = (linkage.get("type"), linkage.get("id"))
            resolved[name] = included.get(key, dict(linkage))
        elif isinstance(linkage, list):
            resolved[name] = [
                included.get((item.get("type"), item.get("id")), dict(item))
                for item in linkage
                if isinstance(item, Mapping)
            ]
    return resolved


def record_to_node(record: Mapping, included: Dict[Tuple[str, str], dict]) -> ContentNode:
    """Convert one JSON:API resource object to a :class:`ContentNode`."""
    attributes = record.get("attributes") or {}
    data: Dict[str, Any] = {
        key: attributes[key] for key in _COPIED_ATTRIBUTES if attributes.get(key) is not None
    }
    return ContentNode(
        id=record["id"],
        type=_node_type(record["type"]),
        relationships=_resolve_relationships(record.get("relationships") or {}, included),
        **data,
    )


async def _fetch_bundle(session: BuildSession, bundle: str) -> List[ContentNode]:
    """Fetch every node of *bundle*, following JSON:API pagination links."""
    nodes: List[ContentNode] = []
    next_url: Optional[str] = f"/jsonapi/node/{bundle}?include={','.join(_INCLUDES)}"
    visited: set = set()

    while next_url and next_url not in visited:
        visited.add(next_url)
        try:
            payload = await session.fetch_json(next_url)
        except FetchExhausted as exc:
            raise ContentSourceError(f"Could not load '{bundle}' nodes: {exc}") from exc

        if not isinstance(payload, Mapping) or not isinstance(payload.get("data"), list):
            raise ContentSourceError(f"Unexpected JSON:API payload for '{bundle}' nodes.")

        included = _index_included(payload.get("included") or [])
        for record in payload["data"]:
            try:
                nodes.append(record_to_node(record, included))
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed '%s' record: %s", bundle, exc)

        next_link = (payload.get("links") or {}).get("next")
        next_url = next_link.get("href") if isinstance(next_link, Mapping) else next_link

    return nodes


async def load_content_nodes(
    session: BuildSession, bundles: Optional[Iterable[str]] = None
) -> List[ContentNode]:
    """Load content nodes for each bundle, dropping duplicate ids."""
    if bundles is None:
        bundles = session.settings.content_node_types

    nodes: List[ContentNode] = []
    seen_ids: set = set()
    for bundle in bundles:
        bundle_nodes = await _fetch_bundle(session, bundle)
        logger.info("Loaded %d '%s' nodes", len(bundle_nodes), bundle)
        for node in bundle_nodes:
            if node.id in seen_ids:
                continue
            seen_ids.add(node.id)
            nodes.append(node)

    return nodes
