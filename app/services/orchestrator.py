"""Ingestion orchestration: navigation nodes, per-node derived fields, full builds."""

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Iterable, List, NamedTuple, Optional

import httpx
from pydantic import ValidationError

from app.config import Settings
from app.models.nav import NavItem, NavNode
from app.models.node import ContentNode
from app.models.page import PageSpec
from app.services.breadcrumb import resolve_breadcrumb
from app.services.drupal import load_content_nodes
from app.services.fetcher import FetchExhausted
from app.services.normalizer import (
    content_digest,
    nav_to_data,
    normalize_nav,
    strip_type_prefix,
)
from app.services.pages import create_pages
from app.services.references import REFERENCE_FIELDS, resolve_reference_field
from app.services.store import BuildSession

logger = logging.getLogger(__name__)

NAV_PRIMARY_ID = "nav-primary"
NAV_UTILITY_ID = "nav-utlity"  # historical spelling; consumers look nodes up by this id

# (node id, node type, CMS endpoint)
NAV_SOURCES = (
    (NAV_PRIMARY_ID, "NavPrimary", "/api/nav/primary"),
    (NAV_UTILITY_ID, "NavUtility", "/api/nav/utility"),
)


class StartupFetchFailure(RuntimeError):
    """A navigation tree could not be sourced; the build cannot continue."""


class BuildResult(NamedTuple):
    nav_primary: List[NavItem]
    nav_utility: List[NavItem]
    nodes: List[ContentNode]
    pages: List[PageSpec]


def _nav_root_children(data: Any, path: str) -> List[Any]:
    """Return the top-level items of a nav payload (``[{children: [...]}]``)."""
    if not isinstance(data, list) or not data or not isinstance(data[0], Mapping):
        raise StartupFetchFailure(f"Unexpected navigation payload from {path}.")
    children = data[0].get("children") or []
    if not isinstance(children, list):
        raise StartupFetchFailure(f"Navigation children from {path} are not a list.")
    return children


def create_nav_node(
    session: BuildSession, node_id: str, node_type: str, raw_items: List[Any]
) -> NavNode:
    """Normalise *raw_items* and persist them as a navigation node."""
    nav = normalize_nav(raw_items)
    node = NavNode(
        id=node_id,
        type=node_type,
        nav=nav,
        content=json.dumps(raw_items),
        content_digest=content_digest(nav_to_data(nav)),
    )
    session.store.create_node(node)
    return node


async def source_nav_nodes(session: BuildSession) -> List[NavNode]:
    """Fetch, normalise and persist the primary and utility navigation trees.

    Raises:
        StartupFetchFailure: when a tree cannot be fetched or is malformed.
    """
    nav_nodes: List[NavNode] = []
    for node_id, node_type, path in NAV_SOURCES:
        try:
            data = await session.fetch_json(path)
        except FetchExhausted as exc:
            raise StartupFetchFailure(f"Could not fetch navigation from {path}: {exc}") from exc

        try:
            nav_node = create_nav_node(
                session, node_id, node_type, _nav_root_children(data, path)
            )
        except ValidationError as exc:
            raise StartupFetchFailure(f"Malformed navigation item from {path}: {exc}") from exc
        logger.info("Created %s with %d top-level items", node_id, len(nav_node.nav))
        nav_nodes.append(nav_node)
    return nav_nodes


def is_page_type(node: ContentNode, page_types: Iterable[str]) -> bool:
    """Return True when *node* is one of the bundles that get a public page."""
    return strip_type_prefix(node.type) in page_types


async def on_create_node(session: BuildSession, node: ContentNode) -> None:
    """Attach derived fields to a freshly sourced content node.

    Page nodes get ``slug`` and ``title`` immediately; breadcrumb and
    parent/child lookups then run concurrently.  Lookup failures never
    propagate: the affected field is left absent or set to its sentinel.
    """
    store = session.store
    lookups = []

    if is_page_type(node, session.settings.page_node_types):
        if node.path.alias:
            store.create_node_field(node, "slug", node.path.alias)
        else:
            logger.warning("Page node %s has no path alias", node.id)
        store.create_node_field(node, "title", node.title)
        lookups.append(resolve_breadcrumb(session, node))

    for field_id, output_name in REFERENCE_FIELDS:
        lookups.append(resolve_reference_field(session, node, field_id, output_name))

    await asyncio.gather(*lookups)


async def run_build(
    settings: Settings,
    bundles: Optional[Iterable[str]] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> BuildResult:
    """Run one complete sourcing pass and return its node graph and page list.

    Raises:
        StartupFetchFailure: navigation could not be sourced.
        ContentSourceError: content nodes could not be listed.
        PageGenerationError: the page list is inconsistent.
    """
    async with BuildSession(settings, client=client) as session:
        primary, utility = await source_nav_nodes(session)

        nodes = await load_content_nodes(session, bundles)
        for node in nodes:
            session.store.create_node(node)
        await asyncio.gather(*(on_create_node(session, node) for node in nodes))

        pages = create_pages(session.store, settings.page_node_types)
        logger.info(
            "Build finished",
            extra={"nodes": len(nodes), "pages": len(pages)},
        )
        return BuildResult(
            nav_primary=primary.nav,
            nav_utility=utility.nav,
            nodes=nodes,
            pages=pages,
        )
