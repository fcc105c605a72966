"""Page generation from the sourced node graph."""

import logging
from collections.abc import Mapping
from typing import Dict, Iterable, List, Optional

from app.models.node import ContentNode
from app.models.page import PageSpec
from app.services.normalizer import strip_type_prefix
from app.services.store import NodeStore

logger = logging.getLogger(__name__)

TEMPLATE_SELECTOR_FIELD = "field_design_template"

# Design template machine name -> page template
TEMPLATES: Dict[str, str] = {
    "location": "location",
    "page": "page",
    "landing": "landing",
    "visit": "visit",
    "event": "event",
    "staff_directory": "staff-directory",
}


class PageGenerationError(RuntimeError):
    """The node graph cannot be turned into a consistent set of pages."""


def template_for(node: ContentNode) -> Optional[str]:
    """Return the page template selected by *node*'s design template, if any."""
    selector = node.relationships.get(TEMPLATE_SELECTOR_FIELD)
    if not isinstance(selector, Mapping):
        return None
    return TEMPLATES.get(selector.get("field_machine_name"))


def create_pages(store: NodeStore, page_types: Iterable[str]) -> List[PageSpec]:
    """Create one :class:`PageSpec` per page node that selects a known template.

    Raises:
        PageGenerationError: a selected node has no slug, or two nodes share one.
    """
    page_types = set(page_types)
    pages: List[PageSpec] = []
    seen_paths: Dict[str, str] = {}

    for node in store.content_nodes():
        if strip_type_prefix(node.type) not in page_types:
            continue

        template = template_for(node)
        if template is None:
            logger.debug("Node %s selects no known template; no page created", node.id)
            continue

        slug = node.fields.slug
        if not slug:
            raise PageGenerationError(f"Node {node.id} uses template '{template}' but has no slug.")
        if slug in seen_paths:
            raise PageGenerationError(
                f"Nodes {seen_paths[slug]} and {node.id} both claim path '{slug}'."
            )
        seen_paths[slug] = node.id

        pages.append(PageSpec(path=slug, template=template, context={"slug": slug}))

    return pages
