"""Parent/child menu reference resolution for content nodes."""

import logging
from collections.abc import Mapping
from typing import Any, List, Tuple

from app.models.node import ContentNode
from app.services.fetcher import FetchExhausted
from app.services.sanitizer import sanitize_view
from app.services.store import BuildSession

logger = logging.getLogger(__name__)

# (source field on the node, derived field it populates)
REFERENCE_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("field_parent_menu", "parents"),
    ("field_child_menu", "children"),
)


def sentinel(output_name: str) -> List[str]:
    """Placeholder value for a reference field that resolved to nothing."""
    return [f"no-{output_name}"]


def extract_uuids(data: Any, output_name: str) -> List[str]:
    """Return the ``uuid`` of every record in a view payload, in source order.

    Records that are not mappings or lack a non-empty string ``uuid`` are skipped.
    """
    records = sanitize_view(data)
    if records is None:
        return sentinel(output_name)

    uuids = [
        record["uuid"]
        for record in records
        if isinstance(record, Mapping) and isinstance(record.get("uuid"), str) and record["uuid"]
    ]
    if len(uuids) < len(records):
        logger.warning("Skipped %d malformed %s record(s)", len(records) - len(uuids), output_name)
    return uuids or sentinel(output_name)


async def resolve_reference_field(
    session: BuildSession,
    node: ContentNode,
    field_id: str,
    output_name: str,
) -> None:
    """Fetch the view behind ``node.<field_id>`` and attach ``<output_name>``.

    Nodes without the source field get no output field.  An empty, malformed
    or unreachable view resolves to the ``no-<output_name>`` sentinel.
    """
    path = getattr(node, field_id, None)
    if not path:
        return

    try:
        data = await session.fetch_json(path)
    except FetchExhausted as exc:
        logger.warning("Could not resolve %s for node %s: %s", field_id, node.id, exc)
        data = None

    session.store.create_node_field(node, output_name, extract_uuids(data, output_name))
