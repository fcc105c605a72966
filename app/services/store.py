"""Per-build node persistence and the session object shared by ingestion steps."""

import asyncio
from typing import Any, Dict, List, Optional, Union

import httpx

from app.config import Settings
from app.models.nav import NavNode
from app.models.node import ContentNode, DerivedFields
from app.services.fetcher import fetch_json

Node = Union[ContentNode, NavNode]


class NodeStore:
    """In-memory node graph for one build."""

    def __init__(self) -> None:
        self._nodes: Dict[str, Node] = {}

    def __len__(self) -> int:
        return len(self._nodes)

    def create_node(self, node: Node) -> Node:
        if node.id in self._nodes:
            raise ValueError(f"Node '{node.id}' already exists.")
        self._nodes[node.id] = node
        return node

    def create_node_field(self, node: ContentNode, name: str, value: Any) -> None:
        """Attach derived field *name* to *node*.  A field can be attached once."""
        if name not in DerivedFields.model_fields:
            raise ValueError(f"Unknown derived field '{name}'.")
        if getattr(node.fields, name) is not None:
            raise ValueError(f"Field '{name}' is already set on node '{node.id}'.")
        setattr(node.fields, name, value)

    def get(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def nodes_of_type(self, node_type: str) -> List[Node]:
        return [node for node in self._nodes.values() if node.type == node_type]

    def content_nodes(self) -> List[ContentNode]:
        return [node for node in self._nodes.values() if isinstance(node, ContentNode)]

    def nav_nodes(self) -> List[NavNode]:
        return [node for node in self._nodes.values() if isinstance(node, NavNode)]


class BuildSession:
    """Everything one build shares: settings, HTTP client, node store, request cap.

    Use as an async context manager; a client created by the session is
    closed on exit, a client passed in is left open for its owner.
    """

    def __init__(
        self,
        settings: Settings,
        client: Optional[httpx.AsyncClient] = None,
        store: Optional[NodeStore] = None,
    ) -> None:
        self.settings = settings
        self.store = store if store is not None else NodeStore()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=settings.fetch_timeout, follow_redirects=True
        )
        self.semaphore = asyncio.Semaphore(settings.max_concurrent_requests)

    async def __aenter__(self) -> "BuildSession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    def cms_url(self, path: str) -> str:
        """Resolve a CMS-relative *path* (``/api/...``) against the base URL."""
        if path.startswith(("http://", "https://")):
            return path
        if not path.startswith("/"):
            path = "/" + path
        return self.settings.cms_base_url + path

    async def fetch_json(self, path: str) -> Any:
        """Fetch a CMS resource with the configured retry policy.

        Raises :class:`~app.services.fetcher.FetchExhausted` when every
        attempt fails.
        """
        return await fetch_json(
            self.cms_url(path),
            retries=self.settings.fetch_retries,
            retry_delay=self.settings.fetch_retry_delay,
            client=self.client,
            semaphore=self.semaphore,
        )
