from typing import List, Optional

from pydantic import BaseModel


class NavItem(BaseModel):
    """One entry of a navigation tree.

    ``description`` and ``children`` are only populated when the CMS supplied
    a non-empty value; serialise with ``exclude_none=True`` to omit them.
    """

    text: str
    to: str
    description: Optional[str] = None
    children: Optional[List["NavItem"]] = None


class NavNode(BaseModel):
    """A persisted navigation tree (``NavPrimary`` or ``NavUtility``)."""

    id: str
    type: str
    nav: List[NavItem]
    content: str  # raw CMS payload, JSON encoded
    content_digest: str  # digest of the normalised ``nav``
