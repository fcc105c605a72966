from typing import List

from pydantic import BaseModel

from app.models.nav import NavItem
from app.models.node import ContentNode
from app.models.page import PageSpec


class BuildResponse(BaseModel):
    nav_primary: List[NavItem]
    nav_utility: List[NavItem]
    nodes_sourced: int
    nodes: List[ContentNode]
    pages_created: int
    pages: List[PageSpec]
