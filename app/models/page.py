from typing import Dict

from pydantic import BaseModel


class PageSpec(BaseModel):
    """One output page to be rendered by the site generator."""

    path: str
    template: str
    context: Dict[str, str]
