from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PathAlias(BaseModel):
    alias: Optional[str] = None


class BreadcrumbItem(BaseModel):
    text: str
    to: Optional[str] = None  # absent on the current-page entry


class DerivedFields(BaseModel):
    """Fields attached to a content node during ingestion.

    Every field stays ``None`` until the ingestion step that owns it attaches
    a value; ``None`` therefore means "field absent".
    """

    slug: Optional[str] = None
    title: Optional[str] = None
    breadcrumb: Optional[List[BreadcrumbItem]] = None
    parents: Optional[List[str]] = None
    children: Optional[List[str]] = None


class ContentNode(BaseModel):
    """One content record sourced from the CMS."""

    model_config = ConfigDict(extra="allow")

    id: str
    type: str  # namespaced, e.g. ``node__building``
    title: str = ""
    path: PathAlias = Field(default_factory=PathAlias)
    field_breadcrumb: Optional[str] = None
    field_parent_menu: Optional[str] = None
    field_child_menu: Optional[str] = None
    relationships: Dict[str, Any] = Field(default_factory=dict)
    fields: DerivedFields = Field(default_factory=DerivedFields)
