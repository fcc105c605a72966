from typing import List, Optional

from pydantic import BaseModel, Field


class BuildRequest(BaseModel):
    content_types: Optional[List[str]] = Field(
        default=None,
        min_length=1,
        description="Drupal node bundles to source.  Defaults to the configured list.",
    )
