"""Runtime configuration loaded from the process environment."""

import os
from functools import lru_cache
from typing import List, Optional, Tuple
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

DEFAULT_PAGE_NODE_TYPES = ("building", "page")
DEFAULT_CONTENT_NODE_TYPES = ("building", "page", "room", "location")


def _split_list(value: Optional[str], default: Tuple[str, ...]) -> List[str]:
    """Parse a comma-separated env value, falling back to *default* when unset."""
    if not value:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseModel):
    """Build settings.  Only the CMS base URL is required."""

    cms_base_url: str
    fetch_retries: int = Field(default=5, ge=0)
    fetch_retry_delay: float = Field(default=2.5, ge=0)
    fetch_timeout: float = Field(default=10, gt=0)
    max_concurrent_requests: int = Field(default=8, ge=1)
    page_node_types: List[str] = Field(default_factory=lambda: list(DEFAULT_PAGE_NODE_TYPES))
    content_node_types: List[str] = Field(
        default_factory=lambda: list(DEFAULT_CONTENT_NODE_TYPES)
    )

    @field_validator("cms_base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ValueError(f"CMS base URL '{value}' must be an absolute http(s) URL.")
        return value.rstrip("/")

    @classmethod
    def from_env(cls) -> "Settings":
        base_url = os.getenv("DRUPAL_BASE_URL")
        if not base_url:
            raise ValueError("DRUPAL_BASE_URL is not set.")
        return cls(
            cms_base_url=base_url,
            fetch_retries=int(os.getenv("CMS_FETCH_RETRIES", "5")),
            fetch_retry_delay=float(os.getenv("CMS_FETCH_RETRY_DELAY", "2.5")),
            fetch_timeout=float(os.getenv("CMS_FETCH_TIMEOUT", "10")),
            max_concurrent_requests=int(os.getenv("CMS_MAX_CONCURRENT_REQUESTS", "8")),
            page_node_types=_split_list(
                os.getenv("CMS_PAGE_NODE_TYPES"), DEFAULT_PAGE_NODE_TYPES
            ),
            content_node_types=_split_list(
                os.getenv("CMS_CONTENT_NODE_TYPES"), DEFAULT_CONTENT_NODE_TYPES
            ),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    return Settings.from_env()
