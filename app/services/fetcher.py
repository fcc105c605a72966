import asyncio
import logging
from contextlib import nullcontext
from typing import Any, Optional
from urllib.parse import urlparse

import httpx

logger = logging.getLogger(__name__)

DEFAULT_RETRIES = 5
DEFAULT_RETRY_DELAY = 2.5  # seconds
ALLOWED_SCHEMES = {"http", "https"}


class FetchExhausted(RuntimeError):
    """Every attempt to fetch a CMS resource failed."""

    def __init__(self, url: str, attempts: int, last_error: Optional[BaseException] = None):
        self.url = url
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Giving up on {url} after {attempts} attempt(s): {last_error}")


def _validate_url(url: str) -> None:
    """Raise ValueError if *url* is not an absolute http(s) URL."""
    parsed = urlparse(url)

    if parsed.scheme not in ALLOWED_SCHEMES:
        raise ValueError(f"Scheme '{parsed.scheme}' is not allowed. Use http or https.")

    if not parsed.hostname:
        raise ValueError("URL must have a valid hostname.")


async def _get_json(client: httpx.AsyncClient, url: str) -> Any:
    response = await client.get(url)
    response.raise_for_status()
    return response.json()


async def fetch_json(
    url: str,
    *,
    client: httpx.AsyncClient,
    retries: int = DEFAULT_RETRIES,
    retry_delay: float = DEFAULT_RETRY_DELAY,
    semaphore: Optional[asyncio.Semaphore] = None,
) -> Any:
    """GET *url* with *client* and return the decoded JSON body.

    A failed attempt (transport error, non-2xx status or an undecodable body)
    is retried up to *retries* times, sleeping *retry_delay* seconds between
    attempts.  When a *semaphore* is given each attempt holds it for the
    duration of the request only, never while sleeping.

    Raises:
        ValueError: if the URL is not an absolute http(s) URL.
        FetchExhausted: once ``retries + 1`` attempts have failed.
    """
    _validate_url(url)

    guard = semaphore if semaphore is not None else nullcontext()
    attempts = retries + 1
    last_error: Optional[BaseException] = None
    for attempt in range(1, attempts + 1):
        try:
            async with guard:
                return await _get_json(client, url)
        except (httpx.HTTPError, ValueError) as exc:
            last_error = exc
            logger.debug("Attempt %d/%d for %s failed: %s", attempt, attempts, url, exc)
        if attempt < attempts and retry_delay:
            await asyncio.sleep(retry_delay)

    raise FetchExhausted(url, attempts, last_error)
