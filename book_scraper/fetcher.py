"""HTTP fetch of product pages."""

import logging
from typing import Optional

import httpx

from .config import FetchConfig
from .errors import FetchError, InputError

logger = logging.getLogger("book_scraper")

BROWSER_ACCEPT = (
    "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,"
    "image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.9"
)


class Fetcher:
    def __init__(self, config: FetchConfig, transport: Optional[httpx.BaseTransport] = None):
        self.config = config
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    @property
    def client(self) -> httpx.Client:
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                timeout=httpx.Timeout(self.config.timeout, connect=15),
                follow_redirects=True,
                headers=self.headers(),
                transport=self._transport,
            )
        return self._client

    def headers(self) -> dict:
        # Product pages serve captchas to obvious bots, so look like a browser.
        return {
            "User-Agent": self.config.user_agent,
            "Accept-Language": self.config.accept_language,
            "Accept": BROWSER_ACCEPT,
            "Sec-Fetch-Site": "none",
            "Sec-Fetch-Mode": "navigate",
            "Sec-Fetch-User": "?1",
            "Sec-Fetch-Dest": "document",
            "Upgrade-Insecure-Requests": "1",
        }

    def close(self):
        if self._client and not self._client.is_closed:
            self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def fetch_html(self, url: str) -> str:
        """Fetch a page and return its text. Single attempt, no retries."""
        if not url or not url.strip():
            raise InputError("URL is required.")

        try:
            resp = self.client.get(url.strip())
        except httpx.TransportError as e:
            raise FetchError(
                "Network error: Failed to fetch the URL. Please check your internet "
                f"connection and the URL. ({e})"
            ) from e
        except httpx.InvalidURL as e:
            raise InputError(f"Invalid URL: {url}") from e

        if resp.is_error:
            raise FetchError(
                f"Failed to fetch URL: {resp.status_code} {resp.reason_phrase}",
                status_code=resp.status_code,
            )

        logger.info(f"Fetched {url} ({len(resp.content):,} bytes)")
        return resp.text
