"""Release-notes page fetching: HTML in, plain text out."""

import re
from typing import Optional

import httpx
import structlog
from bs4 import BeautifulSoup

from cli.config_models import RetryConfig
from cli.retry import retry_from_config

from .errors import NetworkError

logger = structlog.get_logger().bind(source="page_scraper")

BOILERPLATE_TAGS = ["script", "style", "noscript", "iframe", "nav", "footer"]
DEFAULT_MAX_CHARS = 50_000
USER_AGENT = "Mozilla/5.0 (compatible; versionwatch/1.0; release-notes checker)"

_WHITESPACE_RE = re.compile(r"\s+")


def html_to_text(html: str, max_chars: int = DEFAULT_MAX_CHARS) -> str:
    """Strip boilerplate tags and collapse whitespace."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(BOILERPLATE_TAGS):
        tag.decompose()
    text = _WHITESPACE_RE.sub(" ", soup.get_text(separator=" ")).strip()
    return text[:max_chars]


class PageScraper:
    """Async page fetcher shared by all checks in a run."""

    def __init__(
        self,
        timeout: float = 30.0,
        max_chars: int = DEFAULT_MAX_CHARS,
        retry_config: Optional[RetryConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.max_chars = max_chars
        self.client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={
                "User-Agent": USER_AGENT,
                "Accept": "text/html,application/xhtml+xml,text/plain;q=0.9,*/*;q=0.8",
            },
        )
        self._get = retry_from_config(retry_config or RetryConfig(), "http")(self._get_once)

    async def _get_once(self, url: str) -> httpx.Response:
        response = await self.client.get(url)
        response.raise_for_status()
        return response

    async def fetch_text(self, url: str) -> str:
        """Fetch ``url`` and return its readable text.

        Raises:
            NetworkError: on HTTP errors, transport failures after retries,
                or a page with no text.
        """
        try:
            logger.debug("fetching_page", url=url)
            response = await self._get(url)
        except httpx.HTTPStatusError as e:
            raise NetworkError(f"HTTP {e.response.status_code} fetching {url}") from e
        except httpx.RequestError as e:
            raise NetworkError(f"Request error fetching {url}: {e}") from e

        content_type = response.headers.get("content-type", "")
        if "html" in content_type or not content_type:
            text = html_to_text(response.text, self.max_chars)
        else:
            text = _WHITESPACE_RE.sub(" ", response.text).strip()[: self.max_chars]

        if not text:
            raise NetworkError(f"No content found at {url}")
        logger.debug("page_fetched", url=url, chars=len(text))
        return text

    async def close(self):
        """Close the async client."""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
