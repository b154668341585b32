# sitemap_crawler/crawler/loader.py
"""
Page loader: downloads a page over HTTP and returns the links found on it.
"""
from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Protocol, Tuple

from aiohttp import ClientError, ClientSession, ClientTimeout

from sitemap_crawler.crawler.link_extractor import extract_links
from sitemap_crawler.logger import LOGGER_NAME

__all__ = ("PageLoader", "HttpPageLoader")


class PageLoader(Protocol):
    """Anything able to turn a page URL into the absolute URLs it links to."""

    async def fetch_links(self, url: str) -> List[str]:
        ...


class HttpPageLoader:
    """aiohttp-backed :class:`PageLoader`. Failures are logged and yield no links."""

    HTML_TYPES = ("text/html", "application/xhtml+xml")

    def __init__(self, timeout: float = 10.0, user_agent: str = "SitemapCrawler/1.0") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self.session: Optional[ClientSession] = None
        self.logger = logging.getLogger(LOGGER_NAME)

    async def __aenter__(self) -> HttpPageLoader:
        self.session = ClientSession(
            timeout=ClientTimeout(total=self.timeout),
            headers={"User-Agent": self.user_agent},
            raise_for_status=False,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def fetch_page(self, url: str) -> Optional[Tuple[str, str]]:
        """
        Return ``(final_url, html)`` for *url*, or ``None`` for errors and non-HTML responses.

        *final_url* is the address after redirects; relative links on the page
        are resolved against it.
        """
        if not self.session:
            raise RuntimeError("Session not initialized")
        try:
            async with self.session.get(url) as resp:
                if resp.status != 200:
                    self.logger.warning("Failed to load page %s: HTTP %s", url, resp.status)
                    return None
                mime = resp.headers.get("Content-Type", "").split(";", 1)[0].strip().lower()
                if mime and mime not in self.HTML_TYPES:
                    self.logger.debug("Skipping %s: content type %s", url, mime)
                    return None
                return str(resp.url), await resp.text(errors="replace")
        except (ClientError, asyncio.TimeoutError, ValueError) as exc:
            self.logger.warning("Failed to load page %s: %s", url, str(exc) or type(exc).__name__)
            return None

    async def fetch_links(self, url: str) -> List[str]:
        page = await self.fetch_page(url)
        if page is None:
            return []
        final_url, html = page
        return extract_links(html, final_url)
