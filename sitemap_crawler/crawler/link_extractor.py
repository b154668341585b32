# sitemap_crawler/crawler/link_extractor.py
"""
Link extraction and URL helpers for SitemapCrawler.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple
from urllib.parse import urldefrag, urljoin, urlparse, urlsplit, urlunsplit

from bs4 import BeautifulSoup
from bs4.element import Tag

from sitemap_crawler.logger import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

HTTP_SCHEMES = ("http", "https")


def _hrefs(soup: BeautifulSoup, name: str) -> List[str]:
    values: List[str] = []
    for tag in soup.find_all(name, href=True):
        if not isinstance(tag, Tag):
            continue
        href = tag.get("href")
        if isinstance(href, str) and href.strip():
            values.append(href.strip())
    return values


def extract_anchors_and_bases(html: str) -> Tuple[List[str], List[str]]:
    """Return raw ``<a href>`` and ``<base href>`` values in document order."""
    soup = BeautifulSoup(html, "html.parser")
    return _hrefs(soup, "a"), _hrefs(soup, "base")


def normalize_url(url: str) -> str:
    """
    Normalize URL by lowercasing scheme and host and turning an empty path
    into "/", so that ``http://Host`` and ``http://host/`` compare equal.
    """
    parts = urlsplit(url)
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), parts.path or "/", parts.query, parts.fragment))


def resolve_links(links: List[str], base: str, page_url: str) -> List[str]:
    """
    Make *links* absolute.

    A relative *base* is first resolved against *page_url*, then every link
    against the base. Fragments are cut off, fragment-only links are skipped
    and only http(s) results are kept.
    Results are normalized with :func:`normalize_url`.
    """
    base_url = urljoin(page_url, base)
    resolved: List[str] = []
    for link in links:
        no_fragment, _ = urldefrag(link)
        if not no_fragment:
            continue
        try:
            absolute = urljoin(base_url, no_fragment)
            scheme = urlparse(absolute).scheme
        except ValueError as exc:
            logger.debug("Skipping link %r on %s: %s", link, page_url, exc)
            continue
        if scheme in HTTP_SCHEMES:
            resolved.append(normalize_url(absolute))
    return resolved


def extract_links(html: str, page_url: str) -> List[str]:
    """
    Extract absolute http(s) links from the ``<a>`` tags of a page.

    The first ``<base href>`` wins if the page declares several of them.
    """
    links, bases = extract_anchors_and_bases(html)
    base = page_url
    if bases:
        base = bases[0]
        if len(bases) > 1:
            logger.warning('Page %s has %d <base> tags, applying <base href="%s">', page_url, len(bases), base)
    return resolve_links(links, base, page_url)


def hostname_of(url: str) -> Optional[str]:
    """Lower-cased hostname of an http(s) URL, ``None`` when the URL is not crawlable."""
    try:
        parsed = urlparse(url)
        host = parsed.hostname
    except ValueError:
        return None
    if parsed.scheme not in HTTP_SCHEMES or not host:
        return None
    return host
