# File: sitemap_crawler/report/__init__.py
"""sitemap_crawler.report: reporters that serialize the finished page tree."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol, Union

from sitemap_crawler.crawler.models import PageNode
from sitemap_crawler.report.html_report import HtmlReporter
from sitemap_crawler.report.json_report import JsonReporter
from sitemap_crawler.report.sitemap_report import SitemapReporter
from sitemap_crawler.report.tree import tree_to_list


class Reporter(Protocol):
    def save(self, root: Optional[PageNode]) -> Path:
        ...


_REPORTERS = {
    "xml": SitemapReporter,
    "json": JsonReporter,
    "html": HtmlReporter,
}


def make_reporter(output_format: str, output_path: Union[str, Path]) -> Reporter:
    """Return the reporter for *output_format* (``xml``, ``json`` or ``html``)."""
    try:
        factory = _REPORTERS[output_format]
    except KeyError:
        raise ValueError(f"Unsupported output format: {output_format}") from None
    return factory(output_path)


__all__ = [
    "Reporter",
    "SitemapReporter",
    "JsonReporter",
    "HtmlReporter",
    "make_reporter",
    "tree_to_list",
]
