# File: sitemap_crawler/report/sitemap_report.py
"""sitemap_crawler.report.sitemap_report: sitemap.xml generation with lxml."""

from __future__ import annotations

from pathlib import Path
from typing import List, Union

from lxml import etree

from sitemap_crawler.crawler.models import PageNode
from sitemap_crawler.report.tree import tree_to_list

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"


def build_sitemap(urls: List[str]) -> bytes:
    """Serialize *urls* into a ``<urlset>`` document, one ``<url><loc>`` per entry.

    lxml takes care of escaping ``&``, ``<`` and ``>`` in the locations.
    """
    urlset = etree.Element(f"{{{SITEMAP_NS}}}urlset", nsmap={None: SITEMAP_NS})
    for url in urls:
        entry = etree.SubElement(urlset, f"{{{SITEMAP_NS}}}url")
        loc = etree.SubElement(entry, f"{{{SITEMAP_NS}}}loc")
        loc.text = url
    return etree.tostring(urlset, xml_declaration=True, encoding="UTF-8", pretty_print=True)


class SitemapReporter:
    """Writes the page tree as a sitemap XML file."""

    def __init__(self, output_path: Union[str, Path]) -> None:
        self.output_path = Path(output_path)

    def save(self, root: PageNode | None) -> Path:
        urls = tree_to_list(root)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.output_path.write_bytes(build_sitemap(urls))
        return self.output_path
