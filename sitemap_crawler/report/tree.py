# File: sitemap_crawler/report/tree.py
"""Tree helpers shared by the reporters."""

from __future__ import annotations

from typing import List, Optional

from sitemap_crawler.crawler.models import PageNode


def tree_to_list(root: Optional[PageNode]) -> List[str]:
    """Unique URLs of the tree, depth-first, first occurrence wins."""
    if root is None:
        return []
    seen: dict[str, None] = {}
    for node, _ in root.walk():
        seen.setdefault(node.url, None)
    return list(seen)
