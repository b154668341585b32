# sitemap_crawler/crawler/models.py
"""
Data models shared by the crawl coordinator and the worker pool.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple


class InvalidRootURL(ValueError):
    """The root URL cannot be crawled (no http(s) scheme or no host)."""


@dataclass(slots=True, eq=False)
class PageNode:
    """Entry of the resulting page tree. Children keep discovery order."""

    url: str
    children: List[PageNode] = field(default_factory=list)

    def add_child(self, child: PageNode) -> None:
        self.children.append(child)

    def drop_child(self, url: str) -> Optional[PageNode]:
        """Detach the first child with *url* and return it (``None`` if absent)."""
        for i, child in enumerate(self.children):
            if child.url == url:
                return self.children.pop(i)
        return None

    def walk(self, depth: int = 0) -> Iterator[Tuple[PageNode, int]]:
        """Yield ``(node, depth)`` pairs depth-first, starting with this node."""
        stack: List[Tuple[PageNode, int]] = [(self, depth)]
        while stack:
            node, level = stack.pop()
            yield node, level
            stack.extend((c, level + 1) for c in reversed(node.children))

    def find(self, url: str) -> Optional[PageNode]:
        for node, _ in self.walk():
            if node.url == url:
                return node
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {"url": self.url, "children": [c.to_dict() for c in self.children]}


@dataclass(slots=True)
class VisitRecord:
    """Shallowest accepted level of a URL and the node owning it (``None`` for the root)."""

    level: int
    parent: Optional[PageNode]


@dataclass(slots=True)
class CrawlTask:
    """Instruction for a worker to fetch one URL."""

    url: str
    level: int
    parent: Optional[PageNode] = None


@dataclass(slots=True)
class CrawlResult:
    """What a worker found for a :class:`CrawlTask`."""

    url: str
    level: int
    links: List[str]
    parent: Optional[PageNode] = None


@dataclass(slots=True)
class CrawlStats:
    """Counters collected by the coordinator for the summary log line."""

    fetched: int = 0
    accepted: int = 0
    replaced: int = 0
    discarded: int = 0
    enqueued: int = 0
    cancelled: bool = False
    elapsed: float = 0.0
