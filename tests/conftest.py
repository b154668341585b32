# File: tests/conftest.py
import asyncio
import random
from typing import Dict, List

import pytest

from sitemap_crawler.crawler.models import PageNode


class GraphLoader:
    """
    Fake page loader driven by a fixed link graph.
    Optional random delays shuffle the order in which fetches complete.
    """

    def __init__(self, graph: Dict[str, List[str]], jitter: float = 0.0, seed: int = 0) -> None:
        self.graph = graph
        self.jitter = jitter
        self.calls: List[str] = []
        self._rnd = random.Random(seed)

    async def fetch_links(self, url: str) -> List[str]:
        self.calls.append(url)
        if self.jitter:
            await asyncio.sleep(self._rnd.uniform(0, self.jitter))
        else:
            await asyncio.sleep(0)
        return list(self.graph.get(url, []))


def tree_paths(root: PageNode) -> set[str]:
    """Every root-to-node path as ``[a]:[b]:[c]`` strings."""
    paths: set[str] = set()

    def visit(node: PageNode, prefix: str) -> None:
        path = f"{prefix}:[{node.url}]" if prefix else f"[{node.url}]"
        paths.add(path)
        for child in node.children:
            visit(child, path)

    visit(root, "")
    return paths


def node_depths(root: PageNode) -> Dict[str, List[int]]:
    depths: Dict[str, List[int]] = {}
    for node, depth in root.walk():
        depths.setdefault(node.url, []).append(depth)
    return depths


@pytest.fixture()
def sample_tree() -> PageNode:
    """
    Small hand-built tree used by reporter tests.
    """
    return PageNode(
        url="http://example.com/",
        children=[
            PageNode(
                url="http://example.com/a",
                children=[PageNode("http://example.com/a/1"), PageNode("http://example.com/a/2")],
            ),
            PageNode(url="http://example.com/b?x=1&y=<2>"),
        ],
    )
