# File: tests/test_coordinator.py
"""Crawl coordinator tests on fixed link graphs (no network)."""
from __future__ import annotations

import asyncio
from typing import Dict, List

import pytest

from conftest import GraphLoader, node_depths, tree_paths
from sitemap_crawler.crawler.coordinator import CrawlCoordinator
from sitemap_crawler.crawler.models import CrawlResult, InvalidRootURL

START = "http://start.e.com/"


def link(name: str) -> str:
    return f"{START}{name}"


async def crawl(graph: Dict[str, List[str]], max_depth: int, workers: int = 3, jitter: float = 0.0, seed: int = 0):
    loader = GraphLoader(graph, jitter=jitter, seed=seed)
    coordinator = CrawlCoordinator(START, loader, workers=workers, max_depth=max_depth)
    root = await asyncio.wait_for(coordinator.run(), timeout=10)
    return root, coordinator, loader


TREE = {
    START: [link("link_00_01"), link("link_00_02")],
    link("link_00_01"): [link("link_01_01"), link("link_01_02")],
    link("link_00_02"): [link("link_02_01"), link("link_02_02")],
}


@pytest.mark.asyncio()
async def test_tree():
    root, coordinator, _ = await crawl(TREE, max_depth=3)
    assert tree_paths(root) == {
        f"[{START}]",
        f"[{START}]:[{link('link_00_01')}]",
        f"[{START}]:[{link('link_00_01')}]:[{link('link_01_01')}]",
        f"[{START}]:[{link('link_00_01')}]:[{link('link_01_02')}]",
        f"[{START}]:[{link('link_00_02')}]",
        f"[{START}]:[{link('link_00_02')}]:[{link('link_02_01')}]",
        f"[{START}]:[{link('link_00_02')}]:[{link('link_02_02')}]",
    }
    assert coordinator.outstanding == 0
    assert coordinator.tasks.closed
    assert coordinator.page_count() == 7


@pytest.mark.asyncio()
async def test_children_keep_discovery_order():
    root, _, _ = await crawl(TREE, max_depth=1, workers=1)
    assert [c.url for c in root.children] == [link("link_00_01"), link("link_00_02")]


@pytest.mark.asyncio()
async def test_more_than_max_depth():
    graph = {
        START: [link("link_00_01"), link("link_00_02")],
        link("link_00_01"): [link("link_01_01"), link("link_01_02")],
        link("link_01_01"): [link("link_01_03"), link("link_01_04")],
        link("link_00_02"): [link("link_02_01"), link("link_02_02")],
    }
    root, _, loader = await crawl(graph, max_depth=2)

    depths = node_depths(root)
    assert max(d for ds in depths.values() for d in ds) == 2
    assert link("link_01_03") not in depths
    assert link("link_01_04") not in depths
    # level-2 pages are fetched, their links are not followed
    assert link("link_01_03") not in loader.calls


@pytest.mark.asyncio()
async def test_depth_chain_stops_at_max_depth():
    graph = {START: [link("b")], link("b"): [link("c")]}
    root, _, loader = await crawl(graph, max_depth=1)

    assert tree_paths(root) == {f"[{START}]", f"[{START}]:[{link('b')}]"}
    assert link("c") not in loader.calls


@pytest.mark.asyncio()
async def test_max_depth_zero_is_root_only():
    root, coordinator, loader = await crawl(TREE, max_depth=0)
    assert root.url == START
    assert root.children == []
    assert loader.calls == [START]
    assert coordinator.stats.enqueued == 1


@pytest.mark.asyncio()
async def test_duplicate_keeps_shallowest_path():
    graph = {
        START: [link("link_00_01"), link("link_00_02")],
        link("link_00_01"): [link("link_01_01"), link("link_01_02")],
        link("link_01_01"): [link("link_01_03"), link("link_01_04")],
        link("link_00_02"): [link("link_01_03"), link("link_02_02")],
    }
    for seed in range(5):
        root, _, _ = await crawl(graph, max_depth=5, jitter=0.01, seed=seed)
        assert tree_paths(root) == {
            f"[{START}]",
            f"[{START}]:[{link('link_00_01')}]",
            f"[{START}]:[{link('link_00_01')}]:[{link('link_01_01')}]",
            f"[{START}]:[{link('link_00_01')}]:[{link('link_01_02')}]",
            f"[{START}]:[{link('link_00_01')}]:[{link('link_01_01')}]:[{link('link_01_04')}]",
            f"[{START}]:[{link('link_00_02')}]",
            f"[{START}]:[{link('link_00_02')}]:[{link('link_01_03')}]",
            f"[{START}]:[{link('link_00_02')}]:[{link('link_02_02')}]",
        }


@pytest.mark.asyncio()
async def test_equal_level_duplicate_attached_once():
    graph = {
        START: [link("b"), link("c")],
        link("b"): [link("d")],
        link("c"): [link("d")],
    }
    root, _, _ = await crawl(graph, max_depth=2, jitter=0.01)
    depths = node_depths(root)
    assert depths[link("d")] == [2]
    parents = [c.url for c in root.children if c.find(link("d"))]
    assert len(parents) == 1
    assert parents[0] in (link("b"), link("c"))


@pytest.mark.asyncio()
async def test_cycle():
    graph = {
        START: [link("link_00_01"), link("link_00_02")],
        link("link_00_01"): [link("link_01_01"), link("link_01_02")],
        link("link_00_02"): [link("link_02_01"), link("link_02_03")],
        link("link_02_03"): [link("link_00_01"), link("link_00_02"), START],
    }
    root, coordinator, _ = await crawl(graph, max_depth=5)
    assert tree_paths(root) == {
        f"[{START}]",
        f"[{START}]:[{link('link_00_01')}]",
        f"[{START}]:[{link('link_00_01')}]:[{link('link_01_01')}]",
        f"[{START}]:[{link('link_00_01')}]:[{link('link_01_02')}]",
        f"[{START}]:[{link('link_00_02')}]",
        f"[{START}]:[{link('link_00_02')}]:[{link('link_02_01')}]",
        f"[{START}]:[{link('link_00_02')}]:[{link('link_02_03')}]",
    }
    assert coordinator.visits[START].level == 0
    assert coordinator.visits[START].parent is None


@pytest.mark.asyncio()
async def test_two_page_cycle_root_not_reattached():
    graph = {START: [link("b")], link("b"): [START]}
    root, coordinator, loader = await crawl(graph, max_depth=5)
    assert tree_paths(root) == {f"[{START}]", f"[{START}]:[{link('b')}]"}
    assert loader.calls.count(START) == 1
    assert coordinator.outstanding == 0


@pytest.mark.asyncio()
async def test_cross_domain_links_are_ignored():
    graph = {
        START: [link("a"), "http://other.e.com/x", "https://start.e.com/secure", "mailto:someone@start.e.com"],
        link("a"): ["http://[broken", "ftp://start.e.com/file"],
    }
    root, _, loader = await crawl(graph, max_depth=3)
    urls = {n.url for n, _ in root.walk()}
    assert urls == {START, link("a"), "https://start.e.com/secure"}
    assert "http://other.e.com/x" not in loader.calls


@pytest.mark.asyncio()
async def test_bare_host_root_is_the_same_page():
    graph = {
        START: [link("a"), "http://start.e.com", "http://START.e.com/"],
        link("a"): ["http://start.e.com"],
    }
    loader = GraphLoader(graph)
    coordinator = CrawlCoordinator("http://start.e.com", loader, workers=2, max_depth=3)
    root = await asyncio.wait_for(coordinator.run(), timeout=10)

    assert node_depths(root) == {START: [0], link("a"): [1]}
    assert loader.calls.count(START) == 1


@pytest.mark.asyncio()
async def test_same_link_twice_on_a_page_is_fetched_once():
    graph = {START: [link("a"), link("a"), link("a#top")]}
    root, _, loader = await crawl(graph, max_depth=2)
    assert sorted(c.url for c in root.children) == [link("a"), link("a#top")]
    assert loader.calls.count(link("a")) == 1


@pytest.mark.asyncio()
async def test_result_is_isomorphic_across_runs():
    graph = {
        START: [link(f"p{i}") for i in range(10)],
        **{link(f"p{i}"): [link(f"q{i}"), link(f"q{(i + 1) % 10}")] for i in range(10)},
        **{link(f"q{i}"): [START, link(f"p{i}")] for i in range(10)},
    }
    runs = []
    for seed in range(3):
        root, _, _ = await crawl(graph, max_depth=4, workers=4, jitter=0.005, seed=seed)
        depths = node_depths(root)
        assert all(len(ds) == 1 for ds in depths.values())
        runs.append({url: ds[0] for url, ds in depths.items()})
    assert runs[0] == runs[1] == runs[2]
    assert len(runs[0]) == 21


@pytest.mark.asyncio()
async def test_failing_loader_page_has_no_children():
    class FlakyLoader(GraphLoader):
        async def fetch_links(self, url):
            if url == link("broken"):
                raise RuntimeError("boom")
            return await super().fetch_links(url)

    graph = {START: [link("broken"), link("ok")], link("broken"): [link("never")], link("ok"): [link("leaf")]}
    coordinator = CrawlCoordinator(START, FlakyLoader(graph), workers=2, max_depth=3)
    root = await asyncio.wait_for(coordinator.run(), timeout=5)

    assert root.find(link("broken")).children == []
    assert root.find(link("ok")).children[0].url == link("leaf")
    assert root.find(link("never")) is None


@pytest.mark.asyncio()
async def test_shallower_result_replaces_deeper_node():
    coordinator = CrawlCoordinator(START, GraphLoader({}), workers=1, max_depth=5)
    await coordinator.seed()
    assert coordinator.outstanding == 1
    assert coordinator.tasks.drain()[0].url == START

    await coordinator.handle_result(CrawlResult(url=START, level=0, links=[link("a"), link("b")], parent=None))
    root = coordinator.root
    a_task, b_task = coordinator.tasks.drain()
    assert coordinator.outstanding == 2

    # "x" first arrives deep (a -> c -> x), with a child of its own
    await coordinator.handle_result(CrawlResult(url=link("a"), level=1, links=[link("c")], parent=a_task.parent))
    (c_task,) = coordinator.tasks.drain()
    await coordinator.handle_result(CrawlResult(url=link("c"), level=2, links=[link("x")], parent=root.find(link("a"))))
    (x_task,) = coordinator.tasks.drain()
    await coordinator.handle_result(CrawlResult(url=link("x"), level=3, links=[link("y")], parent=x_task.parent))
    coordinator.tasks.drain()
    assert coordinator.visits[link("x")].level == 3

    # then through b at level 2: the deep node is dropped, x re-queues its links
    await coordinator.handle_result(CrawlResult(url=link("b"), level=1, links=[link("x")], parent=b_task.parent))
    (x2_task,) = coordinator.tasks.drain()
    assert x2_task.level == 2
    await coordinator.handle_result(CrawlResult(url=link("x"), level=2, links=[link("y")], parent=x2_task.parent))

    assert coordinator.visits[link("x")].level == 2
    assert coordinator.visits[link("x")].parent is root.find(link("b"))
    assert root.find(link("c")).children == []
    assert [n.url for n in root.find(link("b")).children] == [link("x")]
    (y_task,) = coordinator.tasks.drain()
    assert y_task.level == 3
    assert y_task.parent is root.find(link("x"))
    assert coordinator.stats.replaced == 1


@pytest.mark.asyncio()
async def test_deeper_duplicate_is_discarded():
    coordinator = CrawlCoordinator(START, GraphLoader({}), workers=1, max_depth=5)
    await coordinator.seed()
    coordinator.tasks.drain()
    await coordinator.handle_result(CrawlResult(url=START, level=0, links=[link("a"), link("b"), link("c")], parent=None))
    a_task, _, _ = coordinator.tasks.drain()
    await coordinator.handle_result(CrawlResult(url=link("a"), level=1, links=[], parent=a_task.parent))

    root = coordinator.root
    await coordinator.handle_result(CrawlResult(url=link("a"), level=3, links=[link("z")], parent=root))

    assert [c.url for c in root.children] == [link("a")]
    assert coordinator.stats.discarded == 1
    assert coordinator.tasks.drain() == []


@pytest.mark.asyncio()
async def test_stop_returns_partial_tree():
    class SlowLoader(GraphLoader):
        async def fetch_links(self, url):
            if url != START:
                self.calls.append(url)
                await asyncio.sleep(30)
                return []
            return await super().fetch_links(url)

    graph = {START: [link("a"), link("b")]}
    loader = SlowLoader(graph)
    coordinator = CrawlCoordinator(START, loader, workers=2, max_depth=3)
    stop = asyncio.Event()

    task = asyncio.create_task(coordinator.run(stop))
    while len(loader.calls) < 3:
        await asyncio.sleep(0.01)
    stop.set()
    root = await asyncio.wait_for(task, timeout=2)

    assert root.url == START
    assert root.children == []
    assert coordinator.stats.cancelled
    assert coordinator.tasks.closed


@pytest.mark.asyncio()
async def test_stop_before_start_returns_none():
    stop = asyncio.Event()
    stop.set()
    coordinator = CrawlCoordinator(START, GraphLoader(TREE), workers=2, max_depth=3)
    assert await asyncio.wait_for(coordinator.run(stop), timeout=2) is None


@pytest.mark.asyncio()
async def test_cancelling_run_stops_workers():
    class HangingLoader(GraphLoader):
        async def fetch_links(self, url):
            self.calls.append(url)
            await asyncio.sleep(30)
            return []

    loader = HangingLoader({})
    coordinator = CrawlCoordinator(START, loader, workers=2, max_depth=3)
    task = asyncio.create_task(coordinator.run())
    while not loader.calls:
        await asyncio.sleep(0.01)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert coordinator.tasks.closed


@pytest.mark.asyncio()
async def test_run_only_once():
    coordinator = CrawlCoordinator(START, GraphLoader({}), workers=1, max_depth=0)
    await coordinator.run()
    with pytest.raises(RuntimeError):
        await coordinator.run()


@pytest.mark.parametrize("url", ["", "start.e.com", "ftp://start.e.com", "http://", "http://[::1"])
def test_invalid_root_url(url):
    with pytest.raises(InvalidRootURL):
        CrawlCoordinator(url, GraphLoader({}))


@pytest.mark.parametrize("workers,max_depth", [(0, 1), (1, -1)])
def test_invalid_limits(workers, max_depth):
    with pytest.raises(ValueError):
        CrawlCoordinator(START, GraphLoader({}), workers=workers, max_depth=max_depth)
