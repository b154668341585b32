# sitemap_crawler/crawler/coordinator.py
"""
Crawl coordinator: the single consumer of worker results.

The coordinator alone owns the page tree, the visit records and the
outstanding-task counter, so none of them needs a lock. Only the task queue
and the result channel are shared with the workers.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Dict, Optional

from sitemap_crawler.crawler.link_extractor import hostname_of, normalize_url
from sitemap_crawler.crawler.loader import PageLoader
from sitemap_crawler.crawler.models import (
    CrawlResult,
    CrawlStats,
    CrawlTask,
    InvalidRootURL,
    PageNode,
    VisitRecord,
)
from sitemap_crawler.crawler.task_queue import TaskQueue
from sitemap_crawler.crawler.workers import WorkerPool
from sitemap_crawler.logger import LOGGER_NAME

__all__ = ("CrawlCoordinator",)


class CrawlCoordinator:
    """Breadth-first crawl of one site, keeping every URL at its shallowest level."""

    def __init__(self, root_url: str, loader: PageLoader, workers: int = 5, max_depth: int = 3) -> None:
        host = hostname_of(root_url)
        if host is None:
            raise InvalidRootURL(f"bad root URL [{root_url}]")
        if workers < 1:
            raise ValueError("workers must be >= 1")
        if max_depth < 0:
            raise ValueError("max_depth must be >= 0")

        self.root_url = normalize_url(root_url)
        self.root_host = host
        self.loader = loader
        self.workers = workers
        self.max_depth = max_depth

        self.root: Optional[PageNode] = None
        self.visits: Dict[str, VisitRecord] = {}
        self.stats = CrawlStats()
        self.logger = logging.getLogger(LOGGER_NAME)

        self._started = False
        self._outstanding = 0
        self._tasks: TaskQueue[CrawlTask] = TaskQueue()
        # one pending result per worker at most
        self._results: asyncio.Queue[CrawlResult] = asyncio.Queue(maxsize=workers)

    @property
    def outstanding(self) -> int:
        return self._outstanding

    @property
    def tasks(self) -> TaskQueue[CrawlTask]:
        return self._tasks

    def page_count(self) -> int:
        return sum(1 for _ in self.root.walk()) if self.root is not None else 0

    async def seed(self) -> None:
        """Queue the root task."""
        await self._enqueue(CrawlTask(url=self.root_url, level=0, parent=None))

    async def run(self, stop: Optional[asyncio.Event] = None) -> Optional[PageNode]:
        """
        Crawl until no task is outstanding or *stop* is set.

        Returns the root of the page tree. After a stop the partial tree is
        returned (``None`` if even the root page had not been processed).
        """
        if self._started:
            raise RuntimeError("a coordinator can run only once")
        self._started = True
        stop = stop or asyncio.Event()
        started = time.monotonic()
        self.logger.info(
            "Crawl started: %s (workers=%d, max_depth=%d)", self.root_url, self.workers, self.max_depth
        )

        pool = WorkerPool(self.workers, self._tasks, self._results, self.loader, self.root_host)
        await self.seed()
        pool.start()
        try:
            while self._outstanding > 0:
                result = await self._next_result(stop)
                if result is None:
                    self.stats.cancelled = True
                    self.logger.info("Crawl stopped, %d task(s) left unresolved", self._outstanding)
                    break
                await self.handle_result(result)
        finally:
            await pool.stop()
            self.stats.elapsed = time.monotonic() - started

        self.logger.info(
            "Crawl finished: %d page(s) in tree, %d fetched, %d replaced, %d discarded in %.2f s",
            self.page_count(),
            self.stats.fetched,
            self.stats.replaced,
            self.stats.discarded,
            self.stats.elapsed,
        )
        return self.root

    async def _next_result(self, stop: asyncio.Event) -> Optional[CrawlResult]:
        """Wait for the next worker result, or return ``None`` once *stop* is set."""
        if stop.is_set():
            return None
        getter = asyncio.ensure_future(self._results.get())
        stopper = asyncio.ensure_future(stop.wait())
        try:
            await asyncio.wait({getter, stopper}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            stopper.cancel()
            if not getter.done():
                getter.cancel()
        if getter.done() and not getter.cancelled():
            return getter.result()
        return None

    async def handle_result(self, result: CrawlResult) -> None:
        """Merge one result into the tree, schedule its links and resolve its task."""
        self.stats.fetched += 1
        node = self._accept(result)
        if node is not None and result.level < self.max_depth:
            for link in result.links:
                await self._schedule(CrawlTask(url=link, level=result.level + 1, parent=node))
        self._outstanding -= 1
        if self._outstanding == 0:
            await self._tasks.close()

    def _accept(self, result: CrawlResult) -> Optional[PageNode]:
        record = self.visits.get(result.url)
        if record is not None:
            if record.level <= result.level:
                self.stats.discarded += 1
                return None
            # shallower path found: the old node and its subtree leave the tree
            if record.parent is not None:
                record.parent.drop_child(result.url)
            self.stats.replaced += 1
            self.logger.debug("Moving %s from level %d to %d", result.url, record.level, result.level)

        self.visits[result.url] = VisitRecord(level=result.level, parent=result.parent)
        node = PageNode(url=result.url)
        if result.parent is None:
            self.root = node
        else:
            result.parent.add_child(node)
        self.stats.accepted += 1
        return node

    async def _schedule(self, task: CrawlTask) -> None:
        record = self.visits.get(task.url)
        if record is not None and record.level <= task.level:
            # would be discarded on arrival anyway
            return
        await self._enqueue(task)

    async def _enqueue(self, task: CrawlTask) -> None:
        self._outstanding += 1
        self.stats.enqueued += 1
        await self._tasks.push(task)
