# sitemap_crawler/crawler/workers.py
"""
Worker pool: N asyncio tasks turning :class:`CrawlTask` items into :class:`CrawlResult` items.
"""
from __future__ import annotations

import asyncio
import logging
from typing import List

from sitemap_crawler.crawler.link_extractor import hostname_of, normalize_url
from sitemap_crawler.crawler.loader import PageLoader
from sitemap_crawler.crawler.models import CrawlResult, CrawlTask
from sitemap_crawler.crawler.task_queue import QueueClosed, TaskQueue
from sitemap_crawler.logger import LOGGER_NAME

__all__ = ("WorkerPool",)


class WorkerPool:
    """Fixed-size pool of workers fed by a :class:`TaskQueue`.

    A worker finishes when the queue is closed or when it is cancelled; an
    aborted fetch produces no result.
    """

    def __init__(
        self,
        size: int,
        tasks: TaskQueue[CrawlTask],
        results: asyncio.Queue[CrawlResult],
        loader: PageLoader,
        root_host: str,
    ) -> None:
        if size < 1:
            raise ValueError("worker pool size must be >= 1")
        self.size = size
        self.tasks = tasks
        self.results = results
        self.loader = loader
        self.root_host = root_host
        self.logger = logging.getLogger(LOGGER_NAME)
        self._workers: List[asyncio.Task[None]] = []

    def start(self) -> None:
        if self._workers:
            raise RuntimeError("worker pool already started")
        self._workers = [
            asyncio.create_task(self._worker(i), name=f"crawl-worker-{i}") for i in range(self.size)
        ]

    async def stop(self) -> None:
        """Close the task queue, cancel the workers and wait until all of them exit."""
        await self.tasks.close()
        for w in self._workers:
            w.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []

    async def _worker(self, index: int) -> None:
        while True:
            try:
                task = await self.tasks.pop()
            except QueueClosed:
                return
            self.logger.debug("worker %d: requesting %s [level %d]", index, task.url, task.level)
            try:
                links = await self.loader.fetch_links(task.url)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                self.logger.warning("Failed to get links of %s: %s", task.url, exc)
                links = []
            await self.results.put(
                CrawlResult(url=task.url, level=task.level, links=self.same_domain(links), parent=task.parent)
            )

    def same_domain(self, links: List[str]) -> List[str]:
        """Keep normalized links on the root host, first occurrence only; malformed ones are dropped."""
        kept: dict[str, None] = {}
        for link in links:
            host = hostname_of(link)
            if host is None:
                self.logger.debug("Loader returned a bad URL %r, dropped", link)
                continue
            if host != self.root_host:
                continue
            kept.setdefault(normalize_url(link), None)
        return list(kept)
