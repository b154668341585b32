"""sitemap_crawler.crawler: concurrent crawl engine (task queue, workers, coordinator)."""

from sitemap_crawler.crawler.coordinator import CrawlCoordinator
from sitemap_crawler.crawler.loader import HttpPageLoader, PageLoader
from sitemap_crawler.crawler.models import (
    CrawlResult,
    CrawlStats,
    CrawlTask,
    InvalidRootURL,
    PageNode,
    VisitRecord,
)
from sitemap_crawler.crawler.task_queue import QueueClosed, TaskQueue
from sitemap_crawler.crawler.workers import WorkerPool

__all__ = [
    "CrawlCoordinator",
    "CrawlResult",
    "CrawlStats",
    "CrawlTask",
    "HttpPageLoader",
    "InvalidRootURL",
    "PageLoader",
    "PageNode",
    "QueueClosed",
    "TaskQueue",
    "VisitRecord",
    "WorkerPool",
]
