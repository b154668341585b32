# File: sitemap_crawler/engine.py
"""sitemap_crawler.engine: связывает конфиг, загрузчик страниц, координатор обхода и отчёт."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

from sitemap_crawler.config import CrawlerConfig
from sitemap_crawler.crawler.coordinator import CrawlCoordinator
from sitemap_crawler.crawler.loader import HttpPageLoader, PageLoader
from sitemap_crawler.crawler.models import CrawlStats, PageNode
from sitemap_crawler.logger import logger
from sitemap_crawler.report import Reporter, make_reporter

__all__ = ["Engine", "start_crawl"]


class Engine:
    """Фасад для CLI и тестов: обход сайта и сохранение отчёта."""

    def __init__(
        self,
        config: CrawlerConfig,
        loader: Optional[PageLoader] = None,
        reporter: Optional[Reporter] = None,
    ) -> None:
        self.config = config
        self.loader = loader
        self.reporter = reporter or make_reporter(config.output_format, config.output_file)
        self.stats: Optional[CrawlStats] = None

    async def crawl(self, stop: Optional[asyncio.Event] = None) -> Optional[PageNode]:
        """Обходит сайт и возвращает корень дерева страниц (частичное дерево после stop)."""
        root_url = str(self.config.root_url)
        if self.loader is not None:
            return await self._crawl(root_url, self.loader, stop)
        async with HttpPageLoader(timeout=self.config.timeout, user_agent=self.config.user_agent) as loader:
            return await self._crawl(root_url, loader, stop)

    async def _crawl(self, root_url: str, loader: PageLoader, stop: Optional[asyncio.Event]) -> Optional[PageNode]:
        coordinator = CrawlCoordinator(
            root_url,
            loader,
            workers=self.config.workers,
            max_depth=self.config.max_depth,
        )
        try:
            return await coordinator.run(stop)
        finally:
            self.stats = coordinator.stats

    async def run(self, stop: Optional[asyncio.Event] = None) -> Path:
        """Обход плюс сохранение отчёта; возвращает путь к отчёту."""
        root = await self.crawl(stop)
        try:
            path = self.reporter.save(root)
        except Exception as exc:
            logger.error("Failed to save report: %s", exc)
            raise
        logger.info("Report saved: %s", path)
        return path


async def start_crawl(config: CrawlerConfig, stop: Optional[asyncio.Event] = None) -> Path:
    """Точка входа для CLI: обход и сохранение отчёта."""
    return await Engine(config).run(stop)
