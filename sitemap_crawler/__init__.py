"""
SitemapCrawler package initializer.
Defines package version and exposes the crawl engine.
"""
__version__ = "0.1.0"

from sitemap_crawler.crawler import CrawlCoordinator, PageNode
from sitemap_crawler.engine import Engine, start_crawl

__all__ = ["__version__", "CrawlCoordinator", "PageNode", "Engine", "start_crawl"]
