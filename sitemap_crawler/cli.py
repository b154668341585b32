#!/usr/bin/env python3
"""
Точка входа SitemapCrawler для командной строки.

Использование:
  sitemap-crawler URL [опции]

Опции:
  --workers, -w INT     Число параллельных воркеров (default: 5)
  --max-depth, -d INT   Максимальная глубина обхода (default: 3)
  --output, -o PATH     Файл отчёта (default: sitemap.xml)
  --format, -f FORMAT   Формат отчёта: xml, json, html (default: xml)
  --timeout SEC         Таймаут одного запроса
  --user-agent TEXT     Заголовок User-Agent
  --config, -c PATH     YAML/JSON-конфиг; явные опции имеют приоритет
  --log-level LEVEL     Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH       Файл для логов (stdout, если не указан)
  --version, -v         Показать версию

Ctrl+C (SIGINT) или SIGTERM останавливают обход, частичный отчёт сохраняется.

Пример:
  sitemap-crawler https://example.com -w 10 -d 2 -o out/sitemap.xml
"""
import asyncio
import signal
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from sitemap_crawler import __version__
from sitemap_crawler.config import CrawlerConfig, read_config_file, with_overrides
from sitemap_crawler.engine import start_crawl
from sitemap_crawler.logger import init_logging, logger

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def build_config(url, config_path, **overrides) -> CrawlerConfig:
    """Собирает конфиг: файл (если есть), поверх него явные опции CLI."""
    data = read_config_file(config_path) if config_path else {}
    data["root_url"] = url
    return with_overrides(CrawlerConfig(**data), **overrides)


async def _run_with_signals(cfg: CrawlerConfig) -> Path:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _on_signal, stop)
        except (NotImplementedError, RuntimeError):
            # Windows или не главный поток
            pass
    try:
        return await start_crawl(cfg, stop)
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.remove_signal_handler(sig)
            except (NotImplementedError, RuntimeError):
                pass


def _on_signal(stop: asyncio.Event) -> None:
    logger.info("Received interrupt signal, shutting down gracefully")
    stop.set()


@click.command(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SitemapCrawler, version %(version)s')
@click.argument('url')
@click.option('--workers', '-w', type=int, default=None, help='Число параллельных воркеров [default: 5]')
@click.option('--max-depth', '-d', 'max_depth', type=int, default=None, help='Максимальная глубина обхода [default: 3]')
@click.option(
    '--output', '-o', 'output_file',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Файл отчёта [default: sitemap.xml]'
)
@click.option(
    '--format', '-f', 'output_format',
    default=None,
    type=click.Choice(['xml', 'json', 'html']),
    help='Формат отчёта [default: xml]'
)
@click.option('--timeout', type=float, default=None, help='Таймаут одного запроса, секунд [default: 10]')
@click.option('--user-agent', 'user_agent', default=None, help='Заголовок User-Agent')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к YAML/JSON-конфигу.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stdout, если не указан)'
)
def cli(url, workers, max_depth, output_file, output_format, timeout, user_agent, config_path, log_level, log_file):
    """Обойти сайт начиная с URL и сохранить карту сайта."""
    init_logging(level=log_level, log_file=str(log_file) if log_file else None)
    try:
        cfg = build_config(
            url,
            config_path,
            workers=workers,
            max_depth=max_depth,
            output_file=output_file,
            output_format=output_format,
            timeout=timeout,
            user_agent=user_agent,
        )
    except (ValidationError, ValueError, TypeError, OSError) as e:
        print_error(f'Ошибка конфигурации: {e}')

    try:
        saved = asyncio.run(_run_with_signals(cfg))
    except Exception as e:
        print_error(f'Ошибка при обходе: {e}')
    click.echo(f'Sitemap: {saved}')


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
