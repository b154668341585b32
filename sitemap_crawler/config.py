"""
Загрузка и валидация конфигурации SitemapCrawler.
Схема описана через Pydantic, файлы читаются из YAML или JSON.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Literal, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

OutputFormat = Literal["xml", "json", "html"]


class CrawlerConfig(BaseModel):
    """Параметры одного запуска обхода сайта."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    root_url: HttpUrl = Field(..., description="URL, с которого начинается обход.")
    workers: int = Field(5, ge=1, description="Число параллельных воркеров.")
    max_depth: int = Field(3, ge=0, description="Максимальная глубина ссылок (0 = только корень).")
    timeout: float = Field(10.0, gt=0, description="Таймаут на один запрос (секунд).")
    user_agent: str = Field("SitemapCrawler/1.0", min_length=1, description="Заголовок User-Agent.")
    output_file: Path = Field(Path("sitemap.xml"), description="Куда сохранить отчёт.")
    output_format: OutputFormat = Field("xml", description="Формат отчёта: xml, json или html.")

    @field_validator("root_url", mode="before")
    def _strip_whitespace(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def read_config_file(path: Union[str, Path]) -> dict[str, Any]:
    """Читает YAML/JSON-файл и возвращает сырой mapping без валидации."""
    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ValueError(f"Unsupported config format: {suffix}")


def load_config(path: Union[str, Path]) -> CrawlerConfig:
    """
    Читает YAML или JSON и возвращает проверенный CrawlerConfig.
    Ошибки схемы пробрасываются как pydantic.ValidationError.
    """
    return CrawlerConfig(**read_config_file(path))


def with_overrides(config: CrawlerConfig | None, **values: Any) -> CrawlerConfig:
    """Возвращает новый проверенный конфиг: непустые (не ``None``) *values* поверх *config*."""
    data: dict[str, Any] = config.model_dump(mode="json") if config is not None else {}
    data.update({k: v for k, v in values.items() if v is not None})
    return CrawlerConfig(**data)
