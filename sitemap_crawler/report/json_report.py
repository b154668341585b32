# sitemap_crawler/report/json_report.py

"""
Генерация JSON-отчёта: дерево страниц в виде вложенных объектов.

Формат узла: ``{"url": "...", "children": [...]}``.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from sitemap_crawler.crawler.models import PageNode


def tree_to_json(root: Optional[PageNode], *, pretty: bool = True) -> str:
    data: Optional[Dict[str, Any]] = root.to_dict() if root is not None else None
    return json.dumps(data, ensure_ascii=False, indent=2 if pretty else None)


class JsonReporter:
    """
    Сохраняет дерево страниц в JSON-файл.

    Пример:
    ```python
    from sitemap_crawler.report.json_report import JsonReporter
    path = JsonReporter('reports/sitemap.json').save(root)
    ```
    """

    def __init__(self, output_path: Union[str, Path], *, pretty: bool = True) -> None:
        self.output_path = Path(output_path)
        self.pretty = pretty

    def save(self, root: Optional[PageNode]) -> Path:
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.output_path.write_text(tree_to_json(root, pretty=self.pretty), encoding="utf-8")
        return self.output_path
