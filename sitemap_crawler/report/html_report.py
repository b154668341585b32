# File: sitemap_crawler/report/html_report.py
"""sitemap_crawler.report.html_report: HTML-отчёт с деревом страниц через Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from jinja2 import Environment, select_autoescape

from sitemap_crawler.crawler.models import PageNode
from sitemap_crawler.report.tree import tree_to_list

_TEMPLATE = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Sitemap {{ root.url if root else '' }}</title></head>
<body>
<h1>Sitemap</h1>
<p>{{ total }} page(s)</p>
{%- macro render(node) %}
<li><a href="{{ node.url }}">{{ node.url }}</a>
{%- if node.children %}
<ul>{% for child in node.children %}{{ render(child) }}{% endfor %}</ul>
{%- endif %}
</li>
{%- endmacro %}
{% if root %}<ul>{{ render(root) }}</ul>{% endif %}
</body>
</html>
"""


def render_tree_html(root: Optional[PageNode]) -> str:
    """Рендерит дерево в HTML-строку (URL экранируются автоматически)."""
    env = Environment(autoescape=select_autoescape(default_for_string=True, default=True))
    template = env.from_string(_TEMPLATE)
    return template.render(root=root, total=len(tree_to_list(root)))


class HtmlReporter:
    """Сохраняет дерево страниц в HTML-файл."""

    def __init__(self, output_path: Union[str, Path]) -> None:
        self.output_path = Path(output_path)

    def save(self, root: Optional[PageNode]) -> Path:
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.output_path.write_text(render_tree_html(root), encoding="utf-8")
        return self.output_path
