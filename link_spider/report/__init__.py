"""link_spider.report: JSON- и HTML-отчёты по результатам обхода."""

from link_spider.report.html_report import render_html
from link_spider.report.json_report import render_json

__all__ = ["render_json", "render_html"]
