"""
Link extraction for LinkSpider.
"""
from __future__ import annotations

from typing import List
from urllib.parse import urldefrag, urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from link_spider.utils import is_absolute_link, remove_duplicates

_SKIPPED_SCHEMES = ("mailto:", "javascript:")


def extract_links(base_url: str, content: str, ignore_relative: bool = False) -> List[str]:
    """
    Extract the targets of every ``<a href>`` in *content*.

    Targets are resolved against *base_url*, stripped of their fragment and
    returned without duplicates in document order. ``mailto:`` and
    ``javascript:`` links are skipped. With *ignore_relative* only hrefs
    written in absolute form (``scheme://...``) are kept.
    """
    soup = BeautifulSoup(content or "", "html.parser")
    links: List[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        raw = href_val.strip()
        if raw.lower().startswith(_SKIPPED_SCHEMES):
            continue
        if ignore_relative and not is_absolute_link(raw):
            continue
        absolute, _ = urldefrag(urljoin(base_url, raw))
        links.append(absolute)
    return remove_duplicates(links)


__all__ = ["extract_links"]
