"""
Page Matching Heuristics

The listing site's markup differs from page to page and from year to year,
so every step of the walk is guided by text and structure tests rather than
ids or classes. Each test here is a plain function over BeautifulSoup tags.
"""

from __future__ import annotations

import copy
import re
from typing import Iterable, List, Optional

from bs4 import BeautifulSoup, Tag

from .models import RegionHeading, RegionLink
from ..utils.validators import resolve_link


FREE_TV_TEXT = "Free TV"
FREE_PREFIX = "Free"
MAX_REJECTED_CELLS = 4
EXCLUDED_TABLE_TEXT = ("Advertisements", "News at")
ADVERT_HREF = "advert"
CELL_SEPARATOR = " | "


def _href(anchor: Tag) -> str:
    href = anchor.get('href')
    return href.strip() if isinstance(href, str) else ''


def collapse_whitespace(text: str) -> str:
    return re.sub(r'\s+', ' ', text).strip()


# Free TV link

def is_free_tv_anchor(anchor: Tag) -> bool:
    """Anchor text mentions "Free TV" and its href looks like the free index page."""
    text = anchor.get_text().strip()
    href = _href(anchor)
    return FREE_TV_TEXT in text and 'free' in href and 'index' in href


def find_free_tv_link(soup: BeautifulSoup, base_url: str) -> Optional[str]:
    """
    Absolute URL of the first Free TV anchor in document order.

    Returns:
        Resolved URL, or None when no anchor matches
    """
    anchor = next((a for a in soup.find_all('a') if is_free_tv_anchor(a)), None)
    if anchor is None:
        return None
    return resolve_link(base_url, _href(anchor))


# Region links

def own_text(element: Tag) -> str:
    """Text of *element* with every descendant anchor removed."""
    clone = copy.copy(element)
    for anchor in clone.find_all('a'):
        anchor.decompose()
    return clone.get_text().strip()


def is_region_heading(bold: Tag) -> bool:
    """
    A bold element heads a group of region links when it contains an anchor
    and either its own text or its first anchor's text marks it as "Free".
    """
    anchors = bold.find_all('a')
    if not anchors:
        return False
    return FREE_PREFIX in own_text(bold) or anchors[0].get_text().strip().startswith(FREE_PREFIX)


def find_region_headings(soup: BeautifulSoup, page_url: str) -> List[RegionHeading]:
    """Qualifying bold elements in document order, with their anchors resolved."""
    headings = []
    for bold in soup.find_all('b'):
        if not is_region_heading(bold):
            continue
        anchors = []
        for anchor in bold.find_all('a'):
            href = _href(anchor)
            url = resolve_link(page_url, href) if href else None
            anchors.append((anchor.get_text().strip(), url))
        headings.append(RegionHeading(text=collapse_whitespace(bold.get_text()), anchors=anchors))
    return headings


def region_links_from_headings(headings: Iterable[RegionHeading]) -> List[RegionLink]:
    """
    Region links across all headings, in order. Anchors whose text starts with
    "Free" label the group itself and are left out. Anchors without href are
    kept so the failure shows up against their region.
    """
    links = []
    for heading in headings:
        for text, url in heading.anchors:
            if text.startswith(FREE_PREFIX):
                continue
            links.append(RegionLink(text=text, url=url))
    return links


def extract_region_links(soup: BeautifulSoup, page_url: str) -> List[RegionLink]:
    return region_links_from_headings(find_region_headings(soup, page_url))


# Target table

def table_qualifies(table: Tag) -> bool:
    """
    True for tables that look like channel data rather than layout, news
    or advertising blocks.
    """
    if len(table.find_all('td')) <= MAX_REJECTED_CELLS:
        return False
    text = table.get_text()
    if any(excluded in text for excluded in EXCLUDED_TABLE_TEXT):
        return False
    if table.find('a', href=lambda href: href is not None and ADVERT_HREF in href):
        return False
    if table.find('i') is not None:
        return False
    if table.find('script') is not None:
        return False
    return True


def select_target_table(tables: List[Tag]) -> Optional[Tag]:
    """Bottom-most qualifying table; the scan runs upward from the end of the page."""
    return next((table for table in reversed(tables) if table_qualifies(table)), None)


def find_target_table(soup: BeautifulSoup) -> Optional[Tag]:
    return select_target_table(soup.find_all('table'))


def format_row(row: Tag) -> str:
    return CELL_SEPARATOR.join(cell.get_text().strip() for cell in row.find_all('td'))


def table_rows(table: Tag) -> List[str]:
    """One formatted line per ``<tr>`` in document order."""
    return [format_row(row) for row in table.find_all('tr')]
