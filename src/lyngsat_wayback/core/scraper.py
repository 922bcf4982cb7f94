"""
Archived listing scraper.

Walks one archived base page down to its regional channel tables:
base page -> Free TV page -> region pages -> bottom-most data table.
Failures are contained per base URL and per region so a batch always
runs to the end.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from .heuristics import (
    find_free_tv_link,
    find_region_headings,
    find_target_table,
    region_links_from_headings,
    table_rows,
)
from .html_retriever import HTMLRetriever
from .logger import ErrorTracker
from .models import RegionLink


SEPARATOR = "-" * 51


class TableScraper:
    def __init__(self,
                 retriever: HTMLRetriever,
                 error_tracker: Optional[ErrorTracker] = None,
                 writer: Callable[[str], None] = print,
                 logger: Optional[logging.Logger] = None):
        """
        Args:
            retriever: Fetches and parses pages
            error_tracker: Records skipped units; one is created if omitted
            writer: Receives each formatted table row
        """
        self.retriever = retriever
        self.logger = logger or logging.getLogger(__name__)
        self.errors = error_tracker or ErrorTracker(self.logger)
        self.writer = writer
        self.stats: Dict[str, int] = {"urls": 0, "regions": 0, "tables": 0, "failed": 0}

    def scrape_all(self, base_urls: List[str]) -> Dict[str, int]:
        """Scrape each base URL in order and return the running counters."""
        for base_url in base_urls:
            self.scrape_and_print(base_url)
        return self.stats

    def scrape_and_print(self, base_url: str) -> None:
        """Print every region table reachable from *base_url*. Never raises."""
        self.logger.info(f"Processing base URL: {base_url}")
        self.stats["urls"] += 1

        try:
            soup = self.retriever.retrieve_soup(base_url)
            free_tv_url = find_free_tv_link(soup, base_url)
            if free_tv_url is None:
                self.errors.log_warning("No Free TV URL found", url=base_url)
            else:
                self.logger.info(f"Found Free TV URL: {free_tv_url}")
                for region in self.discover_regions(free_tv_url):
                    self.process_region(region)
        except Exception as e:
            self.stats["failed"] += 1
            self.errors.log_error(e, context="base page", url=base_url)

        self.logger.info(f"Finished processing {base_url}")
        self.logger.info(SEPARATOR)

    def discover_regions(self, free_tv_url: str) -> List[RegionLink]:
        """
        Fetch the Free TV page and list its region links.

        Raises:
            requests.RequestException: If the page cannot be fetched
        """
        soup = self.retriever.retrieve_soup(free_tv_url)
        headings = find_region_headings(soup, free_tv_url)
        for heading in headings:
            self.logger.info(f"Found b element: {heading.text}")
            for position, (text, url) in enumerate(heading.anchors, 1):
                self.logger.info(f"   Link {position}: {text} -> {url or 'N/A'}")

        regions = region_links_from_headings(headings)
        self.logger.info(f"Discovered {len(regions)} region links on {free_tv_url}")
        return regions

    def process_region(self, region: RegionLink) -> bool:
        """
        Print the target table of one region page.

        Returns:
            True when a table was printed
        """
        self.logger.info(f"Processing region: {region.text}")
        self.stats["regions"] += 1

        try:
            if region.url is None:
                raise ValueError(f"Region link {region.text!r} has no href")
            soup = self.retriever.retrieve_soup(region.url)
            table = find_target_table(soup)
            if table is None:
                self.errors.log_warning(f"No suitable table found for {region.text}",
                                        context=region.text, url=region.url)
                return False

            rows = table_rows(table)
            self.logger.info(f"Found suitable table with {len(rows)} rows")
            for row in rows:
                self.writer(f"      {row}")
            self.stats["tables"] += 1
            return True

        except Exception as e:
            self.stats["failed"] += 1
            self.errors.log_error(e, context=f"region {region.text}", url=region.url)
            return False
