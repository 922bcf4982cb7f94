"""
lyngsat-wayback orchestrator: runs the two-stage pipeline.

Stage 1 looks up monthly captures in the CDX index, but only when the URL
cache file is missing. Stage 2 scrapes every cached capture, one at a time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

import requests

from .cdx_client import CDXClient, DEFAULT_USER_AGENT
from .html_retriever import HTMLRetriever
from .logger import ErrorTracker
from .scraper import TableScraper
from ..utils.url_cache import UrlCache, DEFAULT_CACHE_NAME
from ..utils.validators import validate_url, validate_date


DEFAULT_HOST = "http://www.lyngsat.com"
DEFAULT_FROM_DATE = "20000101"


def _today() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%d")


@dataclass
class RunConfig:
    host: str = DEFAULT_HOST
    from_date: str = DEFAULT_FROM_DATE
    to_date: str = field(default_factory=_today)
    cache_path: str = DEFAULT_CACHE_NAME
    request_timeout: Optional[float] = None  # None = transport default
    user_agent: str = DEFAULT_USER_AGENT
    log_dir: str = "logs"

    def validate(self) -> None:
        """Raise ValueError on a malformed host or date."""
        ok, _, err = validate_url(self.host)
        if not ok:
            raise ValueError(f"Invalid host {self.host!r}: {err}")
        for value in (self.from_date, self.to_date):
            ok, err = validate_date(value)
            if not ok:
                raise ValueError(err)
        if self.from_date > self.to_date:
            raise ValueError(f"from_date {self.from_date} is after to_date {self.to_date}")


class ArchiveController:
    def __init__(self,
                 config: RunConfig,
                 logger: Optional[logging.Logger] = None,
                 cdx: Optional[CDXClient] = None,
                 retriever: Optional[HTMLRetriever] = None,
                 writer: Callable[[str], None] = print):
        config.validate()
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.errors = ErrorTracker(self.logger)
        self.cdx = cdx or CDXClient(timeout=config.request_timeout, user_agent=config.user_agent)
        self.retriever = retriever or HTMLRetriever(timeout=config.request_timeout, user_agent=config.user_agent)
        self.cache = UrlCache(config.cache_path)
        self.scraper = TableScraper(self.retriever, error_tracker=self.errors, writer=writer)

    def fetch_archived_snapshots(self, target_url: str, from_date: str, to_date: str) -> Dict[str, str]:
        """
        Stage 1: look up monthly captures and write them to the cache.

        Failures are logged, not raised; nothing is written on failure or
        when the index has no captures.
        """
        snapshots: Dict[str, str] = {}
        try:
            snapshots = self.cdx.get_monthly_snapshots(target_url, from_date, to_date)
        except (requests.RequestException, ValueError) as e:
            self.errors.log_error(e, context="CDX lookup", url=target_url)

        if snapshots:
            path = self.cache.write(snapshots)
            self.logger.info(f"Done: Wayback URLs saved to {path}")
        else:
            self.errors.log_warning("No results found for the given URL and date range.", url=target_url)
        return snapshots

    def run(self) -> Dict[str, int]:
        """Run both stages and return the scrape counters."""
        if self.cache.exists():
            self.logger.info("Wayback URLs file already exists. Reading from file...")
        else:
            self.logger.info("Wayback URLs file not found. Fetching archived URLs...")
            self.fetch_archived_snapshots(self.config.host, self.config.from_date, self.config.to_date)

        stats = dict(self.scraper.stats)
        try:
            urls = self.cache.archived_urls()
        except (OSError, ValueError) as e:
            # A corrupt cache is reported, not refetched
            self.errors.log_error(e, context="reading URL cache", url=str(self.cache.path))
        else:
            self.logger.info(f"Processing {len(urls)} URLs...")
            stats = self.scraper.scrape_all(urls)

        summary = self.errors.summary()
        self.logger.info(
            f"Script execution completed: {stats['tables']} tables from {stats['urls']} URLs, "
            f"{summary['total_errors']} errors, {summary['total_warnings']} warnings"
        )
        return stats

    def close(self):
        self.cdx.close()
        self.retriever.close()
