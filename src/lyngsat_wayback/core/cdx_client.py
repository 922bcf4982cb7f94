"""
CDX API Client for Internet Archive Wayback Machine

This module handles communication with the Internet Archive's CDX Server API
to find one capture per calendar month of a given URL.
"""

import requests
from typing import List, Dict, Optional, Any
import logging
from ..utils.validators import validate_url, validate_date, build_wayback_url


DEFAULT_USER_AGENT = 'lyngsat-wayback/1.0 (Archived Listing Scraper)'


class CDXClient:
    """
    Client for interacting with the Internet Archive CDX Server API.

    Each lookup is a single request; the index collapses captures on the
    first six timestamp digits so at most one capture per month comes back.
    """

    CDX_BASE_URL = "http://web.archive.org/cdx/search/cdx"

    def __init__(self, timeout: Optional[float] = None, user_agent: str = DEFAULT_USER_AGENT):
        """
        Initialize the CDX client.

        Args:
            timeout: Request timeout in seconds (None leaves the transport default)
            user_agent: User-Agent header sent with every request
        """
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)
        self.session = requests.Session()
        self.session.headers.update({
            'User-Agent': user_agent
        })

    def get_monthly_snapshots(self, url: str, from_date: str, to_date: str) -> Dict[str, str]:
        """
        Find one 200-status capture per month of *url* between two dates.

        Args:
            url: The URL to look up (e.g., "http://www.lyngsat.com")
            from_date: Start date, YYYYMMDD
            to_date: End date, YYYYMMDD

        Returns:
            Mapping of capture timestamp to Wayback Machine URL, in index order

        Raises:
            requests.RequestException: If the CDX API request fails
            ValueError: If the arguments or the response are invalid
        """
        ok, url, err = validate_url(url)
        if not ok:
            raise ValueError(f"Invalid target URL: {err}")
        for value in (from_date, to_date):
            ok, err = validate_date(value)
            if not ok:
                raise ValueError(err)

        params = {
            'url': url,
            'from': from_date,
            'to': to_date,
            'output': 'json',
            'fl': 'timestamp,original',
            'filter': ['statuscode:200'],
            'collapse': 'timestamp:6'
        }

        self.logger.info(f"Fetching archived URLs for {url} ({from_date} - {to_date})")
        response = self._make_request(params)
        snapshots = self.parse_snapshot_rows(response.json())
        self.logger.info(f"Index returned {len(snapshots)} monthly captures for {url}")
        return snapshots

    def _make_request(self, params: Dict) -> requests.Response:
        """
        Make a request to the CDX API.

        Args:
            params: Query parameters for the CDX API

        Returns:
            Response object from the API

        Raises:
            requests.RequestException: If the request fails
        """
        self.logger.debug(f"Making CDX API request with params: {params}")

        response = self.session.get(self.CDX_BASE_URL, params=params, timeout=self.timeout)
        response.raise_for_status()

        return response

    def parse_snapshot_rows(self, data: Any) -> Dict[str, str]:
        """
        Parse the JSON rows returned by the CDX API.

        The first row holds the column headers and is dropped. Each later row
        is ``[timestamp, original]``.

        Args:
            data: Decoded JSON from the CDX API

        Returns:
            Mapping of timestamp to Wayback Machine URL

        Raises:
            ValueError: If the response is not a JSON array
        """
        if data is None or data == "":
            return {}
        if not isinstance(data, list):
            raise ValueError(f"Unexpected CDX response format: {type(data).__name__}")

        # First row contains column headers
        if len(data) < 2:
            return {}

        snapshots: Dict[str, str] = {}
        rows: List = data[1:]
        for row in rows:
            if not isinstance(row, list) or len(row) < 2:
                self.logger.debug(f"Skipping malformed CDX row: {row!r}")
                continue
            timestamp, original_url = str(row[0]), str(row[1])
            snapshots[timestamp] = build_wayback_url(timestamp, original_url)

        return snapshots

    def close(self):
        """Close the HTTP session."""
        self.session.close()
