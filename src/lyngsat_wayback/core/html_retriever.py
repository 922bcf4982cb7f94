"""
HTML Content Retrieval Module

This module downloads archived pages from the Wayback Machine and parses
them into BeautifulSoup documents for the scraping heuristics.
"""

import requests
from bs4 import BeautifulSoup
from typing import Optional
import logging

from .cdx_client import DEFAULT_USER_AGENT


class HTMLRetriever:
    """
    Downloads and parses HTML pages.

    Requests are made one at a time with no delay, retry or backoff: a failed
    request raises and the caller decides what to skip.
    """

    def __init__(self, timeout: Optional[float] = None, user_agent: str = DEFAULT_USER_AGENT):
        """
        Initialize the HTML retriever.

        Args:
            timeout: Request timeout in seconds (None leaves the transport default)
            user_agent: User-Agent header sent with every request
        """
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

        # Create a session with proper headers
        self.session = requests.Session()
        self.session.headers.update({
            'User-Agent': user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.5',
        })

    def retrieve_html(self, url: str) -> str:
        """
        Download the raw HTML of a page.

        Raises:
            requests.RequestException: On connection failures and error statuses
        """
        self.logger.debug(f"GET {url}")

        response = self.session.get(url, timeout=self.timeout)
        response.raise_for_status()

        content_type = response.headers.get('content-type', '').lower()
        if content_type and 'text/html' not in content_type:
            # Continue anyway as some archives have incorrect headers
            self.logger.warning(f"Non-HTML content type for {url}: {content_type}")

        html_content = response.text
        self.logger.debug(f"Retrieved {len(html_content)} characters from {url}")
        return html_content

    def retrieve_soup(self, url: str) -> BeautifulSoup:
        """
        Download a page and parse it.

        Returns:
            Parsed document

        Raises:
            requests.RequestException: On connection failures and error statuses
        """
        return BeautifulSoup(self.retrieve_html(url), 'lxml')

    def close(self):
        """Close the HTTP session."""
        self.session.close()
        self.logger.debug("HTML retriever session closed")
