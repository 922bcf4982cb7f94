"""
URL and Date Validation Utilities

This module provides URL validation, link resolution and archive date
checks for the lyngsat-wayback scraper.
"""

import re
from datetime import datetime
from urllib.parse import urlparse, urljoin
from typing import Tuple, Optional
import logging


WAYBACK_WEB_PREFIX = "http://web.archive.org/web"
WAYBACK_CAPTURE_PATTERN = re.compile(r'^(https?://web\.archive\.org/web/[^/]+/)(.*)$')


class URLValidator:
    """
    Validates URLs and archive dates used to configure a run.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

        # Patterns for common URL formats
        self.domain_pattern = re.compile(
            r'^[a-zA-Z0-9]([a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?(\.[a-zA-Z0-9]([a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?)*$'
        )
        self.date_pattern = re.compile(r'^\d{8}$')

    def validate_url(self, url: str) -> Tuple[bool, str, str]:
        """
        Validate a target URL.

        Args:
            url: The URL to validate

        Returns:
            Tuple of (is_valid, stripped_url, error_message)
        """
        if not url or not isinstance(url, str):
            return False, "", "URL cannot be empty"

        url = url.strip()
        parsed = urlparse(url)

        if parsed.scheme not in ['http', 'https']:
            return False, "", "URL must use HTTP or HTTPS protocol"

        if not parsed.netloc:
            return False, "", "URL must have a valid domain"

        # Remove port if present for domain validation
        domain = parsed.netloc.lower().split(':')[0]
        if not self.domain_pattern.match(domain):
            return False, "", "Invalid domain format"

        return True, url, ""

    def validate_date(self, value: str) -> Tuple[bool, str]:
        """
        Validate an archive date in YYYYMMDD form.

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not isinstance(value, str) or not self.date_pattern.match(value):
            return False, f"Date must be in YYYYMMDD form: {value!r}"
        try:
            datetime.strptime(value, "%Y%m%d")
        except ValueError:
            return False, f"Not a calendar date: {value!r}"
        return True, ""

    def is_wayback_url(self, url: str) -> bool:
        """
        Check that a URL points into the Wayback Machine.
        """
        parsed = urlparse(url)
        return (
            parsed.scheme in ['http', 'https'] and
            'web.archive.org' in parsed.netloc and
            '/web/' in parsed.path
        )


_validator_instance: Optional[URLValidator] = None


def get_validator() -> URLValidator:
    """
    Get the global URL validator instance.

    Returns:
        URLValidator instance
    """
    global _validator_instance
    if _validator_instance is None:
        _validator_instance = URLValidator()
    return _validator_instance


def validate_url(url: str) -> Tuple[bool, str, str]:
    """
    Validate a URL.

    Args:
        url: URL to validate

    Returns:
        Tuple of (is_valid, url, error_message)
    """
    return get_validator().validate_url(url)


def validate_date(value: str) -> Tuple[bool, str]:
    """Validate a YYYYMMDD date. Returns (is_valid, error_message)."""
    return get_validator().validate_date(value)


def build_wayback_url(timestamp: str, original_url: str) -> str:
    """Wayback Machine URL serving the capture of *original_url* at *timestamp*."""
    return f"{WAYBACK_WEB_PREFIX}/{timestamp}/{original_url}"


def resolve_link(base_url: str, href: str) -> str:
    """
    Resolve an href found on a page against that page's URL.

    A capture URL embeds the original URL after the timestamp, and a plain
    urljoin collapses its "http://" into "http:/". Page-relative hrefs are
    therefore joined onto the embedded original and re-prefixed. Absolute,
    protocol-relative and root-relative hrefs (Wayback rewrites links as
    "/web/<timestamp>/http://...") resolve against the archive host.
    """
    href = href.strip()
    match = WAYBACK_CAPTURE_PATTERN.match(base_url)
    if match is None or urlparse(href).scheme or href.startswith('/'):
        return urljoin(base_url, href)
    prefix, original_url = match.groups()
    return prefix + urljoin(original_url, href)
