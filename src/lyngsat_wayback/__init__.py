"""
lyngsat-wayback: Archived Satellite Listing Scraper

Looks up monthly Wayback Machine captures of a satellite-TV listing site and
walks each capture's Free TV pages to print the regional channel tables.
"""

__version__ = "1.0"
__author__ = "lyngsat-wayback Project"
__description__ = "Archived Satellite Listing Scraper"
