#!/usr/bin/env python3
"""
End-to-end scraping tests over a canned site. Pages are served from a dict;
no network access.
"""

import json
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests
from bs4 import BeautifulSoup

# Add the src directory to the path
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

from lyngsat_wayback.core.controller import ArchiveController, RunConfig
from lyngsat_wayback.core.scraper import TableScraper


ROOT = "http://web.archive.org/web/20050301000000/http://www.lyngsat.com/"
FREE = ROOT + "free/index.html"
OTHER_ROOT = "http://web.archive.org/web/20050401000000/http://www.lyngsat.com/"
OTHER_FREE = OTHER_ROOT + "free/index.html"


def _table(*rows):
    body = "".join("<tr>" + "".join(f"<td>{cell}</td>" for cell in row) + "</tr>" for row in rows)
    return f"<table>{body}</table>"


def _region_page(channel):
    return (
        "<html><body>"
        "<table><tr><td>Advertisements</td><td>a</td><td>b</td><td>c</td><td>d</td></tr></table>"
        + _table(("Name", "Freq", "Pol"), (channel, "11.597", "V"))
        + "</body></html>"
    )


def _free_page(*regions):
    anchors = " ".join(f'<a href="{href}">{text}</a>' for text, href in regions)
    return f'<html><body><b><a href="index.html">Free TV</a> {anchors}</b></body></html>'


SITE = {
    ROOT: '<html><body><a href="free/index.html">Free TV</a></body></html>',
    FREE: _free_page(("Europe", "europe.html"), ("Asia", "asia.html"), ("Africa", "africa.html")),
    ROOT + "free/europe.html": _region_page("BBC World"),
    ROOT + "free/africa.html": _region_page("SABC"),
    OTHER_ROOT: '<html><body><a href="free/index.html">Free TV</a></body></html>',
    OTHER_FREE: _free_page(("America", "america.html")),
    OTHER_ROOT + "free/america.html": _region_page("PBS"),
}


class FakeRetriever:
    def __init__(self, pages, failing=()):
        self.pages = pages
        self.failing = set(failing)
        self.requested = []

    def retrieve_soup(self, url):
        self.requested.append(url)
        if url in self.failing or url not in self.pages:
            raise requests.ConnectionError(f"cannot reach {url}")
        return BeautifulSoup(self.pages[url], "lxml")

    def close(self):
        pass


def _scraper(retriever):
    lines = []
    return TableScraper(retriever, writer=lines.append), lines


def test_tables_are_printed_in_region_order():
    scraper, lines = _scraper(FakeRetriever(SITE))
    scraper.scrape_and_print(ROOT)
    assert [line.strip() for line in lines] == [
        "Name | Freq | Pol",
        "BBC World | 11.597 | V",
        "Name | Freq | Pol",
        "SABC | 11.597 | V",
    ]


def test_region_failure_does_not_stop_later_regions_or_base_urls():
    retriever = FakeRetriever(SITE, failing={ROOT + "free/europe.html"})
    scraper, lines = _scraper(retriever)

    stats = scraper.scrape_all([ROOT, OTHER_ROOT])

    region_requests = [url for url in retriever.requested if url not in (ROOT, FREE, OTHER_ROOT, OTHER_FREE)]
    assert region_requests == [
        ROOT + "free/europe.html",
        ROOT + "free/asia.html",
        ROOT + "free/africa.html",
        OTHER_ROOT + "free/america.html",
    ]
    assert stats == {"urls": 2, "regions": 4, "tables": 2, "failed": 2}
    assert "SABC | 11.597 | V" in [line.strip() for line in lines]
    assert "PBS | 11.597 | V" in [line.strip() for line in lines]
    assert scraper.errors.summary()["total_errors"] == 2


def test_base_url_without_free_tv_link_is_skipped():
    pages = dict(SITE)
    pages[ROOT] = '<html><body><a href="free_tv.html">Free TV</a></body></html>'
    retriever = FakeRetriever(pages)
    scraper, lines = _scraper(retriever)

    scraper.scrape_and_print(ROOT)

    assert retriever.requested == [ROOT]
    assert lines == []
    assert scraper.errors.summary()["total_warnings"] == 1


def test_free_tv_page_failure_skips_only_that_base_url():
    retriever = FakeRetriever(SITE, failing={FREE})
    scraper, lines = _scraper(retriever)

    scraper.scrape_all([ROOT, OTHER_ROOT])

    assert [line.strip() for line in lines][-1] == "PBS | 11.597 | V"
    assert scraper.stats["failed"] == 1


def test_region_without_table_is_reported():
    pages = dict(SITE)
    pages[ROOT + "free/europe.html"] = "<html><body><p>Moved</p></body></html>"
    scraper, lines = _scraper(FakeRetriever(pages))

    scraper.scrape_and_print(ROOT)

    assert scraper.stats["tables"] == 1
    warnings = scraper.errors.warnings
    assert warnings[0].message == "No suitable table found for Europe"


def test_region_link_without_href_is_reported_and_skipped():
    pages = dict(SITE)
    pages[FREE] = (
        '<html><body><b>Free <a>Atlantic</a> <a href="africa.html">Africa</a></b></body></html>'
    )
    retriever = FakeRetriever(pages)
    scraper, lines = _scraper(retriever)

    scraper.scrape_and_print(ROOT)

    assert retriever.requested == [ROOT, FREE, ROOT + "free/africa.html"]
    assert scraper.stats == {"urls": 1, "regions": 2, "tables": 1, "failed": 1}
    failure = scraper.errors.errors[0]
    assert failure.error_type == "ValueError"
    assert failure.context == "region Atlantic"
    assert lines[-1].strip() == "SABC | 11.597 | V"


def test_root_relative_and_relative_region_hrefs_are_both_followed():
    pages = dict(SITE)
    pages[FREE] = _free_page(
        ("Europe", "/web/20050301000000/http://www.lyngsat.com/free/europe.html"),
        ("Africa", "africa.html"),
    )
    retriever = FakeRetriever(pages)
    scraper, lines = _scraper(retriever)

    scraper.scrape_and_print(ROOT)

    assert retriever.requested == [ROOT, FREE, ROOT + "free/europe.html", ROOT + "free/africa.html"]
    assert scraper.stats["failed"] == 0
    assert [line.strip() for line in lines if "11.597" in line] == [
        "BBC World | 11.597 | V",
        "SABC | 11.597 | V",
    ]


def test_default_writer_prints_to_stdout(capsys):
    scraper = TableScraper(FakeRetriever(SITE))
    scraper.scrape_and_print(OTHER_ROOT)
    assert "PBS | 11.597 | V" in capsys.readouterr().out


# Controller

def _controller(tmp_path, cdx=None, retriever=None):
    config = RunConfig(to_date="20240101", cache_path=str(tmp_path / "wayback_urls.json"),
                       log_dir=str(tmp_path / "logs"))
    lines = []
    controller = ArchiveController(config, cdx=cdx or MagicMock(), retriever=retriever or FakeRetriever(SITE),
                                   writer=lines.append)
    return controller, lines


def test_existing_cache_skips_lookup(tmp_path):
    (tmp_path / "wayback_urls.json").write_text(json.dumps({"20050401000000": OTHER_ROOT}), encoding="utf-8")
    cdx = MagicMock()
    controller, lines = _controller(tmp_path, cdx=cdx)

    stats = controller.run()

    cdx.get_monthly_snapshots.assert_not_called()
    assert stats["tables"] == 1
    assert "PBS | 11.597 | V" in [line.strip() for line in lines]


def test_missing_cache_triggers_lookup_then_scrape(tmp_path):
    cdx = MagicMock()
    cdx.get_monthly_snapshots.return_value = {"20050301000000": ROOT, "20050401000000": OTHER_ROOT}
    controller, lines = _controller(tmp_path, cdx=cdx)

    stats = controller.run()

    cdx.get_monthly_snapshots.assert_called_once_with("http://www.lyngsat.com", "20000101", "20240101")
    assert (tmp_path / "wayback_urls.json").exists()
    assert stats["urls"] == 2
    assert stats["tables"] == 3


def test_failed_lookup_leaves_nothing_to_scrape(tmp_path):
    cdx = MagicMock()
    cdx.get_monthly_snapshots.side_effect = requests.Timeout("slow")
    retriever = FakeRetriever(SITE)
    controller, lines = _controller(tmp_path, cdx=cdx, retriever=retriever)

    stats = controller.run()

    assert stats["urls"] == 0
    assert retriever.requested == []
    assert not (tmp_path / "wayback_urls.json").exists()


def test_corrupt_cache_is_reported_not_refetched(tmp_path):
    (tmp_path / "wayback_urls.json").write_text("{not json", encoding="utf-8")
    cdx = MagicMock()
    controller, lines = _controller(tmp_path, cdx=cdx)

    stats = controller.run()

    cdx.get_monthly_snapshots.assert_not_called()
    assert stats["urls"] == 0
    assert controller.errors.summary()["total_errors"] == 1


@pytest.mark.parametrize("overrides", [
    {"host": "ftp://www.lyngsat.com"},
    {"from_date": "2000-01-01"},
    {"from_date": "20250101", "to_date": "20240101"},
])
def test_invalid_config_is_rejected(overrides):
    with pytest.raises(ValueError):
        RunConfig(**overrides).validate()


if __name__ == "__main__":
    sys.exit(pytest.main([__file__]))
