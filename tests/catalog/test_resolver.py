import logging

import pytest
from pytest_mock import MockerFixture

from catalog.resolver import (
    RegexListingParser,
    VersionCatalogResolver,
    require_versions,
)
from catalog.version import Catalog
from provisioning.errors import CatalogUnavailable, DownloadTimeout, EmptyCatalog

KAFKA_LISTING = """
<html><body><pre>
<a href="3.7.1/">3.7.1/</a>   2024-06-28 11:03    -
<a href="3.8.0/">3.8.0/</a>   2024-07-29 09:41    -
<a href="3.10.0/">3.10.0/</a>  2025-03-18 07:12    -
<a href="KEYS">KEYS</a>
</pre></body></html>
"""


def test_resolves_jdk_listing_newest_first():
    resolver = VersionCatalogResolver()

    catalog = resolver.parse("...jdk-21.0.1...jdk-17.0.2...")

    assert catalog.as_strings() == ["21.0.1", "17.0.2"]


def test_numeric_order_across_digit_counts():
    catalog = VersionCatalogResolver().parse(KAFKA_LISTING)

    assert catalog.as_strings() == ["3.10.0", "3.8.0", "3.7.1"]


def test_duplicates_appear_once():
    catalog = VersionCatalogResolver().parse(KAFKA_LISTING + KAFKA_LISTING)

    assert catalog.as_strings().count("3.8.0") == 1


def test_regex_parser_does_not_split_numbers():
    parser = RegexListingParser()

    assert parser.extract("kafka_2.13-3.8.0.tgz") == ["3.8.0"]


def test_regex_parser_uses_capturing_group():
    parser = RegexListingParser(r"jdk-(\d+(?:\.\d+)*)")

    assert parser.extract("jdk-21 and jdk-17.0.2") == ["21", "17.0.2"]


def test_empty_listing_returns_empty_catalog_and_logs(caplog):
    resolver = VersionCatalogResolver(fetch=lambda url, timeout: "nothing here")

    with caplog.at_level(logging.WARNING):
        catalog = resolver.resolve("https://example.test/")

    assert catalog.is_empty
    assert "EmptyCatalog" in caplog.text


def test_fetch_failure_raises_catalog_unavailable():
    def failing_fetch(url, timeout):
        raise ConnectionError("connection refused")

    resolver = VersionCatalogResolver(fetch=failing_fetch)

    with pytest.raises(CatalogUnavailable, match="connection refused"):
        resolver.resolve("https://example.test/")


def test_listing_timeout_is_reported_as_unavailable():
    def slow_fetch(url, timeout):
        raise DownloadTimeout("timed out")

    resolver = VersionCatalogResolver(fetch=slow_fetch)

    with pytest.raises(CatalogUnavailable):
        resolver.fetch_listing("https://example.test/")


def test_resolve_passes_timeout_to_fetch(mocker: MockerFixture):
    fetch = mocker.Mock(return_value="1.2.3")
    resolver = VersionCatalogResolver(fetch=fetch, timeout=7)

    resolver.resolve("https://example.test/")

    fetch.assert_called_once_with("https://example.test/", 7)


def test_require_versions():
    with pytest.raises(EmptyCatalog):
        require_versions(Catalog(), "kafka")
