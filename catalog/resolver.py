# catalog/resolver.py
# -*- coding: utf-8 -*-
"""
Version catalog resolution.

A resolver fetches a release listing (an HTML directory index, a download
page, or any text in which version strings appear) and turns it into a
:class:`~catalog.version.Catalog`. The parsing strategy is pluggable so a
structured index can replace pattern matching without touching the
provisioners.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from catalog.version import Catalog, Version
from common.network_utils import fetch_text
from provisioning.errors import CatalogUnavailable, EmptyCatalog

module_logger = logging.getLogger(__name__)

FetchFunction = Callable[[str, float], str]


class ListingParser(ABC):
    """Strategy extracting version strings from a raw listing."""

    @abstractmethod
    def extract(self, listing: str) -> List[str]:
        """Return every version-shaped substring in document order."""


class RegexListingParser(ListingParser):
    """
    Extract versions with a regular expression.

    The default pattern matches three dot-separated integer groups. A match
    never starts or ends in the middle of a number, so ``kafka_2.13-3.8.0``
    yields only ``3.8.0``. A pattern with a capturing group yields that group.
    """

    def __init__(self, pattern: str = r"\d+\.\d+\.\d+"):
        self.pattern = pattern
        self._regex = re.compile(rf"(?<![\d.])(?:{pattern})(?![\d])")

    def extract(self, listing: str) -> List[str]:
        found: List[str] = []
        for match in self._regex.finditer(listing):
            text = match.group(1) if match.groups() else match.group(0)
            found.append(text)
        return found


class VersionCatalogResolver:
    """Fetches a listing and produces a fresh catalog for each call."""

    def __init__(
        self,
        parser: Optional[ListingParser] = None,
        fetch: FetchFunction = fetch_text,
        timeout: float = 60.0,
        logger: Optional[logging.Logger] = None,
    ):
        self.parser = parser or RegexListingParser()
        self.fetch = fetch
        self.timeout = timeout
        self.logger = logger or module_logger

    def parse(self, listing: str) -> Catalog:
        """
        Build a catalog from listing text.

        An empty result is not an error here: it is logged as an
        ``EmptyCatalog`` condition and callers decide how to fall back.
        """
        versions: List[Version] = []
        for text in self.parser.extract(listing):
            try:
                versions.append(Version.parse(text))
            except ValueError:
                self.logger.debug(f"Skipping unparsable version '{text}'")

        catalog = Catalog(versions)
        if catalog.is_empty:
            self.logger.warning(
                f"{EmptyCatalog.__name__}: no versions found in listing"
            )
        else:
            self.logger.debug(
                f"Resolved {len(catalog)} versions, latest {catalog.latest()}"
            )
        return catalog

    def fetch_listing(self, listing_url: str) -> str:
        """
        Return the raw listing document.

        Raises:
            CatalogUnavailable: If the listing cannot be fetched, including
                timeouts.
        """
        self.logger.info(f"Fetching release listing from {listing_url}")
        try:
            return self.fetch(listing_url, self.timeout)
        except CatalogUnavailable:
            raise
        except Exception as e:
            raise CatalogUnavailable(
                f"Could not fetch listing {listing_url}: {e}"
            ) from e

    def resolve(self, listing_url: str) -> Catalog:
        """
        Fetch ``listing_url`` and parse it into a fresh catalog.

        Raises:
            CatalogUnavailable: If the listing cannot be fetched.
        """
        return self.parse(self.fetch_listing(listing_url))


def require_versions(catalog: Catalog, what: str) -> Catalog:
    """
    Return ``catalog`` unchanged, or raise ``EmptyCatalog`` if it has no entries.
    """
    if catalog.is_empty:
        raise EmptyCatalog(f"No {what} versions are available to choose from")
    return catalog
