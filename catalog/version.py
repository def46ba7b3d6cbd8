# catalog/version.py
# -*- coding: utf-8 -*-
"""
Numeric release versions and descending, de-duplicated catalogs of them.
"""

import functools
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Tuple


@functools.total_ordering
@dataclass(frozen=True)
class Version:
    """
    A release version compared by its numeric components.

    ``"9.0.1" < "10.0.0"`` holds here even though it does not hold for the
    raw strings. Equality and hashing only consider the numeric tuple; the
    original text is kept for display and URL building.
    """

    parts: Tuple[int, ...]
    original: str = field(compare=False)

    @classmethod
    def parse(cls, text: str) -> "Version":
        """
        Parse a dotted version string such as ``21.0.1``.

        Raises:
            ValueError: If any dot-separated group is not a non-negative integer.
        """
        cleaned = text.strip()
        groups = cleaned.split(".")
        if not cleaned or not all(group.isdigit() for group in groups):
            raise ValueError(f"Not a numeric version: '{text}'")
        return cls(tuple(int(group) for group in groups), cleaned)

    def __lt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.parts < other.parts

    def __str__(self) -> str:
        return self.original


class Catalog:
    """Versions ordered newest first, each numeric tuple at most once."""

    def __init__(self, versions: Iterable[Version] = ()):
        unique: List[Version] = []
        seen = set()
        for version in versions:
            if version.parts in seen:
                continue
            seen.add(version.parts)
            unique.append(version)
        # sorted() is stable, so the first occurrence's text wins on ties
        self._versions: List[Version] = sorted(unique, reverse=True)

    def __iter__(self) -> Iterator[Version]:
        return iter(self._versions)

    def __len__(self) -> int:
        return len(self._versions)

    def __getitem__(self, index: int) -> Version:
        return self._versions[index]

    def __contains__(self, item: object) -> bool:
        return item in self._versions

    def __repr__(self) -> str:
        return f"Catalog({self.as_strings()!r})"

    @property
    def is_empty(self) -> bool:
        return not self._versions

    def latest(self) -> Optional[Version]:
        return self._versions[0] if self._versions else None

    def as_strings(self) -> List[str]:
        return [version.original for version in self._versions]

    def find(self, text: str) -> Optional[Version]:
        """Return the catalog entry numerically equal to ``text``, if any."""
        try:
            wanted = Version.parse(text)
        except ValueError:
            return None
        for version in self._versions:
            if version == wanted:
                return version
        return None
