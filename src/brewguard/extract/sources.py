"""Canonical store lookup interface.

The pipeline never queries storage itself: callers hand it a
`CanonicalSource`, which is asked once per run for the full brewery list.
"""

from typing import Protocol

from brewguard.extract.models import CanonicalBrewery


class CanonicalSource(Protocol):
    """Protocol for canonical brewery lookups.

    Implementations must provide:
    - list_breweries() -> every canonical brewery (id, name, website, email, addresses)
    """

    def list_breweries(self) -> list[CanonicalBrewery]: ...


class StaticCanonicalSource:
    """In-memory snapshot, e.g. already fetched by the caller."""

    def __init__(self, breweries: list[CanonicalBrewery]) -> None:
        self._breweries = list(breweries)

    def list_breweries(self) -> list[CanonicalBrewery]:
        return list(self._breweries)
