"""Exception types raised across tagmatch.

Business outcomes (no confident match, ties, empty inputs) are never
exceptions. Only hard faults coming out of a catalog adapter are.
"""

from __future__ import annotations


class TagMatchError(Exception):
    """Base class for tagmatch errors."""


class ProviderUnavailableError(TagMatchError):
    """A catalog could not be reached or returned an unusable response.

    The auto mode controller treats this as "zero candidates from this
    catalog" and moves on through the fallback chain.

    Attributes:
        catalog: Name of the catalog that failed.
    """

    def __init__(self, catalog: str, message: str) -> None:
        super().__init__(f"{catalog}: {message}")
        self.catalog = catalog
