"""Catalog adapters for tagmatch."""

from tagmatch.providers.base import InMemoryCache, LookupCache, ProviderAdapter
from tagmatch.providers.discogs import DiscogsProvider
from tagmatch.providers.musicbrainz import MusicBrainzProvider

__all__ = [
    "InMemoryCache",
    "LookupCache",
    "ProviderAdapter",
    "DiscogsProvider",
    "MusicBrainzProvider",
]
