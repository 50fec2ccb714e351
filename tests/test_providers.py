"""Tests for catalog adapters -- parsing, caching, and failure handling."""

from __future__ import annotations

from unittest.mock import MagicMock

import musicbrainzngs
import pytest
import requests

from tagmatch.providers import base
from tagmatch.providers.base import (
    InMemoryCache,
    ProviderAdapter,
    coerce_int,
    parse_duration_ms,
    retry,
)
from tagmatch.providers.discogs import DiscogsProvider, parse_position
from tagmatch.providers.musicbrainz import (
    MusicBrainzProvider,
    clean_for_search,
    format_artist_credit,
)
from tagmatch.utils.errors import ProviderUnavailableError


@pytest.fixture
def no_sleep(monkeypatch) -> list[float]:
    """Record retry backoff waits instead of sleeping."""
    waits: list[float] = []
    monkeypatch.setattr(base.time, "sleep", waits.append)
    return waits


# ------------------------------------------------------------------
# Shared helpers
# ------------------------------------------------------------------


class TestParseDuration:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (138_000, 138_000),
            ("138000", 138_000),
            ("2:18", 138_000),
            ("1:02:03", 3_723_000),
            (None, None),
            ("", None),
            ("abc", None),
            ("2:xx", None),
            (0, None),
        ],
    )
    def test_parse(self, value, expected):
        assert parse_duration_ms(value) == expected


class TestCoerceInt:
    def test_values(self):
        assert coerce_int("5") == 5
        assert coerce_int(7) == 7
        assert coerce_int(None, 1) == 1
        assert coerce_int("x", 0) == 0


class TestRetry:
    def test_succeeds_after_transient_failure(self):
        waits = []
        func = MagicMock(side_effect=[ValueError("flaky"), "ok"])
        assert retry(func, "Discogs", retry_on=(ValueError,), sleep=waits.append) == "ok"
        assert waits == [3.0]

    def test_raises_provider_unavailable_after_all_attempts(self):
        func = MagicMock(side_effect=ValueError("down"))
        with pytest.raises(ProviderUnavailableError) as exc_info:
            retry(func, "Discogs", retry_on=(ValueError,), max_retries=2, sleep=lambda s: None)
        assert exc_info.value.catalog == "Discogs"
        assert func.call_count == 2

    def test_other_errors_are_not_retried(self):
        func = MagicMock(side_effect=KeyError("bug"))
        with pytest.raises(KeyError):
            retry(func, "Discogs", retry_on=(ValueError,), sleep=lambda s: None)
        assert func.call_count == 1


class TestInMemoryCache:
    def test_get_set(self):
        cache = InMemoryCache()
        assert cache.get("k") is None
        cache.set("k", {"a": 1})
        assert cache.get("k") == {"a": 1}
        assert len(cache) == 1


# ------------------------------------------------------------------
# MusicBrainz
# ------------------------------------------------------------------

MB_SEARCH = {
    "release-list": [
        {
            "id": "mb1",
            "title": "Help!",
            "artist-credit-phrase": "The Beatles",
            "date": "1965-08-06",
            "medium-count": 1,
            "medium-list": [{"track-count": 14}],
            "tag-list": [{"name": "pop", "count": "2"}, {"name": "rock", "count": "5"}],
        }
    ]
}

MB_RELEASE = {
    "release": {
        "id": "mb1",
        "medium-list": [
            {
                "position": "1",
                "track-list": [
                    {
                        "position": "1",
                        "title": "Help!",
                        "length": "138000",
                        "recording": {
                            "id": "r1",
                            "title": "Help!",
                            "artist-credit": [{"artist": {"name": "The Beatles"}}],
                        },
                    },
                ],
            },
            {
                "position": "2",
                "track-list": [
                    {"position": "1", "recording": {"id": "r2", "title": "Yesterday", "length": "125000"}},
                ],
            },
        ],
    }
}


@pytest.fixture
def mb_client() -> MagicMock:
    client = MagicMock()
    client.search_releases.return_value = MB_SEARCH
    client.get_release_by_id.return_value = MB_RELEASE
    return client


@pytest.fixture
def musicbrainz(mb_client) -> MusicBrainzProvider:
    return MusicBrainzProvider(rate_limit=0.0, cache=InMemoryCache(), client=mb_client)


class TestMusicBrainzHelpers:
    def test_clean_for_search(self):
        assert clean_for_search("AC/DC") == "AC DC"
        assert clean_for_search('Help! "Live"') == "Help Live"
        assert clean_for_search("") == ""

    def test_format_artist_credit(self):
        credit = [
            {"artist": {"name": "Jay-Z"}, "joinphrase": " feat. "},
            {"name": "Alicia Keys", "artist": {"name": "Alicia Keys"}},
        ]
        assert format_artist_credit(credit) == "Jay-Z feat. Alicia Keys"


class TestMusicBrainzProvider:
    def test_satisfies_adapter_protocol(self, musicbrainz):
        assert isinstance(musicbrainz, ProviderAdapter)
        assert musicbrainz.catalog_name == "MusicBrainz"

    def test_search_parses_releases(self, musicbrainz):
        (album,) = musicbrainz.search_albums("The Beatles", "Help!")

        assert album.id == "mb1"
        assert album.name == "Help!"
        assert album.artist == "The Beatles"
        assert album.catalog == "MusicBrainz"
        assert album.track_count == 14
        assert album.year == 1965
        assert album.genres == ("rock", "pop")
        assert album.cover_url.endswith("/release/mb1/front-500")

    def test_search_cleans_terms(self, musicbrainz, mb_client):
        musicbrainz.search_albums("AC/DC", "Back in Black")
        mb_client.search_releases.assert_called_once_with(
            limit=10, strict=False, artist="AC DC", release="Back in Black"
        )

    def test_search_without_terms(self, musicbrainz, mb_client):
        assert musicbrainz.search_albums("", "") == []
        mb_client.search_releases.assert_not_called()

    def test_search_uses_cache(self, musicbrainz, mb_client):
        musicbrainz.search_albums("The Beatles", "Help!")
        musicbrainz.search_albums("The Beatles", "Help!")
        assert mb_client.search_releases.call_count == 1

    def test_get_tracks_across_discs(self, musicbrainz, mb_client):
        tracks = musicbrainz.get_tracks("mb1")

        assert [(t.disc_number, t.track_number, t.title) for t in tracks] == [
            (1, 1, "Help!"),
            (2, 1, "Yesterday"),
        ]
        assert tracks[0].duration_ms == 138_000
        assert tracks[0].artists == ("The Beatles",)
        assert tracks[1].duration_ms == 125_000
        mb_client.get_release_by_id.assert_called_once_with("mb1", includes=["recordings", "artist-credits"])

    def test_web_service_error_becomes_unavailable(self, musicbrainz, mb_client, no_sleep):
        mb_client.search_releases.side_effect = musicbrainzngs.WebServiceError("503")
        with pytest.raises(ProviderUnavailableError):
            musicbrainz.search_albums("The Beatles", "Help!")
        assert mb_client.search_releases.call_count == 3
        assert no_sleep == [3.0, 6.0]


# ------------------------------------------------------------------
# Discogs
# ------------------------------------------------------------------

DISCOGS_SEARCH = {
    "results": [
        {
            "id": 123,
            "title": "The Beatles - Help!",
            "year": "1965",
            "genre": ["Rock"],
            "style": ["Pop Rock"],
            "cover_image": "https://img.discogs.com/123.jpg",
            "format_quantity": 1,
        }
    ]
}

DISCOGS_RELEASE = {
    "id": 123,
    "title": "Help!",
    "artists": [{"name": "The Beatles (2)"}],
    "released": "1965-08-06",
    "genres": ["Rock"],
    "tracklist": [
        {"position": "A1", "title": "Help!", "duration": "2:18", "type_": "track"},
        {"position": "", "title": "Side B", "type_": "heading"},
        {
            "position": "B1",
            "title": "Act Naturally",
            "duration": "2:30",
            "type_": "track",
            "extraartists": [{"name": "Johnny Russell", "role": "Written-By"}],
        },
    ],
}


def make_response(data: dict, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = data
    return response


@pytest.fixture
def discogs_session() -> MagicMock:
    session = MagicMock()

    def fake_get(url, params=None, headers=None, timeout=None):
        if url.endswith("/database/search"):
            return make_response(DISCOGS_SEARCH)
        if url.endswith("/releases/123"):
            return make_response(DISCOGS_RELEASE)
        return make_response({}, status_code=404)

    session.get.side_effect = fake_get
    return session


@pytest.fixture
def discogs(discogs_session) -> DiscogsProvider:
    return DiscogsProvider("token", rate_limit=0.0, session=discogs_session)


class TestParsePosition:
    @pytest.mark.parametrize(
        "position, expected",
        [("1-03", (1, 3)), ("CD2.5", (2, 5)), ("7", (None, 7)), ("A2", (None, None)), ("", (None, None))],
    )
    def test_parse(self, position, expected):
        assert parse_position(position) == expected


class TestDiscogsProvider:
    def test_satisfies_adapter_protocol(self, discogs):
        assert isinstance(discogs, ProviderAdapter)
        assert discogs.catalog_name == "Discogs"

    def test_missing_token_is_unavailable(self, discogs_session):
        provider = DiscogsProvider(None, session=discogs_session)
        with pytest.raises(ProviderUnavailableError):
            provider.search_albums("The Beatles", "Help!")
        discogs_session.get.assert_not_called()

    def test_search_expands_release_details(self, discogs):
        (album,) = discogs.search_albums("The Beatles", "Help!")

        assert album.id == "123"
        assert album.name == "Help!"
        assert album.artist == "The Beatles"
        assert album.catalog == "Discogs"
        assert album.track_count == 2
        assert album.release_date == "1965-08-06"
        assert album.genres == ("Rock", "Pop Rock")
        assert album.cover_url == "https://img.discogs.com/123.jpg"

    def test_search_sends_token_and_params(self, discogs, discogs_session):
        discogs.search_albums("The Beatles", "Help!")
        url, = discogs_session.get.call_args_list[0].args
        kwargs = discogs_session.get.call_args_list[0].kwargs
        assert url == "https://api.discogs.com/database/search"
        assert kwargs["params"]["artist"] == "The Beatles"
        assert kwargs["params"]["release_title"] == "Help!"
        assert kwargs["headers"]["Authorization"] == "Discogs token=token"

    def test_get_tracks_numbers_vinyl_sides(self, discogs):
        tracks = discogs.get_tracks("123")

        assert [(t.disc_number, t.track_number, t.title) for t in tracks] == [
            (1, 1, "Help!"),
            (1, 2, "Act Naturally"),
        ]
        assert [t.duration_ms for t in tracks] == [138_000, 150_000]
        assert tracks[0].artists == ("The Beatles",)
        assert tracks[1].composer == "Johnny Russell"
        assert tracks[0].id == "123:A1"

    def test_missing_release_has_no_tracks(self, discogs):
        assert discogs.get_tracks("999") == []

    def test_cache_avoids_second_request(self, discogs_session):
        provider = DiscogsProvider("token", rate_limit=0.0, cache=InMemoryCache(), session=discogs_session)
        provider.get_tracks("123")
        provider.get_tracks("123")
        assert discogs_session.get.call_count == 1

    def test_connection_errors_become_unavailable(self, discogs_session, no_sleep):
        discogs_session.get.side_effect = requests.ConnectionError("down")
        provider = DiscogsProvider("token", rate_limit=0.0, session=discogs_session)
        with pytest.raises(ProviderUnavailableError):
            provider.get_tracks("123")
        assert discogs_session.get.call_count == 3
