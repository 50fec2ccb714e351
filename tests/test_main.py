"""Tests for the command line entry point."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

import tagmatch.main as main_module
from tagmatch.core import scanner as scanner_module
from tagmatch.models.catalog import ProviderAlbum, ProviderTrack
from tagmatch.models.config import AutoModeConfig
from tagmatch.models.track import LocalTrackFile


def local_file(index: int, artist: str | None = None, album: str | None = None) -> LocalTrackFile:
    return LocalTrackFile(
        file_path=Path(f"/music/{index:02d}.flac"),
        enumeration_index=index,
        artist=artist,
        album=album,
    )


class TestGuessQueryTerms:
    def test_most_common_tags(self):
        files = [
            local_file(0, "The Beatles", "Help!"),
            local_file(1, "The Beatles", "Help!"),
            local_file(2, "Beatles", "Help"),
        ]
        assert main_module.guess_query_terms(Path("/music/x"), files) == ("The Beatles", "Help!")

    def test_folder_name_fallback(self):
        files = [local_file(0), local_file(1)]
        assert main_module.guess_query_terms(Path("/music/The Beatles - Help!"), files) == (
            "The Beatles",
            "Help!",
        )

    def test_folder_without_separator_is_album(self):
        assert main_module.guess_query_terms(Path("/music/Help!"), []) == ("", "Help!")


class TestBuildProviders:
    def test_discogs_only_with_token(self):
        names = [p.catalog_name for p in main_module.build_providers(AutoModeConfig())]
        assert names == ["MusicBrainz"]

        config = AutoModeConfig(discogs_token="abc")
        names = [p.catalog_name for p in main_module.build_providers(config)]
        assert names == ["MusicBrainz", "Discogs"]


class TestMain:
    @pytest.fixture
    def album_dir(self, tmp_path: Path, monkeypatch) -> Path:
        folder = tmp_path / "The Beatles - Help!"
        folder.mkdir()
        for name in ("01 - Help!.flac", "02 - The Night Before.flac"):
            (folder / name).write_bytes(b"")
        monkeypatch.setattr(scanner_module.mutagen, "File", lambda path, easy=False: None)
        return folder

    @pytest.fixture
    def config_path(self, tmp_path: Path) -> str:
        # No durations without tags, so a title-only HIGH pair scores 0.8
        path = tmp_path / "config.yaml"
        path.write_text("confidence_threshold: 0.75\n", encoding="utf-8")
        return str(path)

    @pytest.fixture
    def provider(self, monkeypatch) -> MagicMock:
        provider = MagicMock()
        provider.catalog_name = "MusicBrainz"
        provider.search_albums.return_value = [
            ProviderAlbum(id="mb1", name="Help!", artist="The Beatles", catalog="MusicBrainz", track_count=2)
        ]
        provider.get_tracks.return_value = [
            ProviderTrack(id="t1", title="01 - Help!"),
            ProviderTrack(id="t2", title="02 - The Night Before"),
        ]
        monkeypatch.setattr(main_module, "build_providers", lambda *args, **kwargs: [provider])
        return provider

    def test_auto_saves_and_writes_report(self, album_dir, provider, config_path):
        exit_code = main_module.main([str(album_dir), "--config", config_path])

        assert exit_code == 0
        provider.search_albums.assert_called_once_with("The Beatles", "Help!")
        data = json.loads((album_dir / "_tagmatch_decision.json").read_text(encoding="utf-8"))
        assert data["decision"] == "auto_saved"

    def test_deferral_exit_code_and_no_report(self, album_dir, provider, tmp_path):
        provider.search_albums.return_value = []
        exit_code = main_module.main([str(album_dir), "--no-report", "--config", str(tmp_path / "none.yaml")])

        assert exit_code == 2
        assert not (album_dir / "_tagmatch_decision.json").exists()

    def test_cli_terms_override_guess(self, album_dir, provider, tmp_path):
        main_module.main(
            [str(album_dir), "--artist", "Beatles", "--album", "Help", "--no-report",
             "--config", str(tmp_path / "none.yaml")]
        )
        provider.search_albums.assert_called_once_with("Beatles", "Help")

    def test_missing_folder(self, tmp_path):
        assert main_module.main([str(tmp_path / "missing"), "--config", str(tmp_path / "none.yaml")]) == 1
