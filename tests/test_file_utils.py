"""Tests for tagmatch/utils/file_utils.py -- audio detection and disc folders."""

from pathlib import Path

import pytest

from tagmatch.utils.file_utils import disc_number_from_folder, is_audio_file

# ---------------------------------------------------------------------------
# is_audio_file
# ---------------------------------------------------------------------------


class TestIsAudioFile:
    """Tests for is_audio_file()."""

    @pytest.mark.parametrize(
        "ext",
        [".mp3", ".flac", ".m4a", ".ogg", ".opus", ".wma", ".aiff", ".wav", ".ape", ".wv"],
    )
    def test_supported_extensions(self, ext):
        assert is_audio_file(Path(f"song{ext}")) is True

    def test_extension_is_case_insensitive(self):
        assert is_audio_file(Path("SONG.FLAC")) is True

    @pytest.mark.parametrize("name", ["cover.jpg", "notes.txt", "album.cue", "playlist.m3u", "noext"])
    def test_unsupported_files(self, name):
        assert is_audio_file(Path(name)) is False


# ---------------------------------------------------------------------------
# disc_number_from_folder
# ---------------------------------------------------------------------------


class TestDiscNumberFromFolder:
    """Tests for disc_number_from_folder()."""

    @pytest.mark.parametrize(
        "name, expected",
        [("CD2", 2), ("cd 1", 1), ("Disc 03", 3), ("disk_1", 1), ("Disc-2", 2), ("DISC.4", 4)],
    )
    def test_disc_folders(self, name, expected):
        assert disc_number_from_folder(name) == expected

    @pytest.mark.parametrize("name", ["Scans", "Bonus", "CD", "Discography", "2"])
    def test_other_folders(self, name):
        assert disc_number_from_folder(name) is None
