import re

import pytest

from playlist_export.clementine.utils import decode_uri, relative_uri, library_root_pattern
from playlist_export.config import LEGACY_LIBRARY_ROOTS
from playlist_export.errors import RowDecodingError


SADDLE = "library1/aerosmith/greatest_hits/back_in_the_saddle.mp3"


def test_relative_uri():
    assert relative_uri(
        "file:///mnt/storage1/music/library/library1/aerosmith/greatest_hits/back_in_the_saddle.mp3",
        "library",
    ) == SADDLE


def test_relative_uri_legacy_roots():
    uri = "file:///home/music/library_coco/library1/aerosmith/greatest_hits/back_in_the_saddle.mp3"
    assert relative_uri(uri, LEGACY_LIBRARY_ROOTS) == SADDLE
    uri = "file:///mnt/storage1/music/library/library1/aerosmith/greatest_hits/back_in_the_saddle.mp3"
    assert relative_uri(uri, LEGACY_LIBRARY_ROOTS) == SADDLE


def test_relative_uri_is_fully_decoded():
    uri = b"file:///home/music/library/bj%C3%B6rk/post/army%20of%20me%2525.flac"
    result = relative_uri(uri, "library")
    assert result == "björk/post/army of me%25.flac"
    assert relative_uri("file:///srv/library/a%20b/c%23d.mp3", "library") == "a b/c#d.mp3"
    assert not re.search(r"%[0-9A-Fa-f]{2}", relative_uri("file:///srv/library/a%20b.mp3", "library"))


def test_relative_uri_without_root_only_decodes():
    uri = "file:///tmp/downloads/some%20song.mp3"
    assert relative_uri(uri, "library") == "file:///tmp/downloads/some song.mp3"
    # The root has to be a whole folder name
    assert relative_uri("file:///srv/library1/a.mp3", "library") == "file:///srv/library1/a.mp3"


def test_relative_uri_ending_at_root():
    assert relative_uri("file:///srv/music/library", "library") == ""
    assert relative_uri("file:///srv/music/library/", "library") == ""


def test_relative_uri_uses_last_occurrence():
    assert relative_uri("file:///library/x/library/y/z.mp3", "library") == "y/z.mp3"


def test_relative_uri_is_idempotent():
    uris = [
        "file:///mnt/storage1/music/library/library1/aerosmith/greatest_hits/back_in_the_saddle.mp3",
        "file:///library/library/z.mp3",
        "file:///tmp/downloads/intro.mp3",
    ]
    for uri in uris:
        once = relative_uri(uri, "library")
        assert relative_uri(once, "library") == once


def test_root_with_special_characters_is_literal():
    assert relative_uri("file:///data/music%20(2019)/a/b.mp3", "music (2019)") == "a/b.mp3"
    assert relative_uri("file:///data/libXary/a/b.mp3", "lib.ary") == "file:///data/libXary/a/b.mp3"
    assert relative_uri("file:///data/lib.ary/a/b.mp3", "lib.ary") == "a/b.mp3"
    assert relative_uri("file:///data/a+/b.mp3", "a+") == "b.mp3"


def test_root_may_span_several_folders():
    assert relative_uri("file:///mnt/music/library/x.mp3", "/music/library/") == "x.mp3"


def test_empty_root_is_rejected():
    with pytest.raises(ValueError):
        library_root_pattern(["", "/"])


def test_decode_uri_rejects_invalid_utf8():
    with pytest.raises(RowDecodingError):
        decode_uri(b"file:///music/library/%FF%FE.mp3")
    with pytest.raises(RowDecodingError):
        relative_uri(b"file:///music/library/\xff.mp3", "library")
