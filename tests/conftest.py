import sqlite3

import pytest


SCHEMA = """
CREATE TABLE songs (title TEXT, album TEXT, artist TEXT, track INTEGER, length INTEGER, filename BLOB);
CREATE TABLE playlists (name TEXT NOT NULL);
CREATE TABLE playlist_items (playlist INTEGER NOT NULL, type TEXT, library_id INTEGER);
"""

SONGS = [
    ("Back in the Saddle", "Greatest Hits", "Aerosmith", 1, 281,
     b"file:///mnt/storage1/music/library/library1/aerosmith/greatest_hits/back_in_the_saddle.mp3"),
    ("Army of Me", "Post", "Björk", 1, 234,
     b"file:///home/music/library/library2/bj%C3%B6rk/post/army%20of%20me.flac"),
    ("Intro", "Demo", "Unknown", 1, None,
     b"file:///tmp/downloads/intro.mp3"),
]

PLAYLISTS = ["GV-Road", "Misc", "CV Evening"]

# (playlist rowid, song rowid)
PLAYLIST_ITEMS = [(1, 1), (2, 2), (1, 2), (3, 3), (3, 1)]


def create_clementine_db(path, songs=SONGS, playlists=PLAYLISTS, items=PLAYLIST_ITEMS):
    conn = sqlite3.connect(path)
    try:
        conn.executescript(SCHEMA)
        conn.executemany(
            "INSERT INTO songs (title, album, artist, track, length, filename) VALUES (?, ?, ?, ?, ?, ?)",
            songs,
        )
        conn.executemany("INSERT INTO playlists (name) VALUES (?)", [(p,) for p in playlists])
        conn.executemany(
            "INSERT INTO playlist_items (playlist, type, library_id) VALUES (?, 'Library', ?)",
            items,
        )
        conn.commit()
    finally:
        conn.close()
    return path


@pytest.fixture
def clementine_db(tmp_path):
    """A small Clementine database with three playlists."""
    return create_clementine_db(tmp_path / "clementine.db")
