import logging
import pathlib
import sqlite3
from typing import Optional, Sequence, Union

import pandas as pd

from playlist_export.classes import PlaylistEntry, Track
from playlist_export.clementine.config import (
    ALL_PLAYLISTS_QUERY,
    SINGLE_PLAYLIST_QUERY,
    PLAYLIST_NAMES_QUERY,
)
from playlist_export.clementine.utils import decode_uri, relative_uri
from playlist_export.config import SERVICE
from playlist_export.errors import RowDecodingError, SchemaMismatch, SourceUnavailable


def open_database(db_file: Union[str, pathlib.Path]) -> sqlite3.Connection:
    """
    Open a Clementine database read-only.

    Parameters
    ----------
    db_file
        Path to a (staged copy of a) clementine.db file.

    Returns
    -------
    sqlite3.Connection

    Raises
    ------
    SourceUnavailable
        If the file does not exist or cannot be opened.
    """
    path = pathlib.Path(db_file)
    if not path.is_file():
        raise SourceUnavailable(f"Database file {path} does not exist.")
    try:
        return sqlite3.connect(f"{path.resolve().as_uri()}?mode=ro", uri=True)
    except sqlite3.Error as e:
        raise SourceUnavailable(f"Cannot open database file {path}: {e}") from e


def read_query(
    db_file: Union[str, pathlib.Path], query: str, params: Optional[tuple] = None
) -> pd.DataFrame:
    """
    Run a read query against the database and return its result as a dataframe.

    The connection is closed before returning, whether the query succeeded or not.

    Raises
    ------
    SourceUnavailable
        If the database cannot be opened.
    SchemaMismatch
        If the query cannot be prepared, e.g. a table or column is missing.
    """
    conn = open_database(db_file)
    try:
        return pd.read_sql_query(query, conn, params=params)
    except (sqlite3.Error, pd.errors.DatabaseError) as e:
        raise SchemaMismatch(
            f"Cannot query {db_file}, is it a Clementine database? {e}"
        ) from e
    finally:
        conn.close()


def get_playlist_names(db_file: Union[str, pathlib.Path]) -> list[str]:
    """Names of all playlists stored in the database, in creation order."""
    df_names = read_query(db_file, PLAYLIST_NAMES_QUERY)
    names = [_text(name) for name in df_names["name"].tolist()]
    if not all(names):
        logging.warning(f"Skipping {names.count('')} playlist(s) without name")
    return [name for name in names if name]


def _text(value) -> str:
    # NULL text columns come back as None, NULL blobs too
    if value is None or (not isinstance(value, (str, bytes)) and pd.isna(value)):
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def row_to_entry(
    row: dict,
    library_root: Optional[Union[str, Sequence[str]]] = None,
    service: str = SERVICE,
) -> PlaylistEntry:
    """
    Map a query result row into a playlist entry.

    Parameters
    ----------
    row : dict
        Row with the columns playlist, title, artist, filename and length.
    library_root : str | Sequence[str], optional
        Root folder name(s) used to make the file URI relative.
        If omitted, the URI is only percent-decoded.
    service : str
        Service tag set on the track.

    Returns
    -------
    PlaylistEntry

    Raises
    ------
    RowDecodingError
        If a required value is NULL or the file URI cannot be decoded.
    """
    playlist = _text(row["playlist"])
    title = _text(row["title"])
    if not playlist:
        raise RowDecodingError(f"Track {title!r} belongs to a playlist without name.")

    filename = row["filename"]
    if filename is None or (not isinstance(filename, (str, bytes)) and pd.isna(filename)):
        raise RowDecodingError(
            f"Playlist {playlist!r}, track {title!r}: file name is missing."
        )
    try:
        if library_root:
            uri = relative_uri(filename, library_root)
        else:
            uri = decode_uri(filename)
    except RowDecodingError as e:
        raise RowDecodingError(f"Playlist {playlist!r}, track {title!r}: {e}") from e
    if not uri:
        raise RowDecodingError(
            f"Playlist {playlist!r}, track {title!r}: "
            f"{decode_uri(filename)} points at the library root itself."
        )

    length = row["length"]
    duration = 0 if length is None or pd.isna(length) else int(length)

    track = Track(
        service=service,
        title=title,
        artist=_text(row["artist"]),
        uri=uri,
        duration=duration,
    )
    return PlaylistEntry(playlist=playlist, track=track)


def get_playlist_entries(
    db_file: Union[str, pathlib.Path],
    library_root: Optional[Union[str, Sequence[str]]] = None,
    playlist_name: Optional[str] = None,
    service: str = SERVICE,
) -> list[PlaylistEntry]:
    """
    Read one entry per (playlist, track) pair from a Clementine database.

    Playlist names are not filtered here, every playlist in the database is returned
    unless `playlist_name` restricts the query to a single one. Tracks of playlists
    without a name cannot be exported and are skipped with a warning.

    Parameters
    ----------
    db_file
        Path to the Clementine database.
    library_root
        Root folder name(s) used to make the file URIs relative.
    playlist_name
        If given, only the entries of the playlist with exactly this name are read.
    service
        Service tag set on every track.

    Returns
    -------
    entries : list[PlaylistEntry]
        In playlist item order.
    """
    if playlist_name is None:
        logging.info(f"Extracting playlist data from {db_file}")
        df_items = read_query(db_file, ALL_PLAYLISTS_QUERY)
    else:
        logging.info(f"Extracting playlist {playlist_name!r} from {db_file}")
        df_items = read_query(db_file, SINGLE_PLAYLIST_QUERY, params=(playlist_name,))

    # Keep NULLs as None rather than NaN for the text and blob columns
    records = df_items.astype(object).where(df_items.notna(), None).to_dict(orient="records")
    unnamed = [row for row in records if not _text(row["playlist"])]
    for row in unnamed:
        logging.warning(f"Skipping track {_text(row['title'])!r} of a playlist without name")
    entries = [
        row_to_entry(row, library_root, service)
        for row in records
        if _text(row["playlist"])
    ]

    if library_root:
        outside_root = [
            e for e in entries if e.track.uri.startswith(("file:", "/"))
        ]
        for entry in outside_root:
            logging.warning(
                f"Track {entry.track.title!r} in {entry.playlist!r} "
                f"is outside the library root: {entry.track.uri}"
            )
    logging.info(f"Number of playlist items: {len(entries):,}")
    return entries
