"""Define tracks, playlists and export settings."""
import pathlib
from typing import Optional, Union

from pydantic import BaseModel, Field

from playlist_export.config import (
    SERVICE,
    LIBRARY_ROOTS,
    PLAYLIST_MARKERS,
    PATH_PREFIX,
    LOCATION_PREFIX,
    FORMATS,
    JSON_EXTENSION,
    M3U_EXTENSION,
    OUTPUT_DIR,
)


class Track(BaseModel):
    """Track information, as exported to the target player."""

    service: str = SERVICE
    title: str = ""
    artist: str = ""
    uri: str = Field(min_length=1)
    duration: int = 0

    class Config:
        # Make the instance hashable
        frozen = True

    def __repr__(self):
        return f"{self.artist} - {self.title} ({self.uri})"


class PlaylistEntry(BaseModel):
    """A track together with the name of the playlist it belongs to."""

    playlist: str = Field(min_length=1)
    track: Track

    class Config:
        frozen = True


class Playlist(BaseModel):
    """Named, ordered collection of tracks."""

    name: str = Field(min_length=1)
    tracks: list[Track] = []


class ExportSettings(BaseModel):
    """Options of a single extraction run."""

    library_roots: Union[str, list[str]] = LIBRARY_ROOTS
    markers: list[str] = PLAYLIST_MARKERS
    # Export every playlist, ignoring the markers
    include_all: bool = False
    playlist_name: Optional[str] = None
    path_prefix: str = PATH_PREFIX
    location_prefix: str = LOCATION_PREFIX
    formats: list[str] = FORMATS
    json_extension: str = JSON_EXTENSION
    m3u_extension: str = M3U_EXTENSION
    output_dir: pathlib.Path = OUTPUT_DIR
    music_list_file: Optional[pathlib.Path] = None
