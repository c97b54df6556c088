import json
import logging
import pathlib
import re
from typing import Iterable, Union

from playlist_export.classes import ExportSettings, Playlist
from playlist_export.config import JSON_EXTENSION, M3U_EXTENSION, LOCATION_PREFIX
from playlist_export.errors import WriteFailure


def playlist_file(
    playlist: Playlist, output_dir: Union[str, pathlib.Path], extension: str
) -> pathlib.Path:
    # Names like "GV 80s/90s" must not turn into sub-directories
    name = re.sub(r"[\\/]", "-", playlist.name)
    return pathlib.Path(output_dir) / f"{name}.{extension.lstrip('.')}"


def write_json_playlist(
    playlist: Playlist,
    output_dir: Union[str, pathlib.Path] = ".",
    extension: str = JSON_EXTENSION,
) -> pathlib.Path:
    """
    Write a playlist in the JSON format read by Volumio.

    The file holds an array of track objects with the fields
    service, title, artist, uri and duration, in that order.
    The playlist name is the file name and is not repeated inside.

    Parameters
    ----------
    playlist : Playlist
    output_dir : str | pathlib.Path
        Directory the file is written to. An existing file is overwritten.
    extension : str
        File extension, "vl" for Volumio.

    Returns
    -------
    pathlib.Path
        Path of the written file.
    """
    filepath = playlist_file(playlist, output_dir, extension)
    tracks = [track.model_dump() for track in playlist.tracks]
    try:
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(tracks, f, indent=4, ensure_ascii=False)
            f.write("\n")
    except OSError as e:
        raise WriteFailure(f"Cannot write playlist {playlist.name!r} to {filepath}: {e}") from e
    logging.debug(f"Wrote {len(tracks)} tracks to {filepath}")
    return filepath


def write_m3u_playlist(
    playlist: Playlist,
    output_dir: Union[str, pathlib.Path] = ".",
    location_prefix: str = LOCATION_PREFIX,
    extension: str = M3U_EXTENSION,
) -> pathlib.Path:
    """
    Write a playlist in extended M3U format.

    Each track takes two lines, ``#EXTINF:<duration>,<title>`` and its path
    preceded by `location_prefix`. The file is flushed after every track so
    that an interrupted write still leaves a valid playlist.

    Parameters
    ----------
    playlist : Playlist
    output_dir : str | pathlib.Path
        Directory the file is written to. An existing file is overwritten.
    location_prefix : str
        Mount point of the music library on the player, e.g. "/media/usb/".
    extension : str

    Returns
    -------
    pathlib.Path
        Path of the written file.
    """
    filepath = playlist_file(playlist, output_dir, extension)
    try:
        with open(filepath, "w", encoding="utf-8") as f:
            for track in playlist.tracks:
                f.write(f"#EXTINF:{track.duration},{track.title}\n")
                f.write(f"{location_prefix}{track.uri}\n")
                f.flush()
    except OSError as e:
        raise WriteFailure(f"Cannot write playlist {playlist.name!r} to {filepath}: {e}") from e
    logging.debug(f"Wrote {len(playlist.tracks)} tracks to {filepath}")
    return filepath


def write_music_list(uris: Iterable[str], filepath: Union[str, pathlib.Path]) -> pathlib.Path:
    """Write one track URI per line, the list of every exported file."""
    filepath = pathlib.Path(filepath)
    try:
        with open(filepath, "w", encoding="utf-8") as f:
            for uri in uris:
                f.write(f"{uri}\n")
    except OSError as e:
        raise WriteFailure(f"Cannot write music list to {filepath}: {e}") from e
    return filepath


def export_playlists(
    playlists: dict[str, Playlist], settings: ExportSettings
) -> list[pathlib.Path]:
    """
    Write every playlist in each of the formats requested in `settings`.

    Parameters
    ----------
    playlists : dict[str, Playlist]
        Dictionary in the form {playlist_name: Playlist}
    settings : ExportSettings

    Returns
    -------
    written_files : list[pathlib.Path]
    """
    unknown = set(settings.formats) - {"json", "m3u"}
    if unknown:
        raise ValueError(f"Unsupported playlist formats: {', '.join(sorted(unknown))}")

    written_files = []
    for playlist in playlists.values():
        if "json" in settings.formats:
            written_files.append(
                write_json_playlist(playlist, settings.output_dir, settings.json_extension)
            )
        if "m3u" in settings.formats:
            written_files.append(
                write_m3u_playlist(
                    playlist,
                    settings.output_dir,
                    settings.location_prefix,
                    settings.m3u_extension,
                )
            )
    logging.info(f"Wrote {len(written_files)} playlist files to {settings.output_dir}")
    return written_files
