import logging
from typing import Callable, Iterable, Optional, Sequence

from playlist_export.classes import Playlist, PlaylistEntry


def marker_filter(markers: Sequence[str]) -> Callable[[str], bool]:
    """
    Build the predicate selecting exportable playlists.

    Parameters
    ----------
    markers : Sequence[str]
        Name prefixes marking playlists meant for other devices, e.g. ["GV", "CV"].

    Returns
    -------
    Callable[[str], bool]
        True for playlist names starting with one of the markers.
    """
    prefixes = tuple(markers)

    def is_exportable(playlist_name: str) -> bool:
        return bool(prefixes) and playlist_name.startswith(prefixes)

    return is_exportable


def aggregate_playlists(
    entries: Iterable[PlaylistEntry],
    include: Optional[Callable[[str], bool]] = None,
    path_prefix: Optional[str] = None,
) -> dict[str, Playlist]:
    """
    Group playlist entries into playlists.

    Parameters
    ----------
    entries : Iterable[PlaylistEntry]
        Entries as read from the database, in playlist item order.
    include : Callable[[str], bool], optional
        Predicate on the playlist name. Entries of rejected playlists are skipped.
        All playlists are kept if omitted.
    path_prefix : str, optional
        Prepended to every (already relative) track URI, re-rooting it onto the
        mount point of the destination system.

    Returns
    -------
    playlists : dict[str, Playlist]
        Dictionary in the form {playlist_name: Playlist}, in order of first appearance.
    """
    playlists = {}
    n_skipped = 0
    for entry in entries:
        if include is not None and not include(entry.playlist):
            n_skipped += 1
            continue
        if entry.playlist not in playlists:
            playlists[entry.playlist] = Playlist(name=entry.playlist)
        track = entry.track
        if path_prefix:
            track = track.model_copy(update={"uri": path_prefix + track.uri})
        playlists[entry.playlist].tracks.append(track)

    logging.info(f"Number of playlists to export: {len(playlists):,}")
    logging.debug(f"Skipped {n_skipped:,} entries of other playlists")
    return playlists


def exported_uris(
    entries: Iterable[PlaylistEntry],
    include: Optional[Callable[[str], bool]] = None,
) -> list[str]:
    """Relative URIs of the tracks that `aggregate_playlists` keeps, before any prefix."""
    return [
        entry.track.uri
        for entry in entries
        if include is None or include(entry.playlist)
    ]
