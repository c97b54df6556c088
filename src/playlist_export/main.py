import logging
import pathlib
import sys
import tempfile
from typing import Optional

import click

from playlist_export.classes import ExportSettings, Playlist
from playlist_export.clementine.library import get_playlist_entries, get_playlist_names
from playlist_export.config import (
    LIBRARY_ROOTS,
    PLAYLIST_MARKERS,
    PATH_PREFIX,
    VOLUMIO_PATH_PREFIX,
    LOCATION_PREFIX,
    FORMATS,
    JSON_EXTENSION,
    M3U_EXTENSION,
    OUTPUT_DIR,
    MUSIC_LIST_FILE,
)
from playlist_export.errors import ExportError, WriteFailure
from playlist_export.playlists.aggregation import (
    aggregate_playlists,
    exported_uris,
    marker_filter,
)
from playlist_export.playlists.exporters import export_playlists, write_music_list
from playlist_export.transfer import stage_database, push_to_remote


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    handlers=[logging.StreamHandler()],
)


def extract_playlists(
    db_file: pathlib.Path, settings: ExportSettings
) -> tuple[dict[str, Playlist], list[pathlib.Path]]:
    """
    Read the playlists of a Clementine database and write them in the requested formats.

    Parameters
    ----------
    db_file
        Staged Clementine database.
    settings
        Options of the run.

    Returns
    -------
    playlists
        Dictionary in the form {playlist_name: Playlist}
    written_files
        Playlist files and, if requested, the music list.
    """
    entries = get_playlist_entries(
        db_file, settings.library_roots, playlist_name=settings.playlist_name
    )
    include = None if settings.include_all else marker_filter(settings.markers)

    logging.info("Creating playlist data structures")
    playlists = aggregate_playlists(entries, include, settings.path_prefix)

    logging.info("Creating playlist files")
    try:
        pathlib.Path(settings.output_dir).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise WriteFailure(f"Cannot create output directory {settings.output_dir}: {e}") from e
    written_files = export_playlists(playlists, settings)
    if settings.music_list_file is not None:
        written_files.append(
            write_music_list(exported_uris(entries, include), settings.music_list_file)
        )
    return playlists, written_files


@click.command()
@click.option(
    "--database",
    type=str,
    default=None,
    help="Clementine database to read. Defaults to ~/.config/Clementine/clementine.db, "
    "or /home/<user>/.config/Clementine/clementine.db on the remote host.",
)
@click.option("--remote-host", type=str, default=None, help="Fetch the database from this host over SFTP.")
@click.option("--remote-user", type=str, default=None, help="Account owning the database on the remote host.")
@click.option(
    "--library-root",
    "library_roots",
    multiple=True,
    default=LIBRARY_ROOTS,
    show_default=True,
    help="Folder under which the music library lives. Can be given several times.",
)
@click.option(
    "--marker",
    "markers",
    multiple=True,
    default=PLAYLIST_MARKERS,
    show_default=True,
    help="Export only playlists whose name starts with this marker. Can be given several times.",
)
@click.option("--all-playlists", "include_all", is_flag=True, help="Export every playlist, ignoring markers.")
@click.option("--playlist", "playlist_name", type=str, default=None, help="Export only the playlist with this name.")
@click.option(
    "--path-prefix",
    type=str,
    default=PATH_PREFIX,
    show_default=True,
    help="Prefix added to every relative track path.",
)
@click.option(
    "--volumio",
    is_flag=True,
    help=f"Use the Volumio USB path prefix {VOLUMIO_PATH_PREFIX!r}.",
)
@click.option(
    "--location-prefix",
    type=str,
    default=LOCATION_PREFIX,
    show_default=True,
    help="Mount point written before each path in M3U playlists.",
)
@click.option(
    "--format",
    "formats",
    multiple=True,
    type=click.Choice(FORMATS),
    default=FORMATS,
    show_default=True,
    help="Playlist format(s) to write.",
)
@click.option("--json-extension", type=str, default=JSON_EXTENSION, show_default=True)
@click.option("--m3u-extension", type=str, default=M3U_EXTENSION, show_default=True)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=pathlib.Path),
    default=OUTPUT_DIR,
    show_default=True,
)
@click.option(
    "--music-list",
    "write_list",
    is_flag=True,
    help=f"Also write every exported track path to {MUSIC_LIST_FILE}.",
)
@click.option("--push-host", type=str, default=None, help="Upload the written files to this host.")
@click.option("--push-user", type=str, default=None, help="Account used on the upload host.")
@click.option("--push-dir", type=str, default=None, help="Directory receiving the files on the upload host.")
@click.option("--list", "list_only", is_flag=True, help="Only list the playlists stored in the database.")
@click.option("--verbose", is_flag=True, help="Log debug messages.")
def main(
    database: Optional[str],
    remote_host: Optional[str],
    remote_user: Optional[str],
    library_roots: tuple[str, ...],
    markers: tuple[str, ...],
    include_all: bool,
    playlist_name: Optional[str],
    path_prefix: str,
    volumio: bool,
    location_prefix: str,
    formats: tuple[str, ...],
    json_extension: str,
    m3u_extension: str,
    output_dir: pathlib.Path,
    write_list: bool,
    push_host: Optional[str],
    push_user: Optional[str],
    push_dir: Optional[str],
    list_only: bool,
    verbose: bool,
):
    """
    Export Clementine playlists as Volumio (.vl) and M3U playlists.

    Track paths are rewritten relative to the library root, so that the playlists
    can be used by players mounting the same library elsewhere.
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    if push_host and not push_dir:
        raise click.UsageError("--push-dir is required with --push-host.")
    if not any(root.strip("/") for root in library_roots):
        raise click.BadParameter("must name a folder", param_hint="--library-root")

    settings = ExportSettings(
        library_roots=list(library_roots),
        markers=list(markers),
        include_all=include_all,
        playlist_name=playlist_name,
        path_prefix=VOLUMIO_PATH_PREFIX if volumio else path_prefix,
        location_prefix=location_prefix,
        formats=list(formats),
        json_extension=json_extension,
        m3u_extension=m3u_extension,
        output_dir=output_dir,
        music_list_file=output_dir / MUSIC_LIST_FILE if write_list else None,
    )

    try:
        with tempfile.TemporaryDirectory() as staging_dir:
            db_file = stage_database(staging_dir, database, remote_host, remote_user)
            if list_only:
                for name in get_playlist_names(db_file):
                    click.echo(name)
                return
            playlists, written_files = extract_playlists(db_file, settings)

        if push_host:
            push_to_remote(written_files, push_host, push_user or remote_user, push_dir)
    except ExportError as e:
        logging.error(str(e))
        sys.exit(1)

    logging.info(f"Complete. Exported {len(playlists)} playlists.")


if __name__ == "__main__":
    main()
