import logging
import os
import pathlib
import posixpath
import shutil
from typing import Iterable, Optional, Union

import paramiko

from playlist_export.clementine.config import LOCAL_DB_FILE, REMOTE_DB_TEMPLATE, DB_FILE_NAME
from playlist_export.config import REMOTE_TIMEOUT, REMOTE_FILE_MODE
from playlist_export.errors import SourceUnavailable, TransferError, WriteFailure


def copy_from_local(
    target: Union[str, pathlib.Path], source: Union[str, pathlib.Path] = LOCAL_DB_FILE
) -> pathlib.Path:
    """
    Copy a local Clementine database, so that the running player keeps its lock.

    Parameters
    ----------
    target
        Path of the staged copy.
    source
        Database to copy, ~/.config/Clementine/clementine.db by default.

    Returns
    -------
    pathlib.Path
        Path of the staged copy.
    """
    try:
        shutil.copyfile(source, target)
    except OSError as e:
        raise SourceUnavailable(f"Cannot copy database {source}: {e}") from e
    logging.info(f"Copied {source} to {target}")
    return pathlib.Path(target)


def connect(
    host: str,
    username: str,
    port: int = 22,
    timeout: float = REMOTE_TIMEOUT,
) -> paramiko.SSHClient:
    """
    Open an SSH session authenticated through the SSH agent or the user's keys.

    No password is ever asked for. Unknown hosts are rejected, they have to be
    in the user's known_hosts file.

    Raises
    ------
    TransferError
        If the host is unreachable or authentication fails.
    """
    client = paramiko.SSHClient()
    client.load_system_host_keys()
    client.set_missing_host_key_policy(paramiko.RejectPolicy())
    try:
        client.connect(
            host,
            port=port,
            username=username,
            allow_agent=True,
            look_for_keys=True,
            timeout=timeout,
            banner_timeout=timeout,
            auth_timeout=timeout,
        )
    except (paramiko.SSHException, OSError) as e:
        client.close()
        raise TransferError(f"Cannot connect to {username}@{host}:{port}: {e}") from e
    return client


def copy_from_remote(
    target: Union[str, pathlib.Path],
    host: str,
    username: str,
    remote_path: Optional[str] = None,
    port: int = 22,
    timeout: float = REMOTE_TIMEOUT,
) -> pathlib.Path:
    """
    Fetch a Clementine database from a remote host over SFTP.

    Parameters
    ----------
    target
        Local path of the staged copy.
    host, username, port
        Remote host and the account the database belongs to.
    remote_path
        Defaults to /home/<username>/.config/Clementine/clementine.db
    timeout
        Seconds to wait for the connection, the banner and the authentication.

    Returns
    -------
    pathlib.Path
        Path of the staged copy.
    """
    remote_path = remote_path or REMOTE_DB_TEMPLATE.format(user=username)
    with connect(host, username, port=port, timeout=timeout) as client:
        try:
            with client.open_sftp() as sftp:
                sftp.get(remote_path, str(target))
        except (paramiko.SSHException, OSError) as e:
            raise TransferError(f"Cannot fetch {host}:{remote_path}: {e}") from e
    logging.info(f"Copied {username}@{host}:{remote_path} to {target}")
    return pathlib.Path(target)


def push_to_remote(
    files: Iterable[Union[str, pathlib.Path]],
    host: str,
    username: str,
    remote_dir: str,
    mode: int = REMOTE_FILE_MODE,
    port: int = 22,
    timeout: float = REMOTE_TIMEOUT,
) -> list[str]:
    """
    Upload playlist files to a directory on a remote host.

    Each file is sent with its size announced up front and then given `mode`.

    Parameters
    ----------
    files
        Local files to upload.
    host, username, port
        Remote host and account.
    remote_dir
        Existing directory on the remote host. Files there with the same name are replaced.
    mode
        Permission bits of the uploaded files.

    Returns
    -------
    remote_paths : list[str]
    """
    remote_paths = []
    with connect(host, username, port=port, timeout=timeout) as client:
        with client.open_sftp() as sftp:
            for filepath in files:
                filepath = pathlib.Path(filepath)
                remote_path = posixpath.join(remote_dir, filepath.name)
                try:
                    size = os.path.getsize(filepath)
                    with open(filepath, "rb") as f:
                        sftp.putfo(f, remote_path, file_size=size, confirm=True)
                    sftp.chmod(remote_path, mode)
                except (paramiko.SSHException, OSError) as e:
                    raise WriteFailure(
                        f"Cannot upload {filepath} to {host}:{remote_path}: {e}"
                    ) from e
                remote_paths.append(remote_path)
    logging.info(f"Uploaded {len(remote_paths)} files to {username}@{host}:{remote_dir}")
    return remote_paths


def stage_database(
    staging_dir: Union[str, pathlib.Path],
    database: Optional[Union[str, pathlib.Path]] = None,
    remote_host: Optional[str] = None,
    remote_user: Optional[str] = None,
) -> pathlib.Path:
    """
    Place a copy of the Clementine database in `staging_dir`.

    The database is fetched from `remote_host` if given, otherwise copied from
    `database` or from the local Clementine configuration folder.
    """
    target = pathlib.Path(staging_dir) / DB_FILE_NAME
    if remote_host:
        if not remote_user:
            raise TransferError(f"A user name is required to fetch from {remote_host}.")
        return copy_from_remote(
            target, remote_host, remote_user, remote_path=str(database) if database else None
        )
    return copy_from_local(target, database or LOCAL_DB_FILE)
