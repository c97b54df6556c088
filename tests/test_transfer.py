from unittest import mock

import paramiko
import pytest

from playlist_export import transfer
from playlist_export.errors import SourceUnavailable, TransferError, WriteFailure


@pytest.fixture
def ssh_client(monkeypatch):
    """Replace paramiko's SSH client, returning the mocked client and SFTP session."""
    client = mock.MagicMock()
    client.__enter__.return_value = client
    sftp = mock.MagicMock()
    sftp.__enter__.return_value = sftp
    client.open_sftp.return_value = sftp
    monkeypatch.setattr(transfer.paramiko, "SSHClient", mock.Mock(return_value=client))
    return client, sftp


def test_copy_from_local(tmp_path, clementine_db):
    target = transfer.copy_from_local(tmp_path / "staged.db", clementine_db)
    assert target.read_bytes() == clementine_db.read_bytes()


def test_copy_from_local_missing(tmp_path):
    with pytest.raises(SourceUnavailable):
        transfer.copy_from_local(tmp_path / "staged.db", tmp_path / "missing.db")


def test_copy_from_remote(tmp_path, ssh_client):
    client, sftp = ssh_client
    target = transfer.copy_from_remote(tmp_path / "staged.db", "jukebox", "alice")
    assert target == tmp_path / "staged.db"
    sftp.get.assert_called_once_with(
        "/home/alice/.config/Clementine/clementine.db", str(tmp_path / "staged.db")
    )
    _, kwargs = client.connect.call_args
    assert kwargs["username"] == "alice"
    assert kwargs["allow_agent"] is True
    assert kwargs["timeout"] == transfer.REMOTE_TIMEOUT
    client.__exit__.assert_called_once()


def test_copy_from_remote_unreachable(tmp_path, ssh_client):
    client, _ = ssh_client
    client.connect.side_effect = OSError("No route to host")
    with pytest.raises(TransferError, match="jukebox"):
        transfer.copy_from_remote(tmp_path / "staged.db", "jukebox", "alice")
    client.close.assert_called_once()


def test_copy_from_remote_authentication_failed(tmp_path, ssh_client):
    client, _ = ssh_client
    client.connect.side_effect = paramiko.AuthenticationException("Authentication failed.")
    with pytest.raises(SourceUnavailable):
        transfer.copy_from_remote(tmp_path / "staged.db", "jukebox", "alice")


def test_copy_from_remote_missing_file(tmp_path, ssh_client):
    client, sftp = ssh_client
    sftp.get.side_effect = FileNotFoundError(2, "No such file")
    with pytest.raises(TransferError):
        transfer.copy_from_remote(tmp_path / "staged.db", "jukebox", "alice")
    client.__exit__.assert_called_once()


def test_push_to_remote(tmp_path, ssh_client):
    _, sftp = ssh_client
    playlist = tmp_path / "GV-Road.m3u"
    playlist.write_text("#EXTINF:210,Song A\naerosmith/x.mp3\n", encoding="utf-8")

    remote_paths = transfer.push_to_remote([playlist], "volumio", "volumio", "/data/playlist")

    assert remote_paths == ["/data/playlist/GV-Road.m3u"]
    args, kwargs = sftp.putfo.call_args
    assert args[1] == "/data/playlist/GV-Road.m3u"
    assert kwargs["file_size"] == playlist.stat().st_size
    sftp.chmod.assert_called_once_with("/data/playlist/GV-Road.m3u", 0o644)


def test_push_to_remote_failure(tmp_path, ssh_client):
    _, sftp = ssh_client
    playlist = tmp_path / "GV-Road.vl"
    playlist.write_text("[]", encoding="utf-8")
    sftp.putfo.side_effect = OSError("Permission denied")
    with pytest.raises(WriteFailure, match="GV-Road.vl"):
        transfer.push_to_remote([playlist], "volumio", "volumio", "/data/playlist")


def test_stage_database_local(tmp_path, clementine_db):
    staging_dir = tmp_path / "staging"
    staging_dir.mkdir()
    staged = transfer.stage_database(staging_dir, clementine_db)
    assert staged == staging_dir / "clementine.db"
    assert staged.read_bytes() == clementine_db.read_bytes()


def test_stage_database_remote_requires_user(tmp_path):
    with pytest.raises(TransferError):
        transfer.stage_database(tmp_path, remote_host="jukebox")
