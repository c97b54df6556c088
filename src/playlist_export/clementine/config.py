import os

APP_NAME = "Clementine"
DB_FILE_NAME = "clementine.db"
LOCAL_DB_FILE = os.path.join(
    os.path.expanduser("~"), ".config", APP_NAME, DB_FILE_NAME
)
REMOTE_DB_TEMPLATE = "/home/{user}/.config/" + APP_NAME + "/" + DB_FILE_NAME

# Schema of the Clementine 1.x local store.
# songs.filename is a percent-encoded file URI stored as a BLOB.
PLAYLIST_QUERY = """
    SELECT playlists.name AS playlist,
           songs.title AS title,
           songs.artist AS artist,
           songs.filename AS filename,
           songs.length AS length
    FROM playlist_items
    JOIN songs ON songs.ROWID = playlist_items.library_id
    JOIN playlists ON playlist_items.playlist = playlists.ROWID
"""
ALL_PLAYLISTS_QUERY = PLAYLIST_QUERY + "ORDER BY playlist_items.ROWID"
SINGLE_PLAYLIST_QUERY = (
    PLAYLIST_QUERY + "WHERE playlists.name = ? ORDER BY playlist_items.ROWID"
)
PLAYLIST_NAMES_QUERY = "SELECT name FROM playlists ORDER BY ROWID"
