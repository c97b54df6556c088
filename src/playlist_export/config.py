import pathlib


# Playlists are regenerated artifacts, written where the command is run
OUTPUT_DIR = pathlib.Path(".")
MUSIC_LIST_FILE = "musiclist.txt"

# Every exported track is tagged with the protocol of the target player
SERVICE = "mpd"

# Folder(s) on the source machine under which the music library lives.
# Anything up to and including the root is stripped from track paths.
LIBRARY_ROOTS = ["library"]
LEGACY_LIBRARY_ROOTS = ["library_coco", "library"]

# Only playlists whose names start with one of these markers are exported
PLAYLIST_MARKERS = ["GV", "CV"]

# Prefixes re-rooting the relative paths on the destination system
VOLUMIO_PATH_PREFIX = "music-library/USB/mediadrive/"
PATH_PREFIX = ""
LOCATION_PREFIX = ""

# Output formats and the extensions the target players recognise
FORMATS = ["json", "m3u"]
JSON_EXTENSION = "vl"
M3U_EXTENSION = "m3u"

# Seconds to wait on an unreachable or silent remote host
REMOTE_TIMEOUT = 30
REMOTE_FILE_MODE = 0o644
