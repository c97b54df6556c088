import re
from typing import Sequence, Union
from urllib.parse import unquote_to_bytes

from playlist_export.errors import RowDecodingError


def decode_uri(raw_uri: Union[bytes, str]) -> str:
    """
    Percent-decode a file URI into UTF-8 text.

    Parameters
    ----------
    raw_uri : bytes | str
        URI as stored by Clementine, e.g. ``b"file:///music/Bj%C3%B6rk/Army%20of%20Me.mp3"``

    Returns
    -------
    str
        Decoded URI, without any ``%XX`` sequence left.

    Raises
    ------
    RowDecodingError
        If the decoded bytes are not valid UTF-8.
    """
    try:
        return unquote_to_bytes(raw_uri).decode("utf-8")
    except UnicodeDecodeError as e:
        raise RowDecodingError(f"URI {raw_uri!r} is not valid UTF-8: {e}") from e


def library_root_pattern(library_root: Union[str, Sequence[str]]) -> re.Pattern:
    """
    Compile the pattern splitting a path at the library root.

    The pattern matches everything up to the last occurrence of the root as a whole
    path segment, followed by the remainder of the path in the group ``remainder``.

    Parameters
    ----------
    library_root : str | Sequence[str]
        Root folder name, or several alternative root folder names.
        They are user input, so they are escaped before being embedded.

    Returns
    -------
    re.Pattern
    """
    roots = [library_root] if isinstance(library_root, str) else list(library_root)
    roots = [root.strip("/") for root in roots if root.strip("/")]
    if not roots:
        raise ValueError("At least one non-empty library root is required.")
    # Longest first so that "library_coco" is not shadowed by "library"
    alternatives = "|".join(re.escape(root) for root in sorted(roots, key=len, reverse=True))
    return re.compile(
        rf"^(?:.*/)?(?:{alternatives})(?:/(?P<remainder>.*))?$", flags=re.DOTALL
    )


def relative_uri(
    raw_uri: Union[bytes, str], library_root: Union[str, Sequence[str]]
) -> str:
    """
    Rewrite an absolute file URI into a path relative to the library root.

    ``file:///mnt/storage1/music/library/library1/aerosmith/back_in_the_saddle.mp3``
    with root ``library`` becomes ``library1/aerosmith/back_in_the_saddle.mp3``.
    URIs not containing the root are returned decoded but otherwise unchanged,
    since some old entries predate the library folder convention.

    Parameters
    ----------
    raw_uri : bytes | str
        Percent-encoded absolute file URI.
    library_root : str | Sequence[str]
        Root folder name(s) at which the URI is split.

    Returns
    -------
    str
        Decoded sub-path following the root.
    """
    uri = decode_uri(raw_uri)
    pattern = library_root_pattern(library_root)
    return pattern.sub(lambda m: m.group("remainder") or "", uri, count=1)
