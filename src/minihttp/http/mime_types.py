"""
=============================================================================
MIME TYPE RESOLUTION
=============================================================================

Maps a file extension to the Content-Type the static file server sends.

=============================================================================
WHY THE EXTENSION, NOT THE BYTES?
=============================================================================

Browsers decide how to treat a response almost entirely from its
Content-Type:

    text/html               → render as a page
    text/css                → apply as a stylesheet
    application/javascript  → execute as a script
    image/png               → decode and draw
    application/octet-stream → "download this, I don't know what it is"

Sniffing file contents is slow and easy to fool. A lookup table keyed on
the final suffix is what nginx and Apache do by default, and it is pure:
no I/O, same answer every time.

=============================================================================
MATCHING RULES
=============================================================================

    resolve("html")      → text/html
    resolve(".HTML")     → text/html        (case-insensitive, dot optional)
    resolve("gz")        → application/gzip
    resolve("")          → application/octet-stream
    resolve("weird")     → application/octet-stream

Only the FINAL suffix counts. "archive.tar.gz" resolves through ".gz";
there is no multi-suffix or wildcard handling.

=============================================================================
"""

from pathlib import PurePath
from typing import Union


# =============================================================================
# MIME TYPE TABLE
# =============================================================================
#
# Keys are lowercase extensions WITHOUT the leading dot.
#
# =============================================================================

MIME_TYPES = {
    # -------------------------------------------------------------------------
    # TEXT
    # -------------------------------------------------------------------------
    "html": "text/html",
    "htm": "text/html",
    "css": "text/css",
    "js": "application/javascript",
    "mjs": "application/javascript",   # ES modules
    "json": "application/json",
    "xml": "application/xml",
    "txt": "text/plain",
    "md": "text/markdown",
    "csv": "text/csv",

    # -------------------------------------------------------------------------
    # IMAGES
    # -------------------------------------------------------------------------
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "ico": "image/x-icon",
    "webp": "image/webp",

    # -------------------------------------------------------------------------
    # FONTS
    # -------------------------------------------------------------------------
    "woff": "font/woff",
    "woff2": "font/woff2",
    "ttf": "font/ttf",
    "otf": "font/otf",

    # -------------------------------------------------------------------------
    # MEDIA AND DOCUMENTS
    # -------------------------------------------------------------------------
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "mp4": "video/mp4",
    "webm": "video/webm",
    "pdf": "application/pdf",

    # -------------------------------------------------------------------------
    # ARCHIVES AND BINARIES
    # -------------------------------------------------------------------------
    "zip": "application/zip",
    "gz": "application/gzip",
    "tar": "application/x-tar",
    "wasm": "application/wasm",
    "map": "application/json",         # Source maps
}

# "I don't know what this is, treat as binary"
DEFAULT_MIME_TYPE = "application/octet-stream"


def resolve(extension: str) -> str:
    """
    Resolve a file extension to a MIME type.

    Total and pure: every string maps to something, unknown or empty
    extensions fall back to DEFAULT_MIME_TYPE.

    Args:
        extension: Extension with or without a leading dot, any case.

    Returns:
        The MIME type string.
    """
    key = extension.strip().lower()
    if key.startswith("."):
        key = key[1:]
    return MIME_TYPES.get(key, DEFAULT_MIME_TYPE)


def get_mime_type(path: Union[str, PurePath]) -> str:
    """
    Resolve the MIME type of a file name from its final suffix.

    Examples:
        >>> get_mime_type("css/site.CSS")
        'text/css'

        >>> get_mime_type("README")
        'application/octet-stream'
    """
    return resolve(PurePath(path).suffix)
