"""
=============================================================================
REQUEST HANDLERS
=============================================================================

The work behind the two non-trivial routes:

    GET  /static/<path>   static.StaticFileServer   files under a root dir
    POST /submit          submit                    echo JSON / form bodies

=============================================================================
"""

from .static import (
    StaticFile,
    StaticFileServer,
    StaticFileError,
    StaticFileNotFound,
    StaticFileIOError,
)
from . import submit

__all__ = [
    "StaticFile",
    "StaticFileServer",
    "StaticFileError",
    "StaticFileNotFound",
    "StaticFileIOError",
    "submit",
]
