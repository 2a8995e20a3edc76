"""
=============================================================================
STATIC FILE SERVER
=============================================================================

Loads files from the static assets root for GET /static/<name> requests.

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

The relative name comes straight from the request line, so it is attacker
controlled:

    GET /static/../../etc/passwd HTTP/1.1
    GET /static//etc/passwd HTTP/1.1          (absolute path injection)
    GET /static/link-to-outside HTTP/1.1      (symlink out of the root)

All three are caught the same way: resolve the candidate path fully (".."
collapsed, symlinks followed) and check it is still under the resolved
root.

    root      = /srv/site/static
    candidate = (root / "../../etc/passwd").resolve()
              = /etc/passwd
    /etc/passwd.relative_to(/srv/site/static)  → ValueError → NOT FOUND

An escape is reported as NOT FOUND, never as an I/O error and never as
403. The client learns nothing about what exists outside the root.

=============================================================================
OUTCOMES
=============================================================================

    serve(name)
        │
        ├── StaticFile(content_type, body)    → router sends 200
        ├── raises StaticFileNotFound         → router sends 404
        └── raises StaticFileIOError          → router sends 500
                                                  (cause is logged here)

The server never writes under the root, so concurrent reads of the same
file need no locking.

=============================================================================
"""

import errno
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from ..http.mime_types import get_mime_type


logger = logging.getLogger(__name__)

# Errors that mean no file by this name can ever be opened
UNRESOLVABLE_ERRNOS = frozenset({errno.ELOOP, errno.ENAMETOOLONG})


class StaticFileError(Exception):
    """Base class for static file failures."""

    def __init__(self, message: str, relative_path: str):
        super().__init__(message)
        self.relative_path = relative_path


class StaticFileNotFound(StaticFileError):
    """Missing file, or a path that resolves outside the root."""


class StaticFileIOError(StaticFileError):
    """The file exists but could not be read (permissions, directory, ...)."""


@dataclass(frozen=True)
class StaticFile:
    """A loaded static file: its content type and full content."""
    content_type: str
    body: bytes


class StaticFileServer:
    """
    Serves files from a fixed root directory.

    =========================================================================
    USAGE
    =========================================================================

        static = StaticFileServer("./static")

        try:
            found = static.serve("css/site.css")
        except StaticFileNotFound:
            ...  # 404
        except StaticFileIOError:
            ...  # 500

    =========================================================================
    """

    def __init__(self, root_dir: Union[str, Path]):
        """
        Args:
            root_dir: Static assets root. Need not exist yet; a missing root
                      simply makes every lookup NOT FOUND.
        """
        self.root_dir = Path(root_dir).resolve()

    def resolve_path(self, relative_path: str) -> Path:
        """
        Map a relative name to a filesystem path inside the root.

        Raises:
            StaticFileNotFound: Empty name, the path escapes the root, or it
                                cannot be resolved at all.
        """
        if not relative_path:
            raise StaticFileNotFound("No file name given", relative_path)

        try:
            # resolve() follows symlinks and collapses ".."
            full_path = (self.root_dir / relative_path).resolve()
            full_path.relative_to(self.root_dir)
        except ValueError:
            # Outside the root, or an embedded NUL the OS would reject
            logger.warning(f"Path traversal attempt blocked: {relative_path!r}")
            raise StaticFileNotFound("Path escapes static root", relative_path) from None
        except (RuntimeError, OSError) as e:
            # RuntimeError is how resolve() reports a symlink loop before 3.13
            logger.warning(f"Unresolvable static path {relative_path!r}: {e}")
            raise StaticFileNotFound("Path cannot be resolved", relative_path) from None

        return full_path

    def serve(self, relative_path: str) -> StaticFile:
        """
        Load a file from the root.

        Args:
            relative_path: Name below the root, as taken from the URL.

        Returns:
            StaticFile with the content type from the file's extension.

        Raises:
            StaticFileNotFound: Missing file or traversal attempt.
            StaticFileIOError: Any other read failure.
        """
        full_path = self.resolve_path(relative_path)

        try:
            content = full_path.read_bytes()
        except (FileNotFoundError, NotADirectoryError, ValueError):
            raise StaticFileNotFound(f"File not found: {relative_path}", relative_path) from None
        except OSError as e:
            if e.errno in UNRESOLVABLE_ERRNOS:
                raise StaticFileNotFound(f"File not found: {relative_path}", relative_path) from None
            logger.error(f"Error reading static file {full_path}: {e}")
            raise StaticFileIOError(f"Failed to read {relative_path}: {e}", relative_path) from e

        content_type = get_mime_type(full_path.name)
        logger.debug(f"Serving {full_path} ({len(content)} bytes, {content_type})")
        return StaticFile(content_type=content_type, body=content)
