"""
=============================================================================
FILE HANDLER
=============================================================================

Reads and writes files in the configured base directory.

    GET  /files/<name>   → 200 application/octet-stream with the bytes
                           404 if the file does not exist
                           500 on any other I/O error
    POST /files/<name>   → 201 after writing the request body
                           500 on I/O error

Either route answers 500 when the server was started without a base
directory.

=============================================================================
FILE NAMES
=============================================================================

Only the FIRST path segment after /files/ is used:

    /files/notes.txt          → notes.txt
    /files/notes.txt/extra    → notes.txt
    /files/a/b/c              → a

So a resolved path is always a direct child of the base directory. The
odd names that remain ("" and "..") resolve to directories and fail as
ordinary I/O errors.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional

from ..http.request import HTTPRequest
from ..http.response import (
    HTTPResponse, ResponseBuilder, HTTPStatus,
    OCTET_STREAM, created, not_found, internal_error,
)


logger = logging.getLogger(__name__)


def extract_filename(remainder: str) -> str:
    """First segment of the path remainder after /files/."""
    return remainder.split("/", 1)[0]


class FileStore:
    """
    Byte-in/byte-out access to the filesystem.

    Errors are Python's own: FileNotFoundError when there is nothing to
    read, OSError for everything else.
    """

    def read(self, path: Path) -> bytes:
        return path.read_bytes()

    def write(self, path: Path, data: bytes) -> None:
        """Write `data`, replacing any existing file."""
        path.write_bytes(data)


class FileHandler:
    """
    Handler pair for /files/.

    =========================================================================
    USAGE
    =========================================================================

        files = FileHandler(directory="/tmp/data")

        router.get("/files/*name")(files.read)
        router.post("/files/*name")(files.write)

    =========================================================================
    """

    def __init__(self, directory: Optional[str], store: Optional[FileStore] = None):
        """
        Args:
            directory: Base directory, or None when none was configured.
            store: Filesystem collaborator. Defaults to FileStore().
        """
        self.directory = Path(directory) if directory is not None else None
        self.store = store or FileStore()

    def _resolve(self, request: HTTPRequest) -> Optional[Path]:
        """Target path for the request, or None without a base directory."""
        if self.directory is None:
            logger.error(f"No base directory configured for {request.method} {request.path}")
            return None

        remainder = request.path_params.get("name", "")
        return self.directory / extract_filename(remainder)

    def read(self, request: HTTPRequest) -> HTTPResponse:
        """GET /files/<name>"""
        path = self._resolve(request)
        if path is None:
            return internal_error()

        try:
            content = self.store.read(path)
        except FileNotFoundError:
            logger.debug(f"File not found: {path}")
            return not_found()
        except OSError as e:
            logger.error(f"Unexpected error reading file {path}: {e}")
            return internal_error()

        return (ResponseBuilder()
            .status(HTTPStatus.OK)
            .binary(content)
            .build())

    def write(self, request: HTTPRequest) -> HTTPResponse:
        """POST /files/<name>"""
        path = self._resolve(request)
        if path is None:
            return internal_error()

        try:
            self.store.write(path, request.body or b"")
        except OSError as e:
            logger.error(f"Unexpected error writing file {path}: {e}")
            return internal_error()

        logger.debug(f"Wrote {len(request.body or b'')} bytes to {path}")
        return created(OCTET_STREAM)
