"""
Unit tests for the route handlers.
"""

import logging
from pathlib import Path

import pytest

from tinyhttpd.handlers import FileHandler, FileStore, echo, extract_filename, root, user_agent
from tinyhttpd.http import HTTPRequest, HTTPStatus, OCTET_STREAM, TEXT_PLAIN


def _request(method: str = "GET", path: str = "/", headers=None, body=None, **params) -> HTTPRequest:
    return HTTPRequest(
        method=method,
        path=path,
        headers=headers or [],
        body=body,
        path_params=params,
    )


class BrokenStore(FileStore):
    """FileStore whose every operation fails with a generic I/O error."""

    def read(self, path: Path) -> bytes:
        raise PermissionError(f"denied: {path}")

    def write(self, path: Path, data: bytes) -> None:
        raise OSError(f"disk full: {path}")


class TestBasicHandlers:
    """Tests for root, echo and user_agent."""

    def test_root(self):
        response = root(_request())

        assert response.status == HTTPStatus.OK
        assert response.body is None

    def test_echo(self):
        response = echo(_request(path="/echo/foo/bar", text="foo/bar"))

        assert response.status == HTTPStatus.OK
        assert response.content_type == TEXT_PLAIN
        assert response.body == b"foo/bar"

    def test_echo_empty(self):
        response = echo(_request(path="/echo/", text=""))

        assert response.body == b""
        assert response.has_entity

    def test_user_agent(self):
        response = user_agent(_request(headers=[("User-Agent", "test-client")]))

        assert response.content_type == TEXT_PLAIN
        assert response.body == b"test-client"

    def test_user_agent_missing(self):
        assert user_agent(_request()).body == b""


class TestExtractFilename:

    @pytest.mark.parametrize("remainder,name", [
        ("notes.txt", "notes.txt"),
        ("notes.txt/extra", "notes.txt"),
        ("a/b/c", "a"),
        ("", ""),
    ])
    def test_first_segment(self, remainder: str, name: str):
        assert extract_filename(remainder) == name


class TestFileHandler:
    """Tests for FileHandler."""

    def test_read_existing(self, files_dir: Path):
        (files_dir / "hello.txt").write_bytes(b"hello world")
        handler = FileHandler(str(files_dir))

        response = handler.read(_request(path="/files/hello.txt", name="hello.txt"))

        assert response.status == HTTPStatus.OK
        assert response.content_type == OCTET_STREAM
        assert response.body == b"hello world"

    def test_read_missing(self, files_dir: Path):
        handler = FileHandler(str(files_dir))

        response = handler.read(_request(path="/files/missing", name="missing"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body is None

    def test_read_uses_first_segment(self, files_dir: Path):
        (files_dir / "a").write_bytes(b"A")
        handler = FileHandler(str(files_dir))

        response = handler.read(_request(path="/files/a/b/c", name="a/b/c"))

        assert response.body == b"A"

    def test_read_directory_is_500(self, files_dir: Path):
        """An empty name resolves to the base directory itself."""
        handler = FileHandler(str(files_dir))

        response = handler.read(_request(path="/files/", name=""))

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR

    def test_write_then_read(self, files_dir: Path):
        handler = FileHandler(str(files_dir))

        written = handler.write(_request("POST", "/files/x", body=b"payload", name="x"))
        read = handler.read(_request("GET", "/files/x", name="x"))

        assert written.status == HTTPStatus.CREATED
        assert written.body is None
        assert written.to_bytes() == b"HTTP/1.1 201 Created\r\n\r\n"
        assert read.status == HTTPStatus.OK
        assert read.body == b"payload"
        assert (files_dir / "x").read_bytes() == b"payload"

    def test_write_replaces_existing(self, files_dir: Path):
        (files_dir / "x").write_bytes(b"old contents, longer")
        handler = FileHandler(str(files_dir))

        handler.write(_request("POST", "/files/x", body=b"new", name="x"))

        assert (files_dir / "x").read_bytes() == b"new"

    def test_write_without_body_creates_empty_file(self, files_dir: Path):
        handler = FileHandler(str(files_dir))

        response = handler.write(_request("POST", "/files/empty", name="empty"))

        assert response.status == HTTPStatus.CREATED
        assert (files_dir / "empty").read_bytes() == b""

    def test_write_truncates_to_first_segment(self, files_dir: Path):
        handler = FileHandler(str(files_dir))

        handler.write(_request("POST", "/files/doc/extra", body=b"d", name="doc/extra"))

        assert (files_dir / "doc").read_bytes() == b"d"
        assert not (files_dir / "extra").exists()

    def test_no_directory_read(self, caplog):
        handler = FileHandler(None)

        with caplog.at_level(logging.ERROR, logger="tinyhttpd"):
            response = handler.read(_request(path="/files/anything", name="anything"))

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.body is None
        assert "No base directory" in caplog.text

    def test_no_directory_write(self):
        handler = FileHandler(None)

        response = handler.write(_request("POST", "/files/x", body=b"x", name="x"))

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR

    def test_read_io_error_is_500(self, files_dir: Path, caplog):
        handler = FileHandler(str(files_dir), store=BrokenStore())

        with caplog.at_level(logging.ERROR, logger="tinyhttpd"):
            response = handler.read(_request(path="/files/x", name="x"))

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert "denied" in caplog.text

    def test_write_io_error_is_500(self, files_dir: Path):
        handler = FileHandler(str(files_dir), store=BrokenStore())

        response = handler.write(_request("POST", "/files/x", body=b"x", name="x"))

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
