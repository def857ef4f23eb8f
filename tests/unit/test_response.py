"""
Unit tests for response framing.
"""

import io
from datetime import datetime, timezone, timedelta

import pytest

from webserver.http.response import (
    HTTPResponse,
    ResponseWriter,
    HTTPStatus,
    error_response,
    forbidden,
    not_found,
    format_http_date,
)

from conftest import RawResponse


EXPECTED_HEADER_ORDER = ["Server", "Date", "Content-Type", "Content-Length", "Connection"]


class TestResponseWriter:
    """Tests for ResponseWriter."""

    def test_write_body_framing(self):
        """Status line, fixed headers in order, blank line, body."""
        out = io.BytesIO()
        writer = ResponseWriter(out, server_name="Test/1.0")

        sent = writer.write_body(404, "Not Found", "text/html", b"<h1>404</h1>")

        response = RawResponse(out.getvalue())
        assert sent == 12
        assert response.status_line == "HTTP/1.0 404 Not Found"
        assert response.header_names == EXPECTED_HEADER_ORDER
        assert response.headers["Server"] == "Test/1.0"
        assert response.headers["Content-Type"] == "text/html"
        assert response.headers["Content-Length"] == "12"
        assert response.headers["Connection"] == "close"
        assert response.body == b"<h1>404</h1>"

    def test_date_header_is_gmt(self):
        out = io.BytesIO()
        ResponseWriter(out).write_body(200, "OK", "text/plain", b"")

        date = RawResponse(out.getvalue()).headers["Date"]
        assert date.endswith(" GMT")
        datetime.strptime(date, "%a, %d %b %Y %H:%M:%S GMT")

    def test_write_file_streams_exact_length(self, tmp_path):
        """File bodies are copied in chunks; length matches the file."""
        data = bytes(range(256)) * 10
        path = tmp_path / "blob.bin"
        path.write_bytes(data)

        out = io.BytesIO()
        writer = ResponseWriter(out, chunk_size=100)
        with path.open("rb") as f:
            sent = writer.write_file(200, "OK", "application/octet-stream", f)

        response = RawResponse(out.getvalue())
        assert sent == len(data)
        assert response.headers["Content-Length"] == str(len(data))
        assert response.body == data

    def test_write_file_never_exceeds_content_length(self, tmp_path):
        """Bytes beyond the announced length are not sent."""
        path = tmp_path / "grown.txt"
        path.write_bytes(b"0123456789")

        out = io.BytesIO()
        with path.open("rb") as f:
            ResponseWriter(out, chunk_size=3).write_file(200, "OK", "text/plain", f, 4)

        response = RawResponse(out.getvalue())
        assert response.headers["Content-Length"] == "4"
        assert response.body == b"0123"

    def test_write_file_short_file_raises(self, tmp_path):
        """A file shorter than announced aborts with OSError."""
        path = tmp_path / "short.txt"
        path.write_bytes(b"abc")

        with path.open("rb") as f:
            with pytest.raises(OSError):
                ResponseWriter(io.BytesIO()).write_file(200, "OK", "text/plain", f, 10)

    def test_send_closes_file(self, tmp_path):
        """send() releases the response's file handle."""
        path = tmp_path / "page.html"
        path.write_bytes(b"<p>hi</p>")
        f = path.open("rb")

        response = HTTPResponse(
            status=HTTPStatus.OK,
            content_type="text/html",
            file=f,
            content_length=9,
        )
        out = io.BytesIO()
        sent = ResponseWriter(out).send(response)

        assert sent == 9
        assert f.closed
        assert RawResponse(out.getvalue()).body == b"<p>hi</p>"

    def test_send_in_memory_body(self):
        out = io.BytesIO()
        sent = ResponseWriter(out).send(forbidden())

        response = RawResponse(out.getvalue())
        assert response.status == 403
        assert response.reason == "Forbidden"
        assert int(response.headers["Content-Length"]) == len(response.body) == sent


class TestHTTPResponse:
    """Tests for HTTPResponse."""

    def test_reason(self):
        assert HTTPResponse(status=HTTPStatus.OK).reason == "OK"
        assert HTTPResponse(status=HTTPStatus.NOT_IMPLEMENTED).reason == "Not Implemented"

    def test_in_memory_body_is_not_streamed(self):
        assert not HTTPResponse(body=b"abcd").is_streamed


class TestErrorPages:
    """Tests for generated error pages."""

    @pytest.mark.parametrize("status", [
        HTTPStatus.BAD_REQUEST,
        HTTPStatus.FORBIDDEN,
        HTTPStatus.NOT_FOUND,
        HTTPStatus.NOT_IMPLEMENTED,
    ])
    def test_error_page_content(self, status):
        response = error_response(status, server_name="Test/1.0")

        assert response.status == status
        assert response.content_type.startswith("text/html")
        assert str(int(status)).encode() in response.body
        assert b"Test/1.0" in response.body
        assert response.body.startswith(b"<!DOCTYPE html>")

    @pytest.mark.parametrize("factory, status", [
        (forbidden, HTTPStatus.FORBIDDEN),
        (not_found, HTTPStatus.NOT_FOUND),
    ])
    def test_shortcuts(self, factory, status):
        assert factory(source="/x").status == status
        assert factory(source="/x").source == "/x"

    def test_default_not_found_page(self):
        body = not_found().body
        assert b"404" in body
        assert b"File Not Found" in body

    def test_generic_page_has_reason(self):
        body = error_response(HTTPStatus.NOT_IMPLEMENTED).body
        assert b"501 - Not Implemented" in body


class TestHTTPStatus:
    """Tests for HTTPStatus enum."""

    def test_status_phrases(self):
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.BAD_REQUEST.phrase == "Bad Request"
        assert HTTPStatus.FORBIDDEN.phrase == "Forbidden"
        assert HTTPStatus.NOT_FOUND.phrase == "Not Found"
        assert HTTPStatus.NOT_IMPLEMENTED.phrase == "Not Implemented"

    def test_int_compatible(self):
        assert HTTPStatus.NOT_FOUND == 404


class TestFormatHTTPDate:
    """Tests for HTTP date formatting."""

    def test_format(self):
        dt = datetime(2026, 1, 15, 12, 30, 45, tzinfo=timezone.utc)
        assert format_http_date(dt) == "Thu, 15 Jan 2026 12:30:45 GMT"

    def test_converts_to_gmt(self):
        dt = datetime(2026, 1, 15, 14, 30, 45, tzinfo=timezone(timedelta(hours=2)))
        assert format_http_date(dt) == "Thu, 15 Jan 2026 12:30:45 GMT"
