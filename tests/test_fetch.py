"""Tests for Fetcher."""

import httpx
import pytest

from baladocs.artifact.fetch import Fetcher
from baladocs.core.errors import (
    FailureCategory,
    FetchError,
    SourceNotFoundError,
)

URL = "https://repo.example.com/pkg.bala"
PAYLOAD = bytes(range(256)) * 1024


@pytest.mark.parametrize(
    "url",
    [
        "not a url",
        "repo.example.com/pkg.bala",
        "/tmp/pkg.bala",
        "ftp://repo.example.com/pkg.bala",
        "https://",
        "http://repo.example.com:notaport/pkg.bala",
        "",
    ],
)
def test_malformed_url_is_source_not_found(tmp_path, url):
    """Malformed URLs fail before any file is created."""
    destination = tmp_path / "out.bala"

    with pytest.raises(SourceNotFoundError) as exc_info:
        Fetcher().fetch(url, destination)

    assert exc_info.value.category == FailureCategory.SOURCE_NOT_FOUND
    assert not destination.exists()
    assert list(tmp_path.iterdir()) == []


def test_download_is_byte_identical(tmp_path, serve_bytes):
    """Downloaded file matches the served body exactly."""
    destination = tmp_path / "out.bala"
    fetcher = Fetcher(chunk_size=1000, transport=serve_bytes(URL, PAYLOAD))

    result = fetcher.fetch(URL, destination)

    assert result == destination
    assert destination.read_bytes() == PAYLOAD


def test_download_overwrites_existing_file(tmp_path, serve_bytes):
    destination = tmp_path / "out.bala"
    destination.write_bytes(b"stale content that is longer than the body")
    fetcher = Fetcher(transport=serve_bytes(URL, b"fresh"))

    fetcher.fetch(URL, destination)

    assert destination.read_bytes() == b"fresh"


@pytest.mark.parametrize("status", [404, 410, 403])
def test_client_error_status_is_source_not_found(tmp_path, serve_bytes, status):
    destination = tmp_path / "out.bala"
    fetcher = Fetcher(transport=serve_bytes(URL, b"nope", status=status))

    with pytest.raises(SourceNotFoundError):
        fetcher.fetch(URL, destination)

    assert not destination.exists()


def test_server_error_is_fetch_error(tmp_path, serve_bytes):
    destination = tmp_path / "out.bala"
    fetcher = Fetcher(transport=serve_bytes(URL, b"oops", status=503))

    with pytest.raises(FetchError) as exc_info:
        fetcher.fetch(URL, destination)

    assert exc_info.value.category == FailureCategory.BUILD_INFRASTRUCTURE
    assert not destination.exists()


def test_dns_failure_is_source_not_found(tmp_path):
    """Connection failures (including name resolution) mean the
    source cannot be located."""
    def handler(request):
        raise httpx.ConnectError("Name or service not known", request=request)

    fetcher = Fetcher(transport=httpx.MockTransport(handler))

    with pytest.raises(SourceNotFoundError) as exc_info:
        fetcher.fetch(URL, tmp_path / "out.bala")

    assert exc_info.value.context["url"] == URL
    assert not (tmp_path / "out.bala").exists()


def test_read_timeout_is_fetch_error(tmp_path):
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    fetcher = Fetcher(transport=httpx.MockTransport(handler))

    with pytest.raises(FetchError):
        fetcher.fetch(URL, tmp_path / "out.bala")


def test_unwritable_destination_is_fetch_error(tmp_path, serve_bytes):
    """Local I/O failure is a build infrastructure problem."""
    destination = tmp_path / "missing-dir" / "out.bala"
    fetcher = Fetcher(transport=serve_bytes(URL, PAYLOAD))

    with pytest.raises(FetchError) as exc_info:
        fetcher.fetch(URL, destination)

    assert exc_info.value.context["path"] == str(destination)


def test_redirects_are_followed(tmp_path):
    target = "https://cdn.example.com/pkg.bala"

    def handler(request):
        if str(request.url) == URL:
            return httpx.Response(302, headers={"Location": target})
        return httpx.Response(200, content=b"redirected")

    fetcher = Fetcher(transport=httpx.MockTransport(handler))
    destination = tmp_path / "out.bala"

    fetcher.fetch(URL, destination)

    assert destination.read_bytes() == b"redirected"


def test_file_url_is_copied(tmp_path):
    source = tmp_path / "source.bala"
    source.write_bytes(PAYLOAD)
    destination = tmp_path / "out.bala"

    Fetcher().fetch(source.as_uri(), destination)

    assert destination.read_bytes() == PAYLOAD


def test_missing_file_url_is_source_not_found(tmp_path):
    destination = tmp_path / "out.bala"

    with pytest.raises(SourceNotFoundError):
        Fetcher().fetch((tmp_path / "absent.bala").as_uri(), destination)

    assert not destination.exists()
