"""Download bala artifacts to local files."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import urlsplit
from urllib.request import url2pathname

import httpx

from baladocs.core.errors import FetchError, SourceNotFoundError
from baladocs.core.log import logger
from baladocs.core.result import validate_source_url


class Fetcher:
    """Copies the resource behind a URL into a local file.

    http(s) URLs are streamed with httpx; file URLs are copied from
    the local filesystem. Failures are split in two: the source
    cannot be located (SourceNotFoundError) or it was located but
    could not be transferred or written (FetchError).
    """

    def __init__(
        self,
        timeout: float = 60.0,
        follow_redirects: bool = True,
        chunk_size: int = 64 * 1024,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Args:
            timeout: Network timeout in seconds
            follow_redirects: Follow HTTP redirects
            chunk_size: Bytes read per chunk while streaming
            transport: Optional httpx transport (tests pass a
                MockTransport)
        """
        self.timeout = timeout
        self.follow_redirects = follow_redirects
        self.chunk_size = chunk_size
        self.transport = transport

    def fetch(self, url: str, destination: Path) -> Path:
        """Write the resource at url to destination.

        The destination file is only created once the source has
        answered successfully, and it is removed again if the
        transfer fails part way.

        Returns:
            destination

        Raises:
            SourceNotFoundError: Malformed or unreachable URL
            FetchError: Transfer or local write failure
        """
        try:
            url = validate_source_url(url)
        except ValueError as e:
            raise SourceNotFoundError(
                f"unable to locate bala file: {e}", url=url
            ) from e

        logger.debug("Downloading bala", url=url, path=str(destination))
        if urlsplit(url).scheme.lower() == "file":
            self._copy_local(url, destination)
        else:
            self._download(url, destination)

        logger.debug(
            "Downloaded bala",
            url=url,
            size=destination.stat().st_size,
        )
        return destination

    def _client(self) -> httpx.Client:
        return httpx.Client(
            timeout=self.timeout,
            follow_redirects=self.follow_redirects,
            transport=self.transport,
        )

    def _download(self, url: str, destination: Path) -> None:
        try:
            with self._client() as client, client.stream("GET", url) as response:
                if 400 <= response.status_code < 500:
                    raise SourceNotFoundError(
                        f"unable to locate bala file: HTTP {response.status_code}",
                        url=url,
                    )
                if response.status_code >= 300:
                    raise FetchError(
                        f"error reading bala file: HTTP {response.status_code}",
                        url=url,
                    )
                self._write(
                    response.iter_bytes(self.chunk_size), url, destination
                )
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise SourceNotFoundError(
                f"unable to locate bala file: {e}", url=url
            ) from e
        except httpx.ConnectError as e:
            raise SourceNotFoundError(
                f"unable to reach bala host: {e}", url=url
            ) from e
        except httpx.HTTPError as e:
            _discard(destination)
            raise FetchError(
                f"error reading from '{url}' or writing to '{destination}': {e}",
                url=url,
                path=destination,
            ) from e

    def _copy_local(self, url: str, destination: Path) -> None:
        source = Path(url2pathname(urlsplit(url).path))
        if not source.is_file():
            raise SourceNotFoundError(
                "unable to locate bala file", url=url, path=source
            )
        try:
            with open(source, "rb") as src:
                self._write(iter(lambda: src.read(self.chunk_size), b""),
                            url, destination)
        except OSError as e:
            raise FetchError(
                f"error reading from '{url}': {e}", url=url, path=source
            ) from e

    def _write(self, chunks, url: str, destination: Path) -> None:
        try:
            out = open(destination, "wb")  # noqa: SIM115
        except OSError as e:
            raise FetchError(
                f"unable to write to temporary bala file: {e}",
                url=url,
                path=destination,
            ) from e
        try:
            with out:
                for chunk in chunks:
                    out.write(chunk)
        except OSError as e:
            _discard(destination)
            raise FetchError(
                f"unable to write to temporary bala file: {e}",
                url=url,
                path=destination,
            ) from e
        except BaseException:
            _discard(destination)
            raise


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warn("Failed to remove partial download", path=str(path),
                    error=str(e))

