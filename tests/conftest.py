"""Pytest configuration and fixtures for baladocs tests."""

import json
import sys
import tempfile
import zipfile
from pathlib import Path

import httpx
import pytest

from baladocs.core.log import ConsoleSink, setup_logger


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    """Console-only logging at debug level for the whole session."""
    test_log_root = Path(tempfile.gettempdir()) / "baladocs-tests"
    setup_logger(
        log_root=test_log_root,
        console=ConsoleSink(level="debug"),
        level="debug",
    )


@pytest.fixture
def mock_argv():
    """Save and restore sys.argv."""
    original = sys.argv.copy()
    sys.argv = ["baladocs"]
    yield
    sys.argv = original


@pytest.fixture
def make_bala(tmp_path):
    """Factory writing a zip archive with the given package.json.

    Pass manifest=None to leave package.json out, or a str to write
    it verbatim.
    """
    def _make(
        manifest=None,
        name="pkg.bala",
        extra_entries=None,
    ) -> Path:
        path = tmp_path / name
        with zipfile.ZipFile(path, "w") as archive:
            if manifest is not None:
                content = (
                    manifest if isinstance(manifest, str)
                    else json.dumps(manifest)
                )
                archive.writestr("package.json", content)
            for entry, data in (extra_entries or {}).items():
                archive.writestr(entry, data)
        return path
    return _make


@pytest.fixture
def dists(tmp_path):
    """Empty toolchain installations root."""
    root = tmp_path / "dists"
    root.mkdir()
    return root


@pytest.fixture
def install_toolchain(dists, tmp_path):
    """Factory creating a fake toolchain installation.

    The fake bin/bal appends its arguments and working directory
    to a calls file, creates ./target, and exits with exit_code.
    Returns (installation path, calls file).
    """
    def _install(name: str, exit_code: int = 0):
        install = dists / name
        (install / "bin").mkdir(parents=True)
        calls = tmp_path / f"{name}.calls"
        script = install / "bin" / "bal"
        script.write_text(
            "#!/bin/sh\n"
            f"echo \"$PWD $*\" >> '{calls}'\n"
            "mkdir -p target\n"
            f"exit {exit_code}\n"
        )
        script.chmod(0o755)
        return install, calls
    return _install


@pytest.fixture
def serve_bytes():
    """Factory for an httpx MockTransport serving one URL.

    Any other URL answers 404. requests records every request seen.
    """
    def _serve(url: str, body: bytes, status: int = 200):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if str(request.url) != url:
                return httpx.Response(404)
            return httpx.Response(status, content=body)

        transport = httpx.MockTransport(handler)
        transport.requests = requests
        return transport
    return _serve
