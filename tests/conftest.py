"""
Shared test fixtures and helpers for the Courier test suite.
"""

import pytest

from courier.config import CacheConfig
from courier.files import FileSender
from courier.response import Response
from courier.testing import RecordingSink


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def response(sink):
    return Response(sink)


@pytest.fixture
def cache_config():
    return CacheConfig(
        expires_by_type={"text/javascript": 3600, "text/css": 600},
        default_expire=60,
    )


@pytest.fixture
def file_sender(cache_config):
    return FileSender(cache_config, chunk_size=4)


@pytest.fixture
def public_dir(tmp_path):
    """A small static tree: app.js, style.css, index.html, docs/."""
    root = tmp_path / "public"
    root.mkdir()
    (root / "app.js").write_text("console.log('hi');\n")
    (root / "style.css").write_text("body { margin: 0 }\n")
    (root / "index.html").write_text("<h1>home</h1>")
    (root / "docs").mkdir()
    (root / "docs" / "index.html").write_text("<h1>docs</h1>")
    (tmp_path / "secret.txt").write_text("do not serve")
    return root
