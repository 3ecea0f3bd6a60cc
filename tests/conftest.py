"""
Pytest configuration and shared fixtures.

Contains common test fixtures and setup for all test modules.
"""

import os
from pathlib import Path
from typing import Generator

import pytest

from nginxlog.config import ReaderSettings, get_settings


COMBINED_FORMAT = (
    '$remote_addr - $remote_user [$time_local] "$request" '
    '$status $body_bytes_sent "$http_referer" "$http_user_agent"'
)

COMBINED_LINE = (
    '127.0.0.1 - - [08/Nov/2013:13:39:18 +0000] "GET /api/foo/bar?a=1 HTTP/1.1" '
    '200 612 "-" "Mozilla/5.0 (X11; Linux x86_64)"'
)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None, None, None]:
    """Isolate tests from NGINXLOG_* variables and config files on the host."""
    for key in list(os.environ):
        if key.startswith("NGINXLOG_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> ReaderSettings:
    """Default reader settings."""
    return ReaderSettings()


@pytest.fixture
def combined_format() -> str:
    """nginx "combined" log format template."""
    return COMBINED_FORMAT


@pytest.fixture
def combined_line() -> str:
    """One access log line in the combined format."""
    return COMBINED_LINE


@pytest.fixture
def simple_format() -> str:
    return '$remote_addr [$time_local] "$request" $status $body_bytes_sent'


@pytest.fixture
def simple_log() -> str:
    """Two lines in the simple format."""
    return (
        '127.0.0.1 [08/Nov/2013:13:39:18 +0000] "GET /api/foo HTTP/1.1" 200 612\n'
        '192.168.1.1 [08/Nov/2013:13:40:18 +0000] "POST /api/bar HTTP/1.1" 404 0\n'
    )


@pytest.fixture
def nginx_config() -> str:
    """nginx configuration declaring several log formats."""
    return """
user  nginx;
worker_processes  1;

http {
    # Default format
    log_format  short  '$remote_addr [$time_local] "$request"';

    log_format main '$remote_addr - $remote_user [$time_local] "$request" '
                    '$status $body_bytes_sent "$http_referer" '
                    '"$http_user_agent" "$http_x_forwarded_for"';

    log_format json escape=json '{"addr":"$remote_addr","status":"$status"}';

    access_log  /var/log/nginx/access.log  main;
}
"""
