"""Shared test fixtures for wagerboard tests."""

import os
from collections.abc import Generator
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

# No refresh threads hitting real upstreams during tests.
os.environ["BACKGROUND_JOBS"] = "0"

import server  # noqa: E402
from wagerboard.cache import LeaderboardCache  # noqa: E402


class FakeResponse:
    """Stand-in for requests.Response carrying a canned JSON payload."""

    def __init__(self, payload: Any = None, status_code: int = 200, invalid_json: bool = False) -> None:
        self._payload = payload
        self.status_code = status_code
        self._invalid_json = invalid_json

    def json(self) -> Any:
        if self._invalid_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


@pytest.fixture
def fake_session() -> MagicMock:
    """requests.Session mock; tests set get.return_value or get.side_effect."""
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch) -> Generator[Any, None, None]:
    """
    Flask test client (no real server) with a fresh, empty cache.
    """
    monkeypatch.setattr(server, "CACHE", LeaderboardCache())
    server.app.config["TESTING"] = True
    with server.app.test_client() as test_client:
        yield test_client
