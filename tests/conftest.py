"""Shared fixtures for putioarr tests."""

from __future__ import annotations

import threading
from typing import Any

import pytest
import requests

from putioarr.apps.putio.api import PutioTransfer
from putioarr.config import parse_config
from putioarr.utils.app_state import AppState

ROOT_FOLDER_ID = 42


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code: int = 200, json_data: Any = None, chunks: list[bytes] | None = None):
        self.status_code = status_code
        self.ok = 200 <= status_code < 400
        self.reason = "OK" if self.ok else "Error"
        self._json = json_data
        self._chunks = chunks or []

    def json(self) -> Any:
        return self._json

    def iter_content(self, chunk_size: int = 1):
        yield from self._chunks

    def raise_for_status(self) -> None:
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} Error")

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc: object) -> None:
        return None


@pytest.fixture
def raw_config(tmp_path) -> dict[str, Any]:
    return {
        "username": "user",
        "password": "secret",
        "download_directory": str(tmp_path / "downloads"),
        "polling_interval": 1,
        "putio": {"api_key": "putio-token"},
        "sonarr": {"url": "http://sonarr:8989/", "api_key": "sonarr-key"},
    }


@pytest.fixture
def config(raw_config):
    return parse_config(raw_config)


@pytest.fixture
def state(config) -> AppState:
    return AppState(config, root_folder_id=ROOT_FOLDER_ID)


@pytest.fixture
def stop_event() -> threading.Event:
    return threading.Event()


def make_transfer(**overrides: Any) -> PutioTransfer:
    values: dict[str, Any] = {
        "id": 1,
        "name": "Some.Show.S01E01",
        "status": "SEEDING",
        "hash": "abcdef0123456789",
        "file_id": 100,
        "save_parent_id": ROOT_FOLDER_ID,
        "size": 1000,
        "downloaded": 1000,
    }
    values.update(overrides)
    return PutioTransfer(**values)
