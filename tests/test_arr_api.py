"""Unit tests for the arr history helpers."""

from __future__ import annotations

import pytest

from conftest import FakeResponse
from putioarr.apps.arr import api as arr_api
from putioarr.errors import ArrError


def _record(event_type: str, dropped_path: str | None) -> dict:
    return {"eventType": event_type, "data": {"droppedPath": dropped_path}}


def test_check_imported_pages_through_history(monkeypatch) -> None:
    """A match on the second page should be found."""
    pages = {
        1: {"totalRecords": 3, "records": [_record("grabbed", None), _record("downloadFolderImported", "/d/other")]},
        2: {"totalRecords": 3, "records": [_record("downloadFolderImported", "/d/Show")]},
    }
    requested: list[int] = []

    def fake_get(url, headers, params, timeout):
        requested.append(params["page"])
        assert headers == {"X-Api-Key": "key"}
        return FakeResponse(json_data=pages[params["page"]])

    monkeypatch.setattr(arr_api.requests, "get", fake_get)

    assert arr_api.check_imported("/d/Show", "http://sonarr", "key") is True
    assert requested == [1, 2]


def test_check_imported_false_when_not_in_history(monkeypatch) -> None:
    def fake_get(url, headers, params, timeout):
        return FakeResponse(json_data={"totalRecords": 1, "records": [_record("downloadFolderImported", "/d/x")]})

    monkeypatch.setattr(arr_api.requests, "get", fake_get)

    assert arr_api.check_imported("/d/Show", "http://sonarr", "key") is False


def test_check_imported_ignores_other_events(monkeypatch) -> None:
    def fake_get(url, headers, params, timeout):
        return FakeResponse(json_data={"totalRecords": 1, "records": [_record("grabbed", "/d/Show")]})

    monkeypatch.setattr(arr_api.requests, "get", fake_get)

    assert arr_api.check_imported("/d/Show", "http://sonarr", "key") is False


def test_check_imported_raises_on_error(monkeypatch) -> None:
    monkeypatch.setattr(arr_api.requests, "get", lambda url, headers, params, timeout: FakeResponse(status_code=500))

    with pytest.raises(ArrError):
        arr_api.check_imported("/d/Show", "http://sonarr", "key")


def test_verify_auth(monkeypatch) -> None:
    monkeypatch.setattr(arr_api.requests, "get", lambda url, headers, timeout: FakeResponse(status_code=401))

    with pytest.raises(ArrError, match="Invalid API key for radarr"):
        arr_api.verify_auth("radarr", "http://radarr", "bad")
