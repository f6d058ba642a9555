"""Tests for the /transmission/rpc endpoint."""

from __future__ import annotations

import base64
import logging
import re
from typing import Any

import pytest

from conftest import ROOT_FOLDER_ID, make_transfer
from putioarr.apps.putio import api as putio_api
from putioarr.errors import PutioError
from putioarr.transmission import SESSION_ID, SESSION_ID_HEADER
from putioarr.web_server import create_app

AUTH = {"Authorization": "Basic " + base64.b64encode(b"user:secret").decode()}
BAD_AUTH = {"Authorization": "Basic " + base64.b64encode(b"user:wrong").decode()}


@pytest.fixture
def client(state):
    app = create_app(state)
    app.config["TESTING"] = True
    return app.test_client()


def _rpc(client, method: str, arguments: dict[str, Any] | None = None, headers=AUTH):
    payload: dict[str, Any] = {"method": method}
    if arguments is not None:
        payload["arguments"] = arguments
    return client.post("/transmission/rpc", json=payload, headers=headers)


def test_get_without_auth_is_forbidden(client) -> None:
    response = client.get("/transmission/rpc")

    assert response.status_code == 403
    assert response.data == b"forbidden"


def test_get_with_auth_returns_session_id(client) -> None:
    response = client.get("/transmission/rpc", headers=AUTH)

    assert response.status_code == 409
    assert response.headers[SESSION_ID_HEADER] == SESSION_ID


def test_post_with_bad_auth_asks_for_session(client) -> None:
    """Clients retry with credentials after a 409."""
    response = _rpc(client, "session-get", headers=BAD_AUTH)

    assert response.status_code == 409
    assert response.headers[SESSION_ID_HEADER] == SESSION_ID


def test_session_get(client, config) -> None:
    response = _rpc(client, "session-get")

    assert response.status_code == 200
    body = response.get_json()
    assert body["result"] == "success"
    assert body["arguments"]["download-dir"] == config.download_directory


@pytest.mark.parametrize("method", ["torrent-set", "queue-move-top"])
def test_noop_methods(client, method: str) -> None:
    response = _rpc(client, method, {"ids": ["abc"]})

    assert response.get_json() == {"result": "success", "arguments": {}}


def test_torrent_get_lists_transfers_in_folder(client, state, monkeypatch) -> None:
    transfers = [
        make_transfer(id=1, status="SEEDING"),
        make_transfer(id=2, status="DOWNLOADING", size=100, downloaded=10),
        make_transfer(id=3, save_parent_id=999),
    ]
    monkeypatch.setattr(putio_api, "list_transfers", lambda api_key: transfers)
    state.mark_downloaded(1)

    response = _rpc(client, "torrent-get", {"fields": ["id"]})

    torrents = response.get_json()["arguments"]["torrents"]
    assert [t["id"] for t in torrents] == [1, 2]
    assert torrents[0]["isFinished"] is True
    assert torrents[1]["leftUntilDone"] == 90


def test_torrent_add_magnet(client, monkeypatch) -> None:
    added: list[tuple[str, str, int]] = []
    monkeypatch.setattr(putio_api, "add_transfer", lambda key, url, parent: added.append((key, url, parent)))

    response = _rpc(client, "torrent-add", {"filename": "magnet:?xt=urn:btih:abc"})

    assert response.status_code == 200
    assert added == [("putio-token", "magnet:?xt=urn:btih:abc", ROOT_FOLDER_ID)]


def test_torrent_add_metainfo(client, monkeypatch) -> None:
    uploaded: list[tuple[bytes, int]] = []
    monkeypatch.setattr(putio_api, "upload_file", lambda key, content, parent: uploaded.append((content, parent)))

    response = _rpc(client, "torrent-add", {"metainfo": base64.b64encode(b"d8:announce").decode()})

    assert response.status_code == 200
    assert uploaded == [(b"d8:announce", ROOT_FOLDER_ID)]


def test_torrent_add_without_torrent_is_bad_request(client) -> None:
    response = _rpc(client, "torrent-add", {})

    assert response.status_code == 400
    assert b"metainfo or filename" in response.data


def test_torrent_add_putio_failure_is_bad_request(client, monkeypatch) -> None:
    def failing_add(key, url, parent):
        raise PutioError("Error adding url", 400)

    monkeypatch.setattr(putio_api, "add_transfer", failing_add)

    response = _rpc(client, "torrent-add", {"filename": "magnet:?xt=urn:btih:abc"})

    assert response.status_code == 400


def test_torrent_remove_deletes_matching_transfers(client, state, monkeypatch) -> None:
    transfers = [
        make_transfer(id=1, hash="AAAA1111", file_id=10),
        make_transfer(id=2, hash="bbbb2222", file_id=20),
    ]
    removed: list[int] = []
    deleted: list[int] = []
    monkeypatch.setattr(putio_api, "list_transfers", lambda api_key: transfers)
    monkeypatch.setattr(putio_api, "remove_transfer", lambda key, transfer_id: removed.append(transfer_id))
    monkeypatch.setattr(putio_api, "delete_file", lambda key, file_id: deleted.append(file_id))
    state.mark_downloaded(1)

    response = _rpc(client, "torrent-remove", {"ids": ["aaaa1111"], "delete-local-data": True})

    assert response.get_json()["result"] == "success"
    assert removed == [1]
    assert deleted == [10]
    assert state.is_downloaded(1) is False


def test_torrent_remove_keeps_files_without_delete_local_data(client, monkeypatch) -> None:
    deleted: list[int] = []
    monkeypatch.setattr(putio_api, "list_transfers", lambda api_key: [make_transfer(id=1, hash="aaaa")])
    monkeypatch.setattr(putio_api, "remove_transfer", lambda key, transfer_id: None)
    monkeypatch.setattr(putio_api, "delete_file", lambda key, file_id: deleted.append(file_id))

    _rpc(client, "torrent-remove", {"ids": ["aaaa"]})

    assert deleted == []


def test_unknown_method(client) -> None:
    response = _rpc(client, "blocklist-update")

    assert response.status_code == 200
    assert response.get_json()["result"] == "method not recognized: blocklist-update"


def test_putio_failure_is_server_error(client, monkeypatch) -> None:
    def failing_list(api_key):
        raise PutioError("Error getting put.io transfers: 503", 503)

    monkeypatch.setattr(putio_api, "list_transfers", failing_list)

    response = _rpc(client, "torrent-get")

    assert response.status_code == 500
    assert "503" in response.get_json()["result"]


@pytest.mark.parametrize("body", ["[]", '"session-get"', "12"])
def test_non_object_json_body_is_unknown_method(client, body: str) -> None:
    response = client.post("/transmission/rpc", data=body, content_type="application/json", headers=AUTH)

    assert response.status_code == 200
    assert response.get_json()["result"] == "method not recognized: "


def test_requests_are_access_logged(client, caplog) -> None:
    """Each request gets one access line with status, size, referer, agent and time."""
    headers = {**AUTH, "Referer": "http://sonarr/settings", "User-Agent": "Sonarr/4.0"}

    with caplog.at_level(logging.INFO, logger="putioarr.http"):
        response = client.post("/transmission/rpc", json={"method": "session-get"}, headers=headers)

    access_lines = [r.getMessage() for r in caplog.records if r.name == "putioarr.http"]
    assert len(access_lines) == 1
    pattern = (
        r'^\S+ "POST /transmission/rpc HTTP/\d\.\d" 200 (\d+) '
        r'"http://sonarr/settings" "Sonarr/4\.0" \d+\.\d{6}$'
    )
    match = re.match(pattern, access_lines[0])
    assert match is not None, access_lines[0]
    assert int(match.group(1)) == len(response.data)


def test_access_log_uses_dash_for_missing_referer(client, caplog) -> None:
    with caplog.at_level(logging.INFO, logger="putioarr.http"):
        client.get("/transmission/rpc")

    line = [r.getMessage() for r in caplog.records if r.name == "putioarr.http"][0]
    assert '"GET /transmission/rpc' in line
    assert ' 403 9 "-" ' in line
