"""Unit tests for the download worker."""

from __future__ import annotations

import queue
from pathlib import Path

from conftest import FakeResponse
from putioarr.background_processors import download_worker
from putioarr.background_processors.download_worker import DownloadWorker
from putioarr.background_processors.transfer import (
    DownloadStatus,
    DownloadTarget,
    DownloadTargetMessage,
    TargetType,
)


def _file_target(path: Path, url: str | None = "https://dl.put.io/1") -> DownloadTarget:
    return DownloadTarget(to=str(path), target_type=TargetType.FILE, top_level=False,
                          transfer_hash="abcd", source_url=url)


def test_directory_target_is_created(state, stop_event, tmp_path) -> None:
    worker = DownloadWorker(0, state, stop_event, queue.Queue())
    target = DownloadTarget(to=str(tmp_path / "Show"), target_type=TargetType.DIRECTORY,
                            top_level=True, transfer_hash="abcd")

    assert worker.download_target(target) == DownloadStatus.SUCCESS
    assert (tmp_path / "Show").is_dir()


def test_file_is_streamed_into_place(state, stop_event, tmp_path, monkeypatch) -> None:
    requested: list[str] = []

    def fake_get(url, stream, timeout):
        requested.append(url)
        return FakeResponse(chunks=[b"abc", b"", b"def"])

    monkeypatch.setattr(download_worker.requests, "get", fake_get)
    worker = DownloadWorker(0, state, stop_event, queue.Queue())
    destination = tmp_path / "Show" / "ep.mkv"

    assert worker.download_target(_file_target(destination)) == DownloadStatus.SUCCESS
    assert destination.read_bytes() == b"abcdef"
    assert not Path(f"{destination}.downloading").exists()
    assert requested == ["https://dl.put.io/1"]


def test_existing_file_is_skipped(state, stop_event, tmp_path, monkeypatch) -> None:
    def fail_get(*args, **kwargs):
        raise AssertionError("should not download")

    monkeypatch.setattr(download_worker.requests, "get", fail_get)
    destination = tmp_path / "ep.mkv"
    destination.write_bytes(b"done")
    worker = DownloadWorker(0, state, stop_event, queue.Queue())

    assert worker.download_target(_file_target(destination)) == DownloadStatus.SUCCESS
    assert destination.read_bytes() == b"done"


def test_http_error_fails_target(state, stop_event, tmp_path, monkeypatch) -> None:
    monkeypatch.setattr(download_worker.requests, "get", lambda url, stream, timeout: FakeResponse(status_code=500))
    worker = DownloadWorker(0, state, stop_event, queue.Queue())

    assert worker.download_target(_file_target(tmp_path / "ep.mkv")) == DownloadStatus.FAILED
    assert not (tmp_path / "ep.mkv").exists()


def test_missing_url_fails_target(state, stop_event, tmp_path) -> None:
    worker = DownloadWorker(0, state, stop_event, queue.Queue())

    assert worker.download_target(_file_target(tmp_path / "ep.mkv", url=None)) == DownloadStatus.FAILED


def test_worker_replies_on_message_queue(state, stop_event, tmp_path) -> None:
    """Each processed message gets its status on the reply queue."""
    download_queue: queue.Queue = queue.Queue()
    reply_queue: queue.Queue = queue.Queue()
    target = DownloadTarget(to=str(tmp_path / "Show"), target_type=TargetType.DIRECTORY,
                            top_level=True, transfer_hash="abcd")
    download_queue.put(DownloadTargetMessage(download_target=target, reply_queue=reply_queue))
    worker = DownloadWorker(0, state, stop_event, download_queue)

    thread = worker.start()
    status = reply_queue.get(timeout=5)
    stop_event.set()
    thread.join(timeout=5)

    assert status == DownloadStatus.SUCCESS
    assert not thread.is_alive()
