"""
Transmission RPC types.

Only the parts of the Transmission RPC protocol that Sonarr, Radarr and
Whisparr use are modelled here. put.io transfers are translated into
Transmission torrents so the arrs can follow their progress.
"""
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Dict, Optional

from putioarr.apps.putio import api as putio_api
from putioarr.apps.putio.api import PutioTransfer

SESSION_ID_HEADER = "X-Transmission-Session-Id"
SESSION_ID = "useless-session-id"

RPC_VERSION = "18"
DAEMON_VERSION = "14.0.0"


class TorrentStatus(IntEnum):
    STOPPED = 0
    CHECK_WAIT = 1
    CHECK = 2
    QUEUED = 3
    DOWNLOADING = 4
    SEED_WAIT = 5
    SEEDING = 6


_PUTIO_STATUS_MAP = {
    putio_api.STATUS_IN_QUEUE: TorrentStatus.QUEUED,
    putio_api.STATUS_WAITING: TorrentStatus.QUEUED,
    putio_api.STATUS_PREPARING_DOWNLOAD: TorrentStatus.QUEUED,
    putio_api.STATUS_DOWNLOADING: TorrentStatus.DOWNLOADING,
    putio_api.STATUS_COMPLETING: TorrentStatus.DOWNLOADING,
    putio_api.STATUS_SEEDING: TorrentStatus.SEEDING,
    putio_api.STATUS_COMPLETED: TorrentStatus.SEEDING,
    putio_api.STATUS_ERROR: TorrentStatus.STOPPED,
}


def map_status(putio_status: str) -> TorrentStatus:
    """Translate a put.io transfer status, unknown statuses count as queued."""
    return _PUTIO_STATUS_MAP.get(putio_status, TorrentStatus.QUEUED)


def session_config(download_dir: str) -> Dict[str, Any]:
    """Arguments of a session-get response."""
    return {
        "rpc-version": RPC_VERSION,
        "version": DAEMON_VERSION,
        "download-dir": download_dir,
        "seedRatioLimit": 1.0,
        "seedRatioLimited": True,
        "idle-seeding-limit": 100,
        "idle-seeding-limit-enabled": False,
    }


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def seconds_downloading(transfer: PutioTransfer, now: Optional[datetime] = None) -> int:
    started = _parse_timestamp(transfer.started_at)
    if started is None:
        return 0
    finished = _parse_timestamp(transfer.finished_at) or now or datetime.now(timezone.utc)
    return max(int((finished - started).total_seconds()), 0)


def to_torrent(transfer: PutioTransfer, download_dir: str, downloaded_locally: bool) -> Dict[str, Any]:
    """
    Build the torrent-get entry for a put.io transfer.

    A transfer is only reported as finished once its files are on local disk.
    Until then a transfer put.io has completed is reported as downloading with
    one byte left, so the arr doesn't try to import it.

    Args:
        transfer: The put.io transfer
        download_dir: Directory downloads end up in
        downloaded_locally: Whether the download system has fetched the files

    Returns:
        Torrent fields keyed by their Transmission names
    """
    status = map_status(transfer.status)
    total_size = transfer.size or 0
    downloaded = transfer.downloaded or 0
    left_until_done = max(total_size - downloaded, 0)
    eta = transfer.estimated_time or 0
    is_finished = False

    if status == TorrentStatus.SEEDING:
        if downloaded_locally:
            is_finished = True
            left_until_done = 0
            eta = 0
        else:
            status = TorrentStatus.DOWNLOADING
            left_until_done = 1

    return {
        "id": transfer.id,
        "hashString": transfer.hash,
        "name": transfer.name,
        "downloadDir": download_dir,
        "totalSize": total_size,
        "leftUntilDone": left_until_done,
        "isFinished": is_finished,
        "eta": eta,
        "status": int(status),
        "secondsDownloading": seconds_downloading(transfer),
        "errorString": transfer.error_message,
        "downloadedEver": downloaded,
        "seedRatioLimit": 0.0,
        "seedRatioMode": 0,
        "seedIdleLimit": 0,
        "seedIdleMode": 0,
        "fileCount": 1,
    }
