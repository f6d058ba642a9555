"""
Transfers, download targets and the messages passed between the
background processors.
"""
import os
import queue
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional

import requests

from putioarr.apps.arr import api as arr_api
from putioarr.apps.putio import api as putio_api
from putioarr.apps.putio.api import PutioTransfer
from putioarr.config import Config
from putioarr.errors import PutioarrError
from putioarr.utils.logger import get_logger

logger = get_logger("transfer")

UNKNOWN_HASH = "0000"


class TargetType(Enum):
    DIRECTORY = "directory"
    FILE = "file"


@dataclass
class DownloadTarget:
    """A single directory to create or file to fetch for a transfer"""
    to: str
    target_type: TargetType
    top_level: bool
    transfer_hash: str
    source_url: Optional[str] = None

    def __str__(self) -> str:
        return f"[{self.transfer_hash[:4]}: {self.to}]"


@dataclass
class Transfer:
    """A put.io transfer as tracked by the download system"""
    transfer_id: int
    name: str
    file_id: Optional[int] = None
    hash: Optional[str] = None
    targets: Optional[List[DownloadTarget]] = None

    @classmethod
    def from_putio(cls, putio_transfer: PutioTransfer) -> "Transfer":
        return cls(
            transfer_id=putio_transfer.id,
            name=putio_transfer.name,
            file_id=putio_transfer.file_id,
            hash=putio_transfer.hash,
        )

    @property
    def short_hash(self) -> str:
        return (self.hash or UNKNOWN_HASH)[:4]

    def __str__(self) -> str:
        return f"[{self.short_hash}: {self.name}]"

    def with_targets(self, targets: List[DownloadTarget]) -> "Transfer":
        return replace(self, targets=targets)

    def get_download_targets(self, config: Config) -> List[DownloadTarget]:
        """
        Walk the transfer's files on put.io and build the download targets.

        Args:
            config: Application config (API key, download directory, skip list)

        Returns:
            Targets in walk order, directories before their contents
        """
        logger.info(f"{self}: generating targets")
        if self.file_id is None:
            return []
        return _collect_targets(config, self.file_id, self.hash or UNKNOWN_HASH, config.download_directory, True)

    def get_top_level(self) -> Optional[DownloadTarget]:
        for target in self.targets or []:
            if target.top_level:
                return target
        return None

    def is_imported(self, config: Config) -> bool:
        """
        Ask every configured arr whether the top level target was imported.

        Returns:
            True as soon as one arr reports the import
        """
        top_level = self.get_top_level()
        if top_level is None:
            return False
        for app_type, arr in config.configured_arrs():
            try:
                imported = arr_api.check_imported(top_level.to, arr.url, arr.api_key)
            except (PutioarrError, requests.RequestException) as e:
                logger.warning(f"{self}: unable to check {app_type}: {e}")
                continue
            if imported:
                logger.debug(f"{self}: imported by {app_type}")
                return True
        return False


def _collect_targets(
    config: Config, file_id: int, transfer_hash: str, base_path: str, top_level: bool
) -> List[DownloadTarget]:
    targets: List[DownloadTarget] = []
    listing = putio_api.list_files(config.putio.api_key, file_id)
    parent = listing.parent
    to = os.path.join(base_path, parent.name)

    if parent.file_type == "FOLDER":
        if parent.name.lower() in config.skip_directories:
            logger.debug(f"[{transfer_hash[:4]}: {to}]: skipping directory")
            return targets
        targets.append(DownloadTarget(
            to=to,
            target_type=TargetType.DIRECTORY,
            top_level=top_level,
            transfer_hash=transfer_hash,
        ))
        for child in listing.files:
            targets.extend(_collect_targets(config, child.id, transfer_hash, to, False))
    elif parent.file_type == "VIDEO":
        targets.append(DownloadTarget(
            to=to,
            target_type=TargetType.FILE,
            top_level=top_level,
            transfer_hash=transfer_hash,
            source_url=putio_api.url(config.putio.api_key, parent.id),
        ))

    return targets


class TransferStage(Enum):
    QUEUED_FOR_DOWNLOAD = "queued_for_download"
    DOWNLOADED = "downloaded"
    IMPORTED = "imported"


@dataclass
class TransferMessage:
    """Sent to the orchestration workers when a transfer changes stage"""
    stage: TransferStage
    transfer: Transfer


class DownloadStatus(Enum):
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class DownloadTargetMessage:
    """Sent to the download workers; the status is put on reply_queue"""
    download_target: DownloadTarget
    reply_queue: Optional[queue.Queue] = field(default=None, repr=False)
