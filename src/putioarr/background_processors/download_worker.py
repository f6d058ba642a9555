"""
Download workers fetch single download targets to local disk.
"""
import os
import queue
import threading

import requests

from putioarr.background_processors.base_processor import BaseProcessor
from putioarr.background_processors.transfer import (
    DownloadStatus,
    DownloadTarget,
    DownloadTargetMessage,
    TargetType,
)
from putioarr.utils.app_state import AppState

QUEUE_POLL_TIMEOUT = 1
CHUNK_SIZE = 1024 * 1024
DOWNLOAD_TIMEOUT = 60
PARTIAL_SUFFIX = ".downloading"


class DownloadWorker(BaseProcessor):
    """Takes download targets off the download queue and fetches them"""

    def __init__(self, worker_id: int, state: AppState, stop_event: threading.Event, download_queue: queue.Queue):
        super().__init__(f"download-{worker_id}", "DOWNLOAD", state, stop_event)
        self.download_queue = download_queue

    def _process_implementation(self) -> None:
        while not self.stop_event.is_set():
            try:
                message: DownloadTargetMessage = self.download_queue.get(timeout=QUEUE_POLL_TIMEOUT)
            except queue.Empty:
                continue
            status = DownloadStatus.FAILED
            try:
                status = self.download_target(message.download_target)
            except Exception as e:
                self.logger.exception(f"[{self.prefix}] {message.download_target}: unexpected error: {e}")
            finally:
                # The orchestration worker blocks until every target reports back
                if message.reply_queue is not None:
                    message.reply_queue.put(status)
                self.download_queue.task_done()

    def download_target(self, target: DownloadTarget) -> DownloadStatus:
        """
        Create a directory target or fetch a file target.

        Args:
            target: What to download and where

        Returns:
            DownloadStatus.SUCCESS or DownloadStatus.FAILED
        """
        try:
            if target.target_type == TargetType.DIRECTORY:
                if not os.path.isdir(target.to):
                    os.makedirs(target.to, exist_ok=True)
                    self.log_info(f"{target}: directory created")
                self.set_owner(target.to)
            elif os.path.exists(target.to):
                self.log_info(f"{target}: already downloaded")
            else:
                self.fetch(target)
                self.set_owner(target.to)
                self.log_info(f"{target}: download done")
        except (OSError, requests.RequestException) as e:
            self.log_error(f"{target}: download failed: {e}")
            return DownloadStatus.FAILED
        return DownloadStatus.SUCCESS

    def fetch(self, target: DownloadTarget) -> None:
        """Stream the file into <to>.downloading and move it into place when complete."""
        if not target.source_url:
            raise OSError(f"no download url for {target.to}")

        parent = os.path.dirname(target.to)
        if parent:
            os.makedirs(parent, exist_ok=True)

        partial_path = f"{target.to}{PARTIAL_SUFFIX}"
        self.log_info(f"{target}: download started")
        with requests.get(target.source_url, stream=True, timeout=DOWNLOAD_TIMEOUT) as response:
            response.raise_for_status()
            with open(partial_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if self.stop_event.is_set():
                        raise OSError("download interrupted by shutdown")
                    if chunk:
                        f.write(chunk)
        os.replace(partial_path, target.to)

    def set_owner(self, path: str) -> None:
        """Change the owner to the configured uid. Only possible when running as root."""
        if not hasattr(os, "geteuid") or os.geteuid() != 0:
            return
        os.chown(path, self.config.uid, -1)
