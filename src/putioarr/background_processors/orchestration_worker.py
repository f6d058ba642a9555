"""
Orchestration workers.

Each worker takes transfer messages off the transfer queue and moves the
transfer through its lifecycle: download its targets, wait for an arr to
import them, then wait until put.io stops seeding and clean up.
"""
import os
import queue
import shutil
import threading
from typing import List

import requests

from putioarr.apps.putio import api as putio_api
from putioarr.background_processors.base_processor import BaseProcessor
from putioarr.background_processors.transfer import (
    DownloadStatus,
    DownloadTargetMessage,
    Transfer,
    TransferMessage,
    TransferStage,
)
from putioarr.errors import PutioarrError, PutioError
from putioarr.utils.app_state import AppState

QUEUE_POLL_TIMEOUT = 1


class OrchestrationWorker(BaseProcessor):
    """Handles transfer messages for the download system"""

    def __init__(
        self,
        worker_id: int,
        state: AppState,
        stop_event: threading.Event,
        transfer_queue: queue.Queue,
        download_queue: queue.Queue,
    ):
        """
        Initialize the worker.

        Args:
            worker_id: Index of this worker
            state: Shared application state
            stop_event: Event that is set when putioarr shuts down
            transfer_queue: Queue of TransferMessage, also used to report progress
            download_queue: Queue of DownloadTargetMessage read by the download workers
        """
        super().__init__(f"orchestration-{worker_id}", "ORCHESTRATION", state, stop_event)
        self.transfer_queue = transfer_queue
        self.download_queue = download_queue
        self.watchers: List[threading.Thread] = []

    def _process_implementation(self) -> None:
        while not self.stop_event.is_set():
            try:
                message = self.transfer_queue.get(timeout=QUEUE_POLL_TIMEOUT)
            except queue.Empty:
                continue
            try:
                self.handle(message)
            except Exception as e:
                self.logger.exception(f"[{self.prefix}] {message.transfer}: error handling {message.stage.value}: {e}")
            finally:
                self.transfer_queue.task_done()

    def handle(self, message: TransferMessage) -> None:
        transfer = message.transfer
        if message.stage == TransferStage.QUEUED_FOR_DOWNLOAD:
            self.download(transfer)
        elif message.stage == TransferStage.DOWNLOADED:
            self._start_watcher(self.watch_for_import, transfer, "import")
        elif message.stage == TransferStage.IMPORTED:
            self._start_watcher(self.watch_seeding, transfer, "seeding")

    def _start_watcher(self, target, transfer: Transfer, kind: str) -> None:
        thread = threading.Thread(
            target=target,
            args=(transfer,),
            name=f"{kind}-{transfer.transfer_id}",
            daemon=True,
        )
        thread.start()
        self.watchers = [t for t in self.watchers if t.is_alive()]
        self.watchers.append(thread)

    def download(self, transfer: Transfer) -> bool:
        """
        Download all targets of a transfer and wait for the download workers.

        Args:
            transfer: Transfer queued for download

        Returns:
            True when every target was downloaded
        """
        self.log_info(f"{transfer}: download started")
        targets = transfer.get_download_targets(self.config)
        if not targets:
            self.log_warning(f"{transfer}: nothing to download")
            return False

        # One reply queue per target so the download workers can report back
        reply_queues = []
        for target in targets:
            reply_queue: queue.Queue = queue.Queue(maxsize=1)
            reply_queues.append(reply_queue)
            self.download_queue.put(DownloadTargetMessage(download_target=target, reply_queue=reply_queue))

        statuses = []
        for reply_queue in reply_queues:
            while not self.stop_event.is_set():
                try:
                    statuses.append(reply_queue.get(timeout=QUEUE_POLL_TIMEOUT))
                    break
                except queue.Empty:
                    continue
        if self.stop_event.is_set():
            return False

        if all(status == DownloadStatus.SUCCESS for status in statuses):
            self.log_info(f"{transfer}: download done")
            self.state.mark_downloaded(transfer.transfer_id)
            self.transfer_queue.put(TransferMessage(TransferStage.DOWNLOADED, transfer.with_targets(targets)))
            return True

        self.log_warning(f"{transfer}: not all targets downloaded")
        return False

    def watch_for_import(self, transfer: Transfer) -> None:
        """
        Wait until an arr has imported the transfer, then delete the local copy.
        """
        self.log_info(f"{transfer}: watching imports")
        while not self.stop_event.is_set():
            try:
                imported = transfer.is_imported(self.config)
            except (PutioarrError, requests.RequestException) as e:
                self.log_warning(f"{transfer}: unable to check import status: {e}")
                imported = False

            if imported:
                self.log_info(f"{transfer}: imported")
                self.remove_local(transfer)
                self.transfer_queue.put(TransferMessage(TransferStage.IMPORTED, transfer))
                return
            self.wait(self.config.polling_interval)

    def remove_local(self, transfer: Transfer) -> None:
        top_level = transfer.get_top_level()
        if top_level is None:
            return
        try:
            if os.path.isdir(top_level.to):
                shutil.rmtree(top_level.to)
                self.log_info(f"{top_level}: deleted")
            elif os.path.isfile(top_level.to):
                os.remove(top_level.to)
                self.log_info(f"{top_level}: deleted")
            else:
                self.log_warning(f"{top_level}: not found on disk, nothing to delete")
        except OSError as e:
            self.log_error(f"{top_level}: unable to delete: {e}")

    def watch_seeding(self, transfer: Transfer) -> None:
        """
        Wait until put.io stops seeding, then remove the transfer and its files.
        """
        api_key = self.config.putio.api_key
        self.log_info(f"{transfer}: watching seeding")
        while not self.stop_event.is_set():
            try:
                putio_transfer = putio_api.get_transfer(api_key, transfer.transfer_id)
            except PutioError as e:
                if e.status_code == 404:
                    # Removed through torrent-remove in the meantime
                    self.log_info(f"{transfer}: no longer on put.io")
                    self.state.forget(transfer.transfer_id)
                    return
                self.log_warning(f"{transfer}: unable to get seeding status: {e}")
                self.wait(self.config.polling_interval)
                continue
            except requests.RequestException as e:
                self.log_warning(f"{transfer}: unable to get seeding status: {e}")
                self.wait(self.config.polling_interval)
                continue

            if putio_transfer.status != putio_api.STATUS_SEEDING:
                self.log_info(f"{transfer}: stopped seeding")
                try:
                    self.cleanup_remote(transfer)
                except (PutioarrError, requests.RequestException) as e:
                    self.log_error(f"{transfer}: unable to remove transfer from put.io: {e}")
                    self.wait(self.config.polling_interval)
                    continue
                self.log_info(f"{transfer}: done seeding")
                return
            self.wait(self.config.polling_interval)

    def cleanup_remote(self, transfer: Transfer) -> None:
        api_key = self.config.putio.api_key
        putio_api.remove_transfer(api_key, transfer.transfer_id)
        self.log_info(f"{transfer}: removed from put.io")
        if transfer.file_id is not None:
            try:
                putio_api.delete_file(api_key, transfer.file_id)
                self.log_info(f"{transfer}: deleted remote files")
            except (PutioarrError, requests.RequestException) as e:
                self.log_warning(f"{transfer}: unable to delete remote files: {e}")
        self.state.forget(transfer.transfer_id)
