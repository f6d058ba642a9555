"""
Producer that watches put.io for transfers that are ready to download.
"""
import queue
import threading
import time
from typing import List

import requests

from putioarr.apps.putio import api as putio_api
from putioarr.apps.putio.api import PutioTransfer
from putioarr.background_processors.base_processor import BaseProcessor
from putioarr.background_processors.transfer import Transfer, TransferMessage, TransferStage
from putioarr.errors import PutioarrError
from putioarr.utils.app_state import AppState

STATUS_LOG_INTERVAL = 60


class TransferProducer(BaseProcessor):
    """Polls put.io and queues new downloadable transfers"""

    def __init__(self, state: AppState, stop_event: threading.Event, transfer_queue: queue.Queue):
        """
        Initialize the producer.

        Args:
            state: Shared application state
            stop_event: Event that is set when putioarr shuts down
            transfer_queue: Queue read by the orchestration workers
        """
        super().__init__("producer", "PRODUCER", state, stop_event)
        self.transfer_queue = transfer_queue
        self.seen: List[int] = []

    def _process_implementation(self) -> None:
        self.check_unfinished_transfers()
        self.log_info("Done checking for unfinished transfers. Starting to monitor transfers.")

        last_status_log = time.time()
        while not self.stop_event.is_set():
            try:
                transfers = putio_api.list_transfers(self.config.putio.api_key)
            except (PutioarrError, requests.RequestException) as e:
                self.log_warning(f"List put.io transfers failed: {e}. Retrying..")
                self.wait(self.config.polling_interval)
                continue

            self.queue_new_transfers(transfers)

            if time.time() - last_status_log >= STATUS_LOG_INTERVAL:
                self.log_status(transfers)
                last_status_log = time.time()

            self.wait(self.config.polling_interval)

    def _in_folder(self, transfers: List[PutioTransfer]) -> List[PutioTransfer]:
        folder_id = self.state.root_folder_id
        return [t for t in transfers if t.save_parent_id == folder_id]

    def check_unfinished_transfers(self) -> None:
        """
        Find transfers that have already been imported before a restart.

        Looking at the filesystem can't tell an imported and removed transfer
        from one that hasn't been downloaded yet, so ask the arrs. Imported
        transfers go straight to seeding; everything else is picked up by the
        regular polling, where files that were already downloaded are skipped.
        """
        self.log_info("Checking unfinished transfers")
        try:
            transfers = putio_api.list_transfers(self.config.putio.api_key)
        except (PutioarrError, requests.RequestException) as e:
            self.log_error(f"Unable to check unfinished transfers: {e}")
            return

        for putio_transfer in self._in_folder(transfers):
            if not putio_transfer.is_downloadable():
                continue
            transfer = Transfer.from_putio(putio_transfer)
            try:
                transfer = transfer.with_targets(transfer.get_download_targets(self.config))
                imported = transfer.is_imported(self.config)
            except (PutioarrError, requests.RequestException) as e:
                self.log_warning(f"{transfer}: unable to check import status: {e}")
                continue

            if imported:
                self.log_info(f"{transfer}: already imported")
                self.state.mark_downloaded(transfer.transfer_id)
                self.seen.append(transfer.transfer_id)
                self.transfer_queue.put(TransferMessage(TransferStage.IMPORTED, transfer))

    def queue_new_transfers(self, transfers: List[PutioTransfer]) -> None:
        """
        Queue every downloadable transfer that hasn't been seen yet.

        Args:
            transfers: Current put.io transfer list
        """
        for putio_transfer in self._in_folder(transfers):
            if putio_transfer.id in self.seen or not putio_transfer.is_downloadable():
                continue
            transfer = Transfer.from_putio(putio_transfer)
            self.log_info(f"{transfer}: ready for download")
            self.transfer_queue.put(TransferMessage(TransferStage.QUEUED_FOR_DOWNLOAD, transfer))
            self.seen.append(putio_transfer.id)

        # Forget transfers that are no longer on put.io
        active_ids = {t.id for t in transfers}
        self.seen = [transfer_id for transfer_id in self.seen if transfer_id in active_ids]

    def log_status(self, transfers: List[PutioTransfer]) -> None:
        self.log_info(f"Active transfers: {len(transfers)}")
        for putio_transfer in transfers:
            self.log_info(f"  {Transfer.from_putio(putio_transfer)}")
