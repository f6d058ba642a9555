"""
Shared runtime state for the HTTP layer and the download system.
"""
import threading
from typing import Set

from putioarr.config import Config


class AppState:
    """Config plus the mutable state shared between threads.

    root_folder_id is the put.io folder all transfers are saved in. The
    downloaded set holds the transfer ids whose files are on local disk (or
    have already been imported), which decides whether torrent-get reports a
    transfer as finished.
    """

    def __init__(self, config: Config, root_folder_id: int = 0):
        self.config = config
        self._lock = threading.Lock()
        self._root_folder_id = root_folder_id
        self._downloaded: Set[int] = set()

    @property
    def root_folder_id(self) -> int:
        with self._lock:
            return self._root_folder_id

    @root_folder_id.setter
    def root_folder_id(self, folder_id: int) -> None:
        with self._lock:
            self._root_folder_id = folder_id

    def mark_downloaded(self, transfer_id: int) -> None:
        with self._lock:
            self._downloaded.add(transfer_id)

    def is_downloaded(self, transfer_id: int) -> bool:
        with self._lock:
            return transfer_id in self._downloaded

    def forget(self, transfer_id: int) -> None:
        """Drop a transfer once it is gone from put.io."""
        with self._lock:
            self._downloaded.discard(transfer_id)
