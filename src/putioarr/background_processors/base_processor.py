"""
Base processor for the putioarr background threads.

This module provides a base class that the producer and the workers
inherit from to share logging and stop handling.
"""
import threading
from typing import Optional

from putioarr.utils.app_state import AppState
from putioarr.utils.logger import get_logger


class BaseProcessor:
    """Base class for all background processors"""

    def __init__(self, name: str, prefix: str, state: AppState, stop_event: threading.Event):
        """
        Initialize the processor.

        Args:
            name: Thread name, e.g. 'download-2'
            prefix: Log prefix, e.g. 'DOWNLOAD'
            state: Shared application state
            stop_event: Event that is set when putioarr shuts down
        """
        self.name = name
        self.prefix = prefix
        self.state = state
        self.config = state.config
        self.stop_event = stop_event
        self.logger = get_logger(prefix.lower())
        self.thread: Optional[threading.Thread] = None

    def start(self) -> threading.Thread:
        """Run process() in a daemon thread."""
        self.thread = threading.Thread(target=self.process, name=self.name, daemon=True)
        self.thread.start()
        return self.thread

    def process(self) -> None:
        """
        Run the processor until the stop event is set.
        """
        self.log_debug(f"{self.name} started")
        try:
            self._process_implementation()
        except Exception as e:
            self.logger.exception(f"[{self.prefix}] Fatal error in {self.name}: {e}")
        self.log_debug(f"{self.name} stopped")

    def _process_implementation(self) -> None:
        """
        Implementation of the process method to be overridden by subclasses.
        """
        raise NotImplementedError("Subclasses must implement this method")

    def wait(self, seconds: float) -> bool:
        """Sleep for the given time. Returns True if putioarr is stopping."""
        return self.stop_event.wait(seconds)

    def log_info(self, message: str) -> None:
        self.logger.info(f"[{self.prefix}] {message}")

    def log_error(self, message: str) -> None:
        self.logger.error(f"[{self.prefix}] {message}")

    def log_warning(self, message: str) -> None:
        self.logger.warning(f"[{self.prefix}] {message}")

    def log_debug(self, message: str) -> None:
        self.logger.debug(f"[{self.prefix}] {message}")
