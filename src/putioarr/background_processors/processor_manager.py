"""
Processor Manager for the putioarr download system.

This module wires the producer, orchestration workers and download workers
together through their queues and starts them.
"""
import queue
import threading
from typing import List

from putioarr.background_processors.base_processor import BaseProcessor
from putioarr.background_processors.download_worker import DownloadWorker
from putioarr.background_processors.orchestration_worker import OrchestrationWorker
from putioarr.background_processors.transfer_producer import TransferProducer
from putioarr.utils.app_state import AppState
from putioarr.utils.logger import get_logger

logger = get_logger("processor_manager")


class ProcessorManager:
    """Manages and coordinates all background processors"""

    def __init__(self, state: AppState, stop_event: threading.Event):
        """
        Initialize the processor manager.

        Args:
            state: Shared application state
            stop_event: Event that is set when putioarr shuts down
        """
        self.state = state
        self.stop_event = stop_event
        self.transfer_queue: queue.Queue = queue.Queue()
        self.download_queue: queue.Queue = queue.Queue()
        self.processors: List[BaseProcessor] = []
        self._initialize_processors()

    def _initialize_processors(self) -> None:
        config = self.state.config
        self.processors.append(TransferProducer(self.state, self.stop_event, self.transfer_queue))
        for worker_id in range(config.orchestration_workers):
            self.processors.append(OrchestrationWorker(
                worker_id, self.state, self.stop_event, self.transfer_queue, self.download_queue
            ))
        for worker_id in range(config.download_workers):
            self.processors.append(DownloadWorker(worker_id, self.state, self.stop_event, self.download_queue))
        logger.info(
            f"Download system initialized with {config.orchestration_workers} orchestration "
            f"and {config.download_workers} download workers"
        )

    def start(self) -> None:
        """Start every processor in its own thread."""
        for processor in self.processors:
            processor.start()

    def shutdown(self, timeout: float = 15) -> None:
        """
        Wait for the processor threads to finish.

        Args:
            timeout: Seconds to wait per thread
        """
        logger.info("Waiting for download system threads to finish...")
        for processor in self.processors:
            if processor.thread is None:
                continue
            processor.thread.join(timeout=timeout)
            if processor.thread.is_alive():
                logger.warning(f"Thread {processor.name} did not stop gracefully.")
        for processor in self.processors:
            for watcher in getattr(processor, "watchers", []):
                watcher.join(timeout=timeout)
                if watcher.is_alive():
                    logger.warning(f"Thread {watcher.name} did not stop gracefully.")
        logger.info("All download system threads stopped.")
