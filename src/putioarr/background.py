"""
putioarr - run the proxy

Checks the put.io and arr credentials, makes sure the putioarr folder exists
on put.io, starts the download system and serves the Transmission RPC.
"""
import signal
import threading

from putioarr import __version__
from putioarr.apps.arr import api as arr_api
from putioarr.apps.putio import api as putio_api
from putioarr.background_processors.processor_manager import ProcessorManager
from putioarr.config import Config
from putioarr.errors import PutioError
from putioarr.utils.app_state import AppState
from putioarr.utils.logger import get_logger
from putioarr.web_server import create_app, create_server

logger = get_logger("main")

ROOT_FOLDER_NAME = "putioarr"
GIGABYTE = 1_073_741_824

stop_event = threading.Event()


def log_account_info(config: Config) -> None:
    """Log who we're logged in as and how much space is left on put.io."""
    info = putio_api.account_info(config.putio.api_key)
    logger.info(f"Logged in as user: {info.get('username')} (ID: {info.get('user_id')}) with email: {info.get('mail')}")
    disk = info.get("disk") or {}
    avail = disk.get("avail", 0)
    size = disk.get("size", 0)
    percentage = avail / size * 100 if size else 0.0
    logger.info(
        f"Available space: {avail / GIGABYTE:.2f} GB out of {size / GIGABYTE:.2f} GB ({percentage:.2f}%)"
    )


def verify_arrs(config: Config) -> None:
    """Check the API key of every configured arr. Raises ArrError on the first bad one."""
    for app_type, arr in config.configured_arrs():
        arr_api.verify_auth(app_type, arr.url, arr.api_key)
        logger.info(f"Connected to {app_type} at {arr.url}")


def ensure_root_folder(config: Config) -> int:
    """
    Create the putioarr folder on put.io if it doesn't exist.

    Returns:
        Id of the putioarr folder
    """
    api_key = config.putio.api_key
    try:
        folder_id = putio_api.create_folder(api_key, ROOT_FOLDER_NAME, 0)
        logger.info(f"Created {ROOT_FOLDER_NAME} folder on put.io")
    except PutioError as e:
        if e.status_code != 400:
            logger.error(f"Failed to create {ROOT_FOLDER_NAME} folder: {e}")
            raise
        logger.info(f"{ROOT_FOLDER_NAME} folder already exists on put.io")
        listing = putio_api.list_files(api_key, 0)
        matches = [f for f in listing.files if f.name == ROOT_FOLDER_NAME]
        if not matches:
            raise PutioError(f"Unable to find the {ROOT_FOLDER_NAME} folder on put.io") from e
        folder_id = matches[0].id

    logger.info(f"{ROOT_FOLDER_NAME} folder ID: {folder_id}")
    return folder_id


def start_putioarr(config: Config) -> None:
    """Main entry point for `putioarr run`."""
    logger.info(f"Starting putioarr, version {__version__}")

    log_account_info(config)
    verify_arrs(config)

    state = AppState(config, root_folder_id=ensure_root_folder(config))

    processor_manager = ProcessorManager(state, stop_event)
    processor_manager.start()

    app = create_app(state)
    server = create_server(app, config.bind_address, config.port)

    def shutdown_handler(signum, frame):
        """Handle termination signals (SIGINT, SIGTERM)."""
        logger.info(f"Received signal {signum}, initiating shutdown...")
        stop_event.set()
        # shutdown() blocks until serve_forever returns, which runs on this thread
        threading.Thread(target=server.shutdown, daemon=True).start()

    signal.signal(signal.SIGINT, shutdown_handler)
    signal.signal(signal.SIGTERM, shutdown_handler)

    logger.info(f"Starting web server at http://{config.bind_address}:{config.port}")
    try:
        server.serve_forever()
    finally:
        logger.info("Web server stopped. Shutting down download system...")
        if not stop_event.is_set():
            stop_event.set()
        processor_manager.shutdown()
