"""
Handlers for the Transmission RPC methods that hit put.io.
"""
import base64
import binascii
from typing import Any, Dict, List

from putioarr import transmission
from putioarr.apps.putio import api as putio_api
from putioarr.utils.app_state import AppState
from putioarr.utils.logger import get_logger

logger = get_logger("rpc")


def _transfers_in_folder(state: AppState) -> List[putio_api.PutioTransfer]:
    folder_id = state.root_folder_id
    transfers = putio_api.list_transfers(state.config.putio.api_key)
    return [t for t in transfers if t.save_parent_id == folder_id]


def handle_torrent_get(state: AppState) -> Dict[str, Any]:
    """
    List the transfers in the putioarr folder as Transmission torrents.

    Args:
        state: Shared application state

    Returns:
        torrent-get arguments: {"torrents": [...]}
    """
    download_dir = state.config.download_directory
    torrents = [
        transmission.to_torrent(t, download_dir, state.is_downloaded(t.id))
        for t in _transfers_in_folder(state)
    ]
    return {"torrents": torrents}


def handle_torrent_add(state: AppState, arguments: Dict[str, Any]) -> None:
    """
    Add a torrent to put.io, saved in the putioarr folder.

    Args:
        state: Shared application state
        arguments: torrent-add arguments, with either "metainfo" (base64
            encoded .torrent file) or "filename" (magnet link or URL)

    Raises:
        ValueError: When neither argument is usable
    """
    api_key = state.config.putio.api_key
    folder_id = state.root_folder_id

    metainfo = arguments.get("metainfo")
    filename = arguments.get("filename")
    if metainfo:
        try:
            content = base64.b64decode(metainfo, validate=False)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"Invalid metainfo: {e}") from e
        putio_api.upload_file(api_key, content, folder_id)
        logger.info("torrent uploaded to put.io")
    elif filename:
        putio_api.add_transfer(api_key, filename, folder_id)
        logger.info(f"magnet link added to put.io: {filename[:60]}")
    else:
        raise ValueError("torrent-add requires either metainfo or filename")


def handle_torrent_remove(state: AppState, arguments: Dict[str, Any]) -> None:
    """
    Remove the transfers whose hashes are listed in "ids".

    Args:
        state: Shared application state
        arguments: torrent-remove arguments ("ids" and "delete-local-data")
    """
    api_key = state.config.putio.api_key
    hashes = {str(i).lower() for i in arguments.get("ids") or []}
    delete_local_data = bool(arguments.get("delete-local-data", False))

    for transfer in putio_api.list_transfers(api_key):
        if not transfer.hash or transfer.hash.lower() not in hashes:
            continue
        putio_api.remove_transfer(api_key, transfer.id)
        logger.info(f"[{transfer.hash[:4]}: {transfer.name}]: removed transfer from put.io")
        if delete_local_data and transfer.file_id is not None:
            putio_api.delete_file(api_key, transfer.file_id)
            logger.info(f"[{transfer.hash[:4]}: {transfer.name}]: deleted remote files")
        state.forget(transfer.id)
