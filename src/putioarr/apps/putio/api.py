"""
put.io API client.

Thin wrappers around the put.io v2 REST API. Every call takes the OAuth token
explicitly and raises PutioError when put.io answers with a non-success status.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from putioarr.errors import PutioError
from putioarr.utils.logger import get_logger

logger = get_logger("putio")

API_URL = "https://api.put.io/v2"
UPLOAD_URL = "https://upload.put.io/v2/files/upload"
APP_ID = 6487
API_TIMEOUT = 10

# put.io transfer statuses
STATUS_IN_QUEUE = "IN_QUEUE"
STATUS_WAITING = "WAITING"
STATUS_PREPARING_DOWNLOAD = "PREPARING_DOWNLOAD"
STATUS_DOWNLOADING = "DOWNLOADING"
STATUS_COMPLETING = "COMPLETING"
STATUS_SEEDING = "SEEDING"
STATUS_COMPLETED = "COMPLETED"
STATUS_ERROR = "ERROR"


@dataclass
class PutioTransfer:
    """The subset of a put.io transfer that putioarr uses"""
    id: int
    name: str
    status: str
    hash: Optional[str] = None
    file_id: Optional[int] = None
    save_parent_id: Optional[int] = None
    size: Optional[int] = None
    downloaded: Optional[int] = None
    estimated_time: Optional[int] = None
    error_message: Optional[str] = None
    started_at: Optional[str] = None
    finished_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PutioTransfer":
        return cls(
            id=data["id"],
            name=data.get("name") or "",
            status=data.get("status") or STATUS_IN_QUEUE,
            hash=data.get("hash"),
            file_id=data.get("file_id"),
            save_parent_id=data.get("save_parent_id"),
            size=data.get("size"),
            downloaded=data.get("downloaded"),
            estimated_time=data.get("estimated_time"),
            error_message=data.get("error_message"),
            started_at=data.get("started_at"),
            finished_at=data.get("finished_at"),
        )

    def is_downloadable(self) -> bool:
        """A transfer can be downloaded once put.io has created its file."""
        return self.file_id is not None


@dataclass
class PutioFile:
    id: int
    name: str
    file_type: str
    content_type: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PutioFile":
        return cls(
            id=data["id"],
            name=data.get("name") or "",
            file_type=data.get("file_type") or "",
            content_type=data.get("content_type"),
        )


@dataclass
class FileListing:
    parent: PutioFile
    files: List[PutioFile]


def _headers(api_token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {api_token}"}


def _check(response: requests.Response, message: str) -> None:
    if not response.ok:
        raise PutioError(f"{message}: {response.status_code} {response.reason}", response.status_code)


def account_info(api_token: str) -> Dict[str, Any]:
    """
    Get the account info of the token's owner.

    Args:
        api_token: put.io OAuth token

    Returns:
        The "info" object of the response (username, user_id, mail, disk, ...)
    """
    response = requests.get(f"{API_URL}/account/info", headers=_headers(api_token), timeout=API_TIMEOUT)
    _check(response, "Error getting put.io account info")
    return response.json()["info"]


def list_transfers(api_token: str) -> List[PutioTransfer]:
    """Returns the user's transfers."""
    response = requests.get(f"{API_URL}/transfers/list", headers=_headers(api_token), timeout=API_TIMEOUT)
    _check(response, "Error getting put.io transfers")
    return [PutioTransfer.from_dict(t) for t in response.json().get("transfers", [])]


def get_transfer(api_token: str, transfer_id: int) -> PutioTransfer:
    response = requests.get(
        f"{API_URL}/transfers/{transfer_id}", headers=_headers(api_token), timeout=API_TIMEOUT
    )
    _check(response, f"Error getting put.io transfer id:{transfer_id}")
    return PutioTransfer.from_dict(response.json()["transfer"])


def remove_transfer(api_token: str, transfer_id: int) -> None:
    response = requests.post(
        f"{API_URL}/transfers/remove",
        headers=_headers(api_token),
        data={"transfer_ids": str(transfer_id)},
        timeout=API_TIMEOUT,
    )
    _check(response, f"Error removing put.io transfer id:{transfer_id}")


def delete_file(api_token: str, file_id: int) -> None:
    response = requests.post(
        f"{API_URL}/files/delete",
        headers=_headers(api_token),
        data={"file_ids": str(file_id)},
        timeout=API_TIMEOUT,
    )
    _check(response, f"Error removing put.io file/directory id:{file_id}")


def add_transfer(api_token: str, url: str, parent_id: int) -> Dict[str, Any]:
    """
    Start a transfer for a magnet link or torrent URL.

    Args:
        api_token: put.io OAuth token
        url: Magnet link or URL of a .torrent file
        parent_id: Folder the transfer is saved in

    Returns:
        The created transfer as returned by put.io
    """
    response = requests.post(
        f"{API_URL}/transfers/add",
        headers=_headers(api_token),
        data={"url": url, "save_parent_id": str(parent_id)},
        timeout=API_TIMEOUT,
    )
    _check(response, f"Error adding url: {url} to put.io")
    return response.json().get("transfer", {})


def upload_file(api_token: str, content: bytes, parent_id: int) -> None:
    """
    Upload a .torrent file. put.io turns uploaded torrents into transfers.

    Args:
        api_token: put.io OAuth token
        content: Raw .torrent file contents
        parent_id: Folder the transfer is saved in
    """
    response = requests.post(
        UPLOAD_URL,
        headers=_headers(api_token),
        files={"file": ("foo.torrent", content, "application/x-bittorrent")},
        data={"filename": "foo.torrent", "parent_id": str(parent_id)},
        timeout=API_TIMEOUT,
    )
    _check(response, "Error uploading file to put.io")


def create_folder(api_token: str, name: str, parent_id: int) -> int:
    """
    Create a folder.

    Returns:
        The id of the new folder

    Raises:
        PutioError: With status_code 400 when the folder already exists
    """
    response = requests.post(
        f"{API_URL}/files/create-folder",
        headers=_headers(api_token),
        data={"name": name, "parent_id": str(parent_id)},
        timeout=API_TIMEOUT,
    )
    _check(response, f"Error creating put.io folder {name}")
    return response.json()["file"]["id"]


def list_files(api_token: str, file_id: int) -> FileListing:
    """
    List a file or folder and its direct children.

    Args:
        api_token: put.io OAuth token
        file_id: Id of the folder (or file) to list, 0 for the root

    Returns:
        FileListing with the listed item as parent and its children as files
    """
    response = requests.get(
        f"{API_URL}/files/list",
        headers=_headers(api_token),
        params={"parent_id": file_id},
        timeout=API_TIMEOUT,
    )
    _check(response, f"Error listing put.io file/directory id:{file_id}")
    data = response.json()
    return FileListing(
        parent=PutioFile.from_dict(data["parent"]),
        files=[PutioFile.from_dict(f) for f in data.get("files", [])],
    )


def url(api_token: str, file_id: int) -> str:
    """Get the download URL of a file."""
    response = requests.get(
        f"{API_URL}/files/{file_id}/url", headers=_headers(api_token), timeout=API_TIMEOUT
    )
    _check(response, f"Error getting url for put.io file id:{file_id}")
    return response.json()["url"]


def get_oob() -> str:
    """Returns a new OOB code."""
    response = requests.get(f"{API_URL}/oauth2/oob/code", params={"app_id": APP_ID}, timeout=API_TIMEOUT)
    _check(response, "Error getting put.io OOB")
    return response.json()["code"]


def check_oob(oob_code: str) -> Optional[str]:
    """
    Check whether an OOB code has been linked to an account.

    Args:
        oob_code: Code returned by get_oob

    Returns:
        The OAuth token once linked, None while still waiting
    """
    response = requests.get(f"{API_URL}/oauth2/oob/code/{oob_code}", timeout=API_TIMEOUT)
    _check(response, f"Error checking put.io OOB {oob_code}")
    return response.json().get("oauth_token")
