"""
Sonarr/Radarr/Whisparr API helpers.

All three applications share the v3 history API, which is what putioarr uses
to find out whether a download has been imported.
"""
from typing import Any, Dict

import requests

from putioarr.errors import ArrError
from putioarr.utils.logger import get_logger

logger = get_logger("arr")

API_TIMEOUT = 30
HISTORY_PAGE_SIZE = 1000
IMPORTED_EVENT = "downloadFolderImported"


def verify_auth(app_type: str, api_url: str, api_key: str) -> None:
    """
    Check that the API key is valid for the given application.

    Args:
        app_type: Name used in error messages (sonarr, radarr, whisparr)
        api_url: Base URL of the application
        api_key: API key of the application

    Raises:
        ArrError: When the application rejects the key
    """
    url = f"{api_url.rstrip('/')}/api"
    response = requests.get(url, headers={"X-Api-Key": api_key}, timeout=API_TIMEOUT)
    if response.status_code != 200:
        raise ArrError(f"Invalid API key for {app_type}")


def get_history_page(api_url: str, api_key: str, page: int) -> Dict[str, Any]:
    url = f"{api_url.rstrip('/')}/api/v3/history"
    params = {
        "includeSeries": "false",
        "includeEpisode": "false",
        "page": page,
        "pageSize": HISTORY_PAGE_SIZE,
    }
    response = requests.get(url, headers={"X-Api-Key": api_key}, params=params, timeout=API_TIMEOUT)
    if not response.ok:
        raise ArrError(f"url: {url}, status: {response.status_code}")
    return response.json()


def check_imported(target: str, api_url: str, api_key: str) -> bool:
    """
    Checks if a path has been imported by looking through the import history.

    Args:
        target: Local path of the download, as the arr saw it
        api_url: Base URL of the application
        api_key: API key of the application

    Returns:
        True if a downloadFolderImported record with that droppedPath exists
    """
    inspected = 0
    page = 1
    while True:
        history = get_history_page(api_url, api_key, page)
        records = history.get("records") or []

        for record in records:
            data = record.get("data") or {}
            if record.get("eventType") == IMPORTED_EVENT and data.get("droppedPath") == target:
                return True
        inspected += len(records)

        if records and inspected < history.get("totalRecords", 0):
            page += 1
        else:
            return False
