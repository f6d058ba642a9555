"""
put.io OAuth token via the out-of-band (OOB) link flow.
"""
import time

import requests

from putioarr.apps.putio import api as putio_api
from putioarr.errors import PutioError

LINK_URL = "https://put.io/link"
CHECK_INTERVAL = 3


def get_token(check_interval: float = CHECK_INTERVAL) -> str:
    """
    Ask the user to link a new OOB code and wait for the token.

    Args:
        check_interval: Seconds between checks

    Returns:
        The put.io API token
    """
    print()
    oob_code = putio_api.get_oob()
    print(f"Go to {LINK_URL} and enter the code: {oob_code}")
    print("Waiting for token...")

    # Check every few seconds if the code was linked to the user's account
    while True:
        time.sleep(check_interval)
        try:
            token = putio_api.check_oob(oob_code)
        except (PutioError, requests.RequestException):
            continue
        if token:
            print(f"Put.io API token: {token}")
            return token
