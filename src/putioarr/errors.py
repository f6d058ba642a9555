"""Exception types raised by putioarr."""
from typing import Optional


class PutioarrError(Exception):
    """Base class for all putioarr errors"""


class ConfigError(PutioarrError):
    """Raised when the configuration file is missing or invalid"""


class PutioError(PutioarrError):
    """Raised when the put.io API answers with a non-success status"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ArrError(PutioarrError):
    """Raised when a Sonarr/Radarr/Whisparr API call fails"""
