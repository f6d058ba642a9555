"""
putioarr - put.io download client for Sonarr, Radarr and Whisparr.

Impersonates a Transmission daemon so the arr applications can hand torrents
to put.io, then downloads finished transfers to a local directory for import.
"""

__version__ = "0.6.0"
__app_name__ = "putioarr"
