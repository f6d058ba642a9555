"""
API clients for the services putioarr talks to.

putio wraps the put.io REST API, arr wraps the history API shared by
Sonarr, Radarr and Whisparr.
"""
