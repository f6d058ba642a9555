"""
Background processors for putioarr.

This package contains the download system: a producer that polls put.io for
transfers, orchestration workers that move each transfer through
download -> import -> seeding, and download workers that fetch files.
"""
