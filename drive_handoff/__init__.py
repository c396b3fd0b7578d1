"""
Drive Handoff - direct-to-Drive resumable uploads.

A session broker hands out single-use resumable upload URLs so clients can
send file bytes straight to Google Drive without proxying them.
"""

__version__ = "0.1.0"
