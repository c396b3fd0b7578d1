"""
Storage provider clients.
"""

from .credentials import (
    RefreshTokenCredentials, ServiceAccountCredentials, TokenSource, create_token_source
)
from .google_drive import GoogleDriveProvider

__all__ = [
    "RefreshTokenCredentials",
    "ServiceAccountCredentials",
    "TokenSource",
    "create_token_source",
    "GoogleDriveProvider",
]
