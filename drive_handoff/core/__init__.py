"""
Core module containing the upload domain, its interfaces and services.

This module is independent of the web framework and of the storage
provider's HTTP API.
"""

from .domain.models import (
    Destination, FileHandle, FolderDescriptor, SessionGrant, SessionRequest,
    UploadState, UploadTask
)
from .errors import UploadError
from .services.batch_coordinator import BatchCoordinator
from .services.session_broker import SessionBroker

__all__ = [
    "Destination",
    "FileHandle",
    "FolderDescriptor",
    "SessionGrant",
    "SessionRequest",
    "UploadState",
    "UploadTask",
    "UploadError",
    "BatchCoordinator",
    "SessionBroker",
]
