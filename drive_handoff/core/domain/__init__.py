"""
Domain models for upload tasks, session requests and grants.
"""

from .models import (
    DEFAULT_CONTENT_TYPE,
    FOLDER_MIME_TYPE,
    Destination,
    DestinationKind,
    FileHandle,
    FileMetadata,
    FolderDescriptor,
    SessionGrant,
    SessionRequest,
    TransferResult,
    UploadState,
    UploadTask,
    format_bytes,
)

__all__ = [
    "DEFAULT_CONTENT_TYPE",
    "FOLDER_MIME_TYPE",
    "Destination",
    "DestinationKind",
    "FileHandle",
    "FileMetadata",
    "FolderDescriptor",
    "SessionGrant",
    "SessionRequest",
    "TransferResult",
    "UploadState",
    "UploadTask",
    "format_bytes",
]
