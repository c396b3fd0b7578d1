"""
Domain models for the direct upload flow.

These are plain dataclasses without framework dependencies. Provider and
broker payloads are parsed into them at the boundary.
"""

import math
import mimetypes
import os
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union


DEFAULT_CONTENT_TYPE = "application/octet-stream"
FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"


class UploadState(Enum):
    """Lifecycle state of a single upload task."""
    IDLE = "idle"
    UPLOADING = "uploading"
    SUCCESS = "success"
    ERROR = "error"


class DestinationKind(Enum):
    """Destination resolution strategy for a session request."""
    NEW_FOLDER = "new_folder"
    EXISTING_FOLDER = "existing_folder"
    ROOT = "root"


@dataclass(frozen=True)
class Destination:
    """
    Where a session's file should land.

    Exactly one strategy is active: ``value`` holds the new folder name for
    NEW_FOLDER, the folder id for EXISTING_FOLDER and nothing for ROOT.
    """
    kind: DestinationKind
    value: Optional[str] = None

    @classmethod
    def root(cls) -> "Destination":
        return cls(DestinationKind.ROOT)

    @classmethod
    def existing(cls, folder_id: str) -> "Destination":
        return cls(DestinationKind.EXISTING_FOLDER, folder_id)

    @classmethod
    def new_folder(cls, name: str) -> "Destination":
        return cls(DestinationKind.NEW_FOLDER, name)


@dataclass(frozen=True)
class FileHandle:
    """A local file queued for upload."""
    name: str
    size: int
    content_type: str
    path: Path

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "FileHandle":
        """Build a handle from a file on disk, guessing its MIME type."""
        file_path = Path(path)
        content_type, _ = mimetypes.guess_type(file_path.name)
        return cls(
            name=file_path.name,
            size=os.path.getsize(file_path),
            content_type=content_type or DEFAULT_CONTENT_TYPE,
            path=file_path
        )


@dataclass
class SessionRequest:
    """Ephemeral request for a single resumable upload session."""
    file_name: Optional[str]
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    destination: Destination = field(default_factory=Destination.root)

    @classmethod
    def for_file(cls, file: FileHandle, destination: Destination) -> "SessionRequest":
        return cls(
            file_name=file.name,
            file_type=file.content_type or DEFAULT_CONTENT_TYPE,
            file_size=file.size,
            destination=destination
        )


@dataclass(frozen=True)
class SessionGrant:
    """Single-use resumable upload URL and the folder it targets."""
    upload_url: str
    folder_id: str
    debug: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class FolderDescriptor:
    """A candidate destination folder."""
    id: str
    name: str

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class FileMetadata:
    """Subset of provider file metadata used to validate destinations."""
    id: str
    name: str
    mime_type: Optional[str] = None
    trashed: bool = False

    @property
    def is_folder(self) -> bool:
        return self.mime_type == FOLDER_MIME_TYPE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "mimeType": self.mime_type,
            "trashed": self.trashed
        }


@dataclass
class TransferResult:
    """Terminal outcome of a successful transfer attempt."""
    status: Optional[int]
    bytes_sent: int
    body: Optional[str] = None
    inferred: bool = False


@dataclass
class UploadTask:
    """A file enqueued in a batch and its per-attempt progress."""
    file: FileHandle
    task_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    state: UploadState = UploadState.IDLE
    progress: int = 0
    error: Optional[str] = None

    # Debug details of the latest attempt
    upload_url: Optional[str] = None
    folder_id: Optional[str] = None
    session_requested_at: Optional[float] = None
    session_received_at: Optional[float] = None
    upload_started_at: Optional[float] = None
    upload_finished_at: Optional[float] = None

    def begin_attempt(self) -> None:
        """Reset progress and mark the task as uploading."""
        self.state = UploadState.UPLOADING
        self.progress = 0
        self.error = None
        self.upload_url = None
        self.folder_id = None
        self.session_requested_at = time.time()
        self.session_received_at = None
        self.upload_started_at = None
        self.upload_finished_at = None

    def mark_success(self) -> None:
        self.state = UploadState.SUCCESS
        self.progress = 100
        self.upload_finished_at = time.time()

    def mark_error(self, message: str) -> None:
        self.state = UploadState.ERROR
        self.error = message
        if self.upload_started_at is not None:
            self.upload_finished_at = time.time()

    @property
    def session_rtt(self) -> Optional[float]:
        """Seconds spent obtaining the upload session."""
        if self.session_requested_at is None or self.session_received_at is None:
            return None
        return self.session_received_at - self.session_requested_at

    @property
    def upload_duration(self) -> Optional[float]:
        """Seconds spent transferring the bytes."""
        if self.upload_started_at is None or self.upload_finished_at is None:
            return None
        return self.upload_finished_at - self.upload_started_at


def format_bytes(size: int) -> str:
    """Format a byte count the way the upload UI shows it (``1.5 MB``)."""
    if size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB", "TB"]
    index = min(int(math.floor(math.log(size, 1024))), len(units) - 1)
    return f"{size / math.pow(1024, index):.1f} {units[index]}"
