"""
Shared fixtures and in-memory fakes for the upload flow tests.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest

from drive_handoff.core.domain.models import (
    FileHandle, FileMetadata, FolderDescriptor, SessionGrant, SessionRequest, TransferResult
)
from drive_handoff.core.interfaces.provider import IStorageProvider
from drive_handoff.core.interfaces.upload import ISessionSource, ITransferEngine, ProgressCallback
from drive_handoff.infrastructure.config.models import DriveConfig


class FakeDriveProvider(IStorageProvider):
    """Records every call; behaviour is configured through attributes."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self.folders: List[FolderDescriptor] = []
        self.created: Dict[str, str] = {}
        self.files: Dict[str, FileMetadata] = {}
        self.create_result: Optional[FolderDescriptor] = None
        self.create_error: Optional[Exception] = None
        self.get_error: Optional[Exception] = None
        self.location: Optional[str] = None
        self._counter = 0

    async def list_folders(self, parent_id: str) -> List[FolderDescriptor]:
        self.calls.append(("list_folders", (parent_id,)))
        return list(self.folders)

    async def create_folder(self, name: str, parent_id: str) -> Optional[FolderDescriptor]:
        self.calls.append(("create_folder", (name, parent_id)))
        if self.create_error is not None:
            raise self.create_error
        if self.create_result is not None:
            return self.create_result
        self._counter += 1
        folder_id = f"created-{self._counter}"
        self.created[folder_id] = name
        return FolderDescriptor(id=folder_id, name=name)

    async def initiate_resumable_session(
        self,
        name: str,
        mime_type: str,
        parent_id: str,
        size: Optional[int] = None
    ) -> Optional[str]:
        self.calls.append(("initiate_resumable_session", (name, mime_type, parent_id, size)))
        if self.location is not None:
            return self.location or None
        self._counter += 1
        return f"https://upload.example/session/{self._counter}"

    async def get_file(self, file_id: str) -> FileMetadata:
        self.calls.append(("get_file", (file_id,)))
        if self.get_error is not None:
            raise self.get_error
        return self.files[file_id]

    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]


class RecordingSessionSource(ISessionSource):
    """Session source that hands out fresh URLs and remembers requests."""

    def __init__(self, folder_id: str = "root-folder") -> None:
        self.requests: List[SessionRequest] = []
        self.errors: Dict[str, Exception] = {}
        self.folder_id = folder_id
        self.fixed_url: Optional[str] = None
        self.created_folders = 0

    async def request_session(self, request: SessionRequest) -> SessionGrant:
        self.requests.append(request)
        error = self.errors.get(request.file_name or "")
        if error is not None:
            raise error

        kind = request.destination.kind.value
        if kind == "new_folder":
            self.created_folders += 1
            folder_id = f"new-{self.created_folders}"
        elif kind == "existing_folder":
            folder_id = request.destination.value or ""
        else:
            folder_id = self.folder_id

        url = self.fixed_url or f"https://upload.example/{len(self.requests)}"
        return SessionGrant(upload_url=url, folder_id=folder_id)


class RecordingTransferEngine(ITransferEngine):
    """Transfer engine that reports full progress without touching the network."""

    def __init__(self) -> None:
        self.transfers: List[Tuple[str, str]] = []
        self.errors: Dict[str, Exception] = {}
        self.observer: Optional[Any] = None

    async def transfer(
        self,
        upload_url: str,
        file: FileHandle,
        on_progress: Optional[ProgressCallback] = None
    ) -> TransferResult:
        if self.observer is not None:
            self.observer(file)
        self.transfers.append((upload_url, file.name))
        error = self.errors.get(file.name)
        if error is not None:
            raise error
        if on_progress is not None and file.size > 0:
            on_progress(file.size // 2, file.size)
            on_progress(file.size, file.size)
        return TransferResult(status=200, bytes_sent=file.size)


@pytest.fixture
def drive_settings() -> DriveConfig:
    """Fully configured OAuth Drive settings."""
    return DriveConfig(
        client_id="client-id",
        client_secret="client-secret",
        refresh_token="refresh-token",
        root_folder_id="root-folder"
    )


@pytest.fixture
def fake_provider() -> FakeDriveProvider:
    return FakeDriveProvider()


@pytest.fixture
def session_source() -> RecordingSessionSource:
    return RecordingSessionSource()


@pytest.fixture
def transfer_engine() -> RecordingTransferEngine:
    return RecordingTransferEngine()


@pytest.fixture
def make_file(tmp_path: Path) -> Any:
    """Factory writing a file of ``size`` bytes and returning its handle."""

    def _make(name: str, size: int, content_type: str = "text/plain") -> FileHandle:
        path = tmp_path / name
        path.write_bytes(b"x" * size)
        return FileHandle(name=name, size=size, content_type=content_type, path=path)

    return _make
