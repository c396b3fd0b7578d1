"""
Storage provider interface consumed by the session broker and folder directory.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Protocol, runtime_checkable

from ..domain.models import FileMetadata, FolderDescriptor


class IStorageProvider(ABC):
    """
    Contract the upload core relies on from the storage provider.

    Implementations raise ProviderRejectedError for explicit non-success
    statuses and NetworkFailureError when no response arrives.
    """

    @abstractmethod
    async def list_folders(self, parent_id: str) -> List[FolderDescriptor]:
        """List non-trashed folders directly under ``parent_id``."""
        pass

    @abstractmethod
    async def create_folder(self, name: str, parent_id: str) -> Optional[FolderDescriptor]:
        """
        Create a folder under ``parent_id``.

        Returns:
            The created folder, or None if the provider returned no id
        """
        pass

    @abstractmethod
    async def initiate_resumable_session(
        self,
        name: str,
        mime_type: str,
        parent_id: str,
        size: Optional[int] = None
    ) -> Optional[str]:
        """
        Start a resumable upload session.

        Returns:
            The session URL from the ``Location`` response header, or None
            when the header is absent
        """
        pass

    @abstractmethod
    async def get_file(self, file_id: str) -> FileMetadata:
        """Fetch id, name, MIME type and trashed flag of a file or folder."""
        pass


@runtime_checkable
class IDriveSettings(Protocol):
    """Provider identity and default destination injected into the broker."""

    root_folder_id: Optional[str]
    validate_destination: bool

    def missing_settings(self) -> List[str]:
        """Names of required settings that are absent."""
        ...
