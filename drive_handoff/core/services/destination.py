"""
Destination resolution for upload sessions.

Turns the caller's loose destination inputs into exactly one strategy and
then into a concrete folder id, creating or validating the folder through
the storage provider when needed.
"""

import logging
from typing import Any, Dict, Optional

from ..domain.models import Destination, DestinationKind, FileMetadata
from ..errors import (
    DestinationCreateFailedError, DestinationUnavailableError,
    ProviderRejectedError, UploadError
)
from ..interfaces.provider import IStorageProvider

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def select_destination(
    folder_id: Optional[str] = None,
    new_folder_name: Optional[str] = None
) -> Destination:
    """
    Pick the single destination strategy for a request.

    A new folder name (non-empty after trimming) wins over an explicit
    folder id, which wins over the root folder.
    """
    name = _clean(new_folder_name)
    if name:
        return Destination.new_folder(name)

    explicit_id = _clean(folder_id)
    if explicit_id:
        return Destination.existing(explicit_id)

    return Destination.root()


class DestinationResolver:
    """
    Resolves a Destination to a concrete folder id.

    New folders are created under the root folder. Explicit folder ids are
    used as-is unless ``validate`` is set, in which case the provider is
    probed first.
    """

    def __init__(self, provider: IStorageProvider, root_folder_id: str, validate: bool = False):
        self._provider = provider
        self._root_folder_id = root_folder_id
        self._validate = validate
        self.last_check: Optional[FileMetadata] = None

    async def resolve(self, destination: Destination) -> str:
        """
        Resolve ``destination`` to a folder id.

        Raises:
            DestinationCreateFailedError: If the new folder could not be created
            DestinationUnavailableError: If validation rejects the explicit folder
        """
        self.last_check = None

        if destination.kind is DestinationKind.NEW_FOLDER:
            return await self._create_folder(destination.value or "")

        if destination.kind is DestinationKind.EXISTING_FOLDER:
            folder_id = destination.value or ""
            if self._validate:
                await self._check_folder(folder_id)
            logger.debug(f"Using selected folder {folder_id}")
            return folder_id

        logger.debug(f"Using root folder {self._root_folder_id}")
        return self._root_folder_id

    async def _create_folder(self, name: str) -> str:
        logger.debug(f"Creating new folder {name!r} under {self._root_folder_id}")

        try:
            folder = await self._provider.create_folder(name, self._root_folder_id)
        except UploadError as e:
            raise DestinationCreateFailedError(
                f"Failed to create new folder: {e.message}", e.details
            ) from e

        if folder is None or not folder.id:
            raise DestinationCreateFailedError()

        logger.info(f"Created folder {folder.name!r} ({folder.id})")
        return folder.id

    async def _check_folder(self, folder_id: str) -> None:
        try:
            metadata = await self._provider.get_file(folder_id)
        except ProviderRejectedError as e:
            reason = "not found" if e.status == 404 else f"provider returned {e.status}"
            raise DestinationUnavailableError(folder_id, reason, e.details) from e

        self.last_check = metadata
        details: Dict[str, Any] = metadata.to_dict()

        if metadata.trashed:
            raise DestinationUnavailableError(folder_id, "folder is trashed", details)
        if metadata.mime_type is not None and not metadata.is_folder:
            raise DestinationUnavailableError(folder_id, "not a folder", details)
