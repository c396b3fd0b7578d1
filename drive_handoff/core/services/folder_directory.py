"""
Folder directory: lists candidate destination folders under the root.
"""

import logging
from typing import List

from ..domain.models import FolderDescriptor
from ..errors import MissingConfigurationError
from ..interfaces.provider import IDriveSettings, IStorageProvider

logger = logging.getLogger(__name__)


class FolderDirectory:
    """Read path for the destination picker."""

    def __init__(self, settings: IDriveSettings, provider: IStorageProvider):
        self._settings = settings
        self._provider = provider

    async def list_folders(self) -> List[FolderDescriptor]:
        """
        List folders directly under the configured root.

        Folders without an id are dropped and nameless ones are shown as
        ``Untitled``.
        """
        missing = self._settings.missing_settings()
        if missing:
            raise MissingConfigurationError(missing[0], {"missing": missing})

        folders = await self._provider.list_folders(self._settings.root_folder_id or "")
        result = [
            FolderDescriptor(id=folder.id, name=folder.name or "Untitled")
            for folder in folders
            if folder.id
        ]

        logger.debug(f"Listed {len(result)} folders under {self._settings.root_folder_id}")
        return result
