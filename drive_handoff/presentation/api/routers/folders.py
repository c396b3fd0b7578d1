"""
Folder listing endpoint used by destination pickers.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends

from ....core.services.folder_directory import FolderDirectory
from ..dependencies import get_folder_directory

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/folders")
async def list_folders(
    directory: FolderDirectory = Depends(get_folder_directory)
) -> Dict[str, Any]:
    """List the folders directly under the configured root folder."""
    folders = await directory.list_folders()
    return {"folders": [folder.to_dict() for folder in folders]}
