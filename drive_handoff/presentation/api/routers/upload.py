"""
Upload session endpoint.

Hands out a single-use resumable upload URL. The file bytes never pass
through this service; the caller PUTs them to the returned URL.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from ....core.domain.models import SessionRequest
from ....core.services.destination import select_destination
from ....core.services.session_broker import SessionBroker
from ..dependencies import get_broker

logger = logging.getLogger(__name__)

router = APIRouter()


class UploadSessionRequest(BaseModel):
    """Upload session request model."""
    model_config = ConfigDict(populate_by_name=True)

    file_name: Optional[str] = Field(None, alias="fileName", description="Name of the file to create")
    file_type: Optional[str] = Field(None, alias="fileType", description="MIME type of the file")
    file_size: Optional[int] = Field(None, alias="fileSize", ge=0, description="File size in bytes")
    folder_id: Optional[str] = Field(None, alias="folderId", description="Existing destination folder")
    new_folder_name: Optional[str] = Field(
        None, alias="newFolderName", description="Create this folder under the root and upload into it"
    )


@router.post("/upload")
async def create_upload_session(
    body: UploadSessionRequest,
    broker: SessionBroker = Depends(get_broker)
) -> Dict[str, Any]:
    """Create a resumable upload session for one file."""
    request = SessionRequest(
        file_name=body.file_name or "",
        file_type=body.file_type,
        file_size=body.file_size,
        destination=select_destination(body.folder_id, body.new_folder_name)
    )

    grant = await broker.request_session(request)

    response: Dict[str, Any] = {"uploadUrl": grant.upload_url, "folderId": grant.folder_id}
    if grant.debug is not None:
        response["debug"] = grant.debug
    return response
