"""
Session broker: hands out single-use resumable upload URLs.

The broker validates the request, checks that provider identity and root
folder are configured, resolves the destination folder and asks the
provider to initiate a resumable session. It never retries.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..domain.models import DEFAULT_CONTENT_TYPE, SessionGrant, SessionRequest
from ..errors import InvalidRequestError, MissingConfigurationError, ProviderProtocolError
from ..interfaces.provider import IDriveSettings, IStorageProvider
from ..interfaces.upload import ISessionSource
from .destination import DestinationResolver

logger = logging.getLogger(__name__)


class SessionBroker(ISessionSource):
    """
    Server-side session broker.

    Args:
        settings: Provider identity and default destination
        provider: Storage provider client
        debug: Attach a debug payload to every grant
        identity: Account identity reported in the debug payload
    """

    def __init__(
        self,
        settings: IDriveSettings,
        provider: IStorageProvider,
        debug: bool = False,
        identity: Optional[str] = None
    ):
        self._settings = settings
        self._provider = provider
        self._debug = debug
        self._identity = identity

    def ensure_configured(self) -> None:
        """
        Fail fast when a required setting is absent.

        Raises:
            MissingConfigurationError: Naming the first missing setting
        """
        missing = self._settings.missing_settings()
        if missing:
            raise MissingConfigurationError(missing[0], {"missing": missing})

    async def request_session(self, request: SessionRequest) -> SessionGrant:
        """Obtain a resumable upload session for one file."""
        logger.debug(
            f"Session requested: name={request.file_name!r} type={request.file_type!r} "
            f"size={request.file_size} destination={request.destination.kind.value}"
        )

        if not request.file_name or not request.file_name.strip():
            raise InvalidRequestError("fileName is required")

        self.ensure_configured()

        resolver = DestinationResolver(
            self._provider,
            self._settings.root_folder_id or "",
            validate=self._settings.validate_destination
        )
        folder_id = await resolver.resolve(request.destination)

        mime_type = request.file_type or DEFAULT_CONTENT_TYPE
        logger.debug(f"Requesting resumable session for {request.file_name!r} in {folder_id}")

        upload_url = await self._provider.initiate_resumable_session(
            name=request.file_name,
            mime_type=mime_type,
            parent_id=folder_id,
            size=request.file_size
        )
        if not upload_url:
            raise ProviderProtocolError(
                "Provider did not return a Location header (Upload URL)."
            )

        logger.info(f"Upload session created for {request.file_name!r} in folder {folder_id}")

        debug: Optional[Dict[str, Any]] = None
        if self._debug:
            debug = {
                "folderId": folder_id,
                "folderCheck": resolver.last_check.to_dict() if resolver.last_check else None,
                "clientEmail": self._identity,
                "sessionCreatedAt": datetime.now(timezone.utc).isoformat(),
                "fileType": mime_type
            }

        return SessionGrant(upload_url=upload_url, folder_id=folder_id, debug=debug)
