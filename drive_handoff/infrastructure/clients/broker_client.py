"""
HTTP client for the session broker surface (``/upload`` and ``/folders``).

Lets the batch coordinator run on a different machine than the broker,
exactly as the browser does.
"""

import logging
from typing import Any, Dict, List, Optional

import aiohttp

from ...core.domain.models import (
    DEFAULT_CONTENT_TYPE, DestinationKind, FolderDescriptor, SessionGrant, SessionRequest
)
from ...core.errors import BrokerRequestError, NetworkFailureError, ProviderProtocolError
from ...core.interfaces.lifecycle import IComponent
from ...core.interfaces.upload import ISessionSource

logger = logging.getLogger(__name__)


class SessionBrokerClient(ISessionSource, IComponent):
    """Requests upload sessions and folder listings from a remote broker."""

    def __init__(
        self,
        base_url: str,
        request_timeout: float = 60.0,
        session: Optional[aiohttp.ClientSession] = None
    ):
        self._base_url = base_url.rstrip("/")
        self._request_timeout = request_timeout
        self._session = session
        self._owns_session = session is None

    @property
    def name(self) -> str:
        return "SessionBrokerClient"

    async def start(self) -> None:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self._request_timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True

    async def stop(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def check_health(self) -> Dict[str, Any]:
        running = self._session is not None and not self._session.closed
        return {
            "healthy": running,
            "status": "running" if running else "stopped",
            "details": {"base_url": self._base_url}
        }

    async def __aenter__(self) -> "SessionBrokerClient":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    async def request_session(self, request: SessionRequest) -> SessionGrant:
        body: Dict[str, Any] = {
            "fileName": request.file_name,
            "fileType": request.file_type or DEFAULT_CONTENT_TYPE,
            "fileSize": request.file_size,
        }
        if request.destination.kind is DestinationKind.NEW_FOLDER:
            body["newFolderName"] = request.destination.value
        elif request.destination.kind is DestinationKind.EXISTING_FOLDER:
            body["folderId"] = request.destination.value

        payload = await self._call("POST", "/upload", json=body,
                                   fallback_error="Failed to create upload session.")

        upload_url = payload.get("uploadUrl")
        if not upload_url:
            raise ProviderProtocolError("Missing uploadUrl from server.", payload)

        return SessionGrant(
            upload_url=upload_url,
            folder_id=payload.get("folderId") or "",
            debug=payload.get("debug")
        )

    async def list_folders(self) -> List[FolderDescriptor]:
        payload = await self._call("GET", "/folders", fallback_error="Failed to load folders.")

        return [
            FolderDescriptor(id=item["id"], name=item.get("name") or "Untitled")
            for item in payload.get("folders") or []
            if item.get("id")
        ]

    async def _call(
        self,
        method: str,
        path: str,
        fallback_error: str,
        json: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        if self._session is None or self._session.closed:
            await self.start()
        assert self._session is not None

        try:
            async with self._session.request(method, f"{self._base_url}{path}", json=json) as response:
                try:
                    payload = await response.json(content_type=None)
                except ValueError:
                    payload = None
                if not isinstance(payload, dict):
                    payload = {}

                if response.status >= 400:
                    raise BrokerRequestError(
                        payload.get("error") or fallback_error,
                        status=response.status,
                        details=payload.get("details")
                    )
                return payload

        except aiohttp.ClientError as e:
            logger.error(f"Session broker request {method} {path} failed: {e}")
            raise NetworkFailureError(f"Session broker unreachable: {e}") from e
