"""
Google Drive v3 REST client used by the session broker.

Only the four calls the upload flow relies on are implemented: list
folders, create a folder, initiate a resumable upload session and fetch a
file's metadata.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import aiohttp

from ...core.domain.models import FOLDER_MIME_TYPE, FileMetadata, FolderDescriptor
from ...core.errors import NetworkFailureError, ProviderRejectedError
from ...core.interfaces.lifecycle import IComponent
from ...core.interfaces.provider import IStorageProvider
from ..config.models import DriveConfig
from .credentials import TokenSource, create_token_source, read_body

logger = logging.getLogger(__name__)


class GoogleDriveProvider(IStorageProvider, IComponent):
    """
    Async Google Drive client.

    The token source is created on first use, after the broker has checked
    that the required credentials are configured.
    """

    def __init__(
        self,
        config: DriveConfig,
        token_source: Optional[TokenSource] = None,
        session: Optional[aiohttp.ClientSession] = None
    ):
        self._config = config
        self._token_source = token_source
        self._session = session
        self._owns_session = session is None
        self._request_count = 0
        self._last_error: Optional[str] = None

    @property
    def name(self) -> str:
        return "GoogleDriveProvider"

    @property
    def identity(self) -> Optional[str]:
        if self._token_source is not None:
            return self._token_source.identity
        return self._config.client_email

    async def start(self) -> None:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self._config.request_timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
            logger.info("Google Drive client session opened")

    async def stop(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
            logger.info("Google Drive client session closed")
        self._session = None

    async def check_health(self) -> Dict[str, Any]:
        running = self._session is not None and not self._session.closed
        missing = self._config.missing_settings()
        return {
            "healthy": running and not missing,
            "status": "running" if running else "stopped",
            "details": {
                "auth_mode": self._config.effective_auth_mode,
                "missing_settings": missing,
                "requests": self._request_count,
                "last_error": self._last_error
            }
        }

    async def list_folders(self, parent_id: str) -> List[FolderDescriptor]:
        query = (
            f"'{parent_id}' in parents and mimeType = '{FOLDER_MIME_TYPE}' "
            f"and trashed = false"
        )
        folders: List[FolderDescriptor] = []
        page_token: Optional[str] = None

        while True:
            params = {
                "q": query,
                "fields": "nextPageToken,files(id,name)",
                "pageSize": "1000",
            }
            if page_token:
                params["pageToken"] = page_token

            _, payload = await self._request_json("GET", f"{self._config.api_url}/files", params=params)

            for item in payload.get("files") or []:
                folders.append(FolderDescriptor(id=item.get("id") or "", name=item.get("name") or ""))

            page_token = payload.get("nextPageToken")
            if not page_token:
                break

        return folders

    async def create_folder(self, name: str, parent_id: str) -> Optional[FolderDescriptor]:
        _, payload = await self._request_json(
            "POST",
            f"{self._config.api_url}/files",
            params={"fields": "id,name"},
            json={"name": name, "mimeType": FOLDER_MIME_TYPE, "parents": [parent_id]}
        )

        if not payload.get("id"):
            return None
        return FolderDescriptor(id=payload["id"], name=payload.get("name") or name)

    async def initiate_resumable_session(
        self,
        name: str,
        mime_type: str,
        parent_id: str,
        size: Optional[int] = None
    ) -> Optional[str]:
        headers = {"X-Upload-Content-Type": mime_type}
        if size is not None:
            headers["X-Upload-Content-Length"] = str(size)

        response_headers, _ = await self._request_json(
            "POST",
            f"{self._config.upload_api_url}/files",
            params={"uploadType": "resumable", "fields": "id"},
            json={"name": name, "mimeType": mime_type, "parents": [parent_id]},
            headers=headers
        )

        logger.debug(f"Resumable initiation response headers: {dict(response_headers)}")
        return response_headers.get("Location")

    async def get_file(self, file_id: str) -> FileMetadata:
        _, payload = await self._request_json(
            "GET",
            f"{self._config.api_url}/files/{file_id}",
            params={"fields": "id,name,mimeType,trashed"}
        )

        return FileMetadata(
            id=payload.get("id") or file_id,
            name=payload.get("name") or "",
            mime_type=payload.get("mimeType"),
            trashed=bool(payload.get("trashed", False))
        )

    async def _request_json(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Tuple[Any, Dict[str, Any]]:
        """
        Issue an authenticated request.

        Returns:
            Tuple of response headers and decoded JSON body ({} when empty)
        """
        if self._session is None or self._session.closed:
            await self.start()
        assert self._session is not None

        if self._token_source is None:
            self._token_source = create_token_source(self._config)

        token = await self._token_source.get_token(self._session)
        request_headers = {"Authorization": f"Bearer {token}"}
        request_headers.update(headers or {})

        self._request_count += 1
        try:
            async with self._session.request(
                method, url, params=params, json=json, headers=request_headers
            ) as response:
                body = await read_body(response)

                if response.status == 401:
                    self._token_source.invalidate()

                if not (200 <= response.status < 300):
                    self._last_error = f"{method} {url} -> {response.status}"
                    logger.error(f"Google API error {response.status} for {method} {url}: {body}")
                    raise ProviderRejectedError(
                        response.status, body,
                        f"Google API request failed with status {response.status}"
                    )

                return response.headers, body if isinstance(body, dict) else {}

        except aiohttp.ClientError as e:
            self._last_error = str(e)
            raise NetworkFailureError(f"Google API request failed: {e}") from e
