"""
Transfer engine: PUTs a file's bytes straight to a resumable session URL.

The request is byte-opaque (``application/octet-stream``) and carries no
cookies or Authorization header; the session URL itself is the capability.
"""

import logging
from typing import Any, AsyncGenerator, Callable, Dict, Optional

import aiofiles
import aiohttp

from ...core.domain.models import FileHandle, TransferResult
from ...core.errors import NetworkFailureError, ProviderRejectedError
from ...core.interfaces.lifecycle import IComponent
from ...core.interfaces.upload import ITransferEngine, ProgressCallback
from ...core.services.transfer_policy import disconnect_counts_as_success, is_success_status

logger = logging.getLogger(__name__)

TRANSFER_CONTENT_TYPE = "application/octet-stream"


class AiohttpTransferEngine(ITransferEngine, IComponent):
    """
    Single-attempt transfer over aiohttp.

    Progress is reported as bytes are handed to the transport. One call to
    transfer() is one attempt; nothing is retried.
    """

    def __init__(
        self,
        chunk_size: int = 256 * 1024,
        session: Optional[aiohttp.ClientSession] = None
    ):
        self._chunk_size = chunk_size
        self._session = session
        self._owns_session = session is None
        self._transfers = 0
        self._failures = 0

    @property
    def name(self) -> str:
        return "AiohttpTransferEngine"

    async def start(self) -> None:
        if self._session is None or self._session.closed:
            # No total timeout: a transfer runs until it completes or the
            # transport fails.
            self._session = aiohttp.ClientSession(
                cookie_jar=aiohttp.DummyCookieJar(),
                timeout=aiohttp.ClientTimeout(total=None)
            )
            self._owns_session = True

    async def stop(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def check_health(self) -> Dict[str, Any]:
        running = self._session is not None and not self._session.closed
        return {
            "healthy": True,
            "status": "running" if running else "stopped",
            "details": {"transfers": self._transfers, "failures": self._failures}
        }

    async def __aenter__(self) -> "AiohttpTransferEngine":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    async def transfer(
        self,
        upload_url: str,
        file: FileHandle,
        on_progress: Optional[ProgressCallback] = None
    ) -> TransferResult:
        if self._session is None or self._session.closed:
            await self.start()
        assert self._session is not None

        self._transfers += 1
        state = {"loaded": 0}

        def report(loaded: int) -> None:
            state["loaded"] = max(state["loaded"], loaded)
            if file.size > 0 and on_progress is not None:
                on_progress(loaded, file.size)

        headers = {
            "Content-Type": TRANSFER_CONTENT_TYPE,
            "Content-Length": str(file.size),
        }

        logger.debug(f"PUT {file.name} ({file.size} bytes) to upload session")

        try:
            async with self._session.put(
                upload_url,
                data=self._read_chunks(file, report),
                headers=headers
            ) as response:
                status = response.status
                body = await response.text()

        except aiohttp.ClientError as e:
            if disconnect_counts_as_success(state["loaded"], file.size):
                logger.warning(
                    f"Connection closed after the last byte of {file.name} was sent, "
                    f"treating as success: {e}"
                )
                return TransferResult(status=None, bytes_sent=state["loaded"], inferred=True)

            self._failures += 1
            logger.error(f"Network error uploading {file.name}: {e}")
            raise NetworkFailureError(details={"reason": str(e)}) from e

        if is_success_status(status):
            if on_progress is not None and file.size > 0:
                on_progress(file.size, file.size)
            logger.info(f"Transfer of {file.name} accepted with status {status}")
            return TransferResult(status=status, bytes_sent=state["loaded"], body=body)

        self._failures += 1
        logger.error(f"Provider rejected upload of {file.name}: {status} {body}")
        raise ProviderRejectedError(status, body)

    async def _read_chunks(
        self,
        file: FileHandle,
        report: Callable[[int], None]
    ) -> AsyncGenerator[bytes, None]:
        loaded = 0
        async with aiofiles.open(file.path, "rb") as f:
            while True:
                chunk = await f.read(self._chunk_size)
                if not chunk:
                    break
                yield chunk
                loaded += len(chunk)
                report(loaded)
