"""
Interfaces of the client-side upload flow.

The batch coordinator only depends on these two seams: something that hands
out upload sessions (an in-process SessionBroker or the HTTP broker client)
and something that moves the bytes.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from ..domain.models import FileHandle, SessionGrant, SessionRequest, TransferResult

# (bytes_loaded, bytes_total)
ProgressCallback = Callable[[int, int], None]


class ISessionSource(ABC):
    """Hands out single-use resumable upload sessions."""

    @abstractmethod
    async def request_session(self, request: SessionRequest) -> SessionGrant:
        """
        Obtain a session for one file.

        Raises:
            UploadError: If no session could be obtained
        """
        pass


class ITransferEngine(ABC):
    """Sends a file's bytes to a session URL in a single attempt."""

    @abstractmethod
    async def transfer(
        self,
        upload_url: str,
        file: FileHandle,
        on_progress: Optional[ProgressCallback] = None
    ) -> TransferResult:
        """
        Transfer the full payload of ``file`` to ``upload_url``.

        Raises:
            ProviderRejectedError: If the provider answered outside 200-399
            NetworkFailureError: If no response was received
        """
        pass
