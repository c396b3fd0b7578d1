"""
Error taxonomy for the direct upload flow.

Every failure raised by the session broker, destination resolver, provider
client and transfer engine derives from UploadError so callers can record
it against a single task and carry on.
"""

from enum import Enum
from typing import Any, Optional


class ErrorCode(Enum):
    """Stable error codes surfaced alongside error messages."""
    MISSING_CONFIGURATION = "missing_configuration"
    INVALID_REQUEST = "invalid_request"
    DESTINATION_CREATE_FAILED = "destination_create_failed"
    DESTINATION_UNAVAILABLE = "destination_unavailable"
    PROVIDER_PROTOCOL_ERROR = "provider_protocol_error"
    PROVIDER_REJECTED = "provider_rejected"
    NETWORK_FAILURE = "network_failure"
    BROKER_REQUEST_FAILED = "broker_request_failed"


class UploadError(Exception):
    """Base class for all upload flow errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Any] = None
    ):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict:
        """Render the error the way the HTTP surface reports it."""
        return {"error": self.message, "details": self.details}


class MissingConfigurationError(UploadError):
    """A required credential or root folder id is not configured."""

    def __init__(self, setting: str, details: Any = None):
        self.setting = setting
        super().__init__(
            ErrorCode.MISSING_CONFIGURATION,
            f"MISSING CONFIG: {setting}",
            details
        )


class InvalidRequestError(UploadError):
    """The caller sent an unusable session request."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(ErrorCode.INVALID_REQUEST, message, details)


class DestinationCreateFailedError(UploadError):
    """Creating the requested destination folder failed."""

    def __init__(self, message: str = "Failed to create new folder.", details: Any = None):
        super().__init__(ErrorCode.DESTINATION_CREATE_FAILED, message, details)


class DestinationUnavailableError(UploadError):
    """The explicit destination folder is missing, trashed or inaccessible."""

    def __init__(self, folder_id: str, reason: str, details: Any = None):
        self.folder_id = folder_id
        super().__init__(
            ErrorCode.DESTINATION_UNAVAILABLE,
            f"Destination folder {folder_id} is unavailable: {reason}",
            details
        )


class ProviderProtocolError(UploadError):
    """The provider answered, but not per the expected contract."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(ErrorCode.PROVIDER_PROTOCOL_ERROR, message, details)


class ProviderRejectedError(UploadError):
    """The provider returned an explicit non-success status."""

    def __init__(self, status: int, body: Any = None, message: Optional[str] = None):
        self.status = status
        self.body = body
        super().__init__(
            ErrorCode.PROVIDER_REJECTED,
            message or f"Upload failed: Server returned {status}",
            body
        )


class NetworkFailureError(UploadError):
    """No response was received at all."""

    def __init__(
        self,
        message: str = "Network error: CORS blocked or connection lost.",
        details: Any = None
    ):
        super().__init__(ErrorCode.NETWORK_FAILURE, message, details)


class BrokerRequestError(UploadError):
    """The session broker answered a session request with an error payload."""

    def __init__(self, message: str, status: Optional[int] = None, details: Any = None):
        self.status = status
        super().__init__(ErrorCode.BROKER_REQUEST_FAILED, message, details)
