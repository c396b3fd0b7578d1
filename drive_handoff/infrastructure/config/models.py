"""
Configuration models and data structures.

This module defines the configuration models used throughout the application,
providing type safety and validation for configuration values.
"""

import json
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


AUTH_MODE_OAUTH = "oauth"
AUTH_MODE_SERVICE_ACCOUNT = "service_account"
AUTH_MODE_AUTO = "auto"

DRIVE_SCOPE = "https://www.googleapis.com/auth/drive.file"


@dataclass
class ServerConfig:
    """Session broker HTTP server configuration."""
    host: str = "0.0.0.0"
    port: int = 8000


@dataclass
class DriveConfig:
    """
    Google Drive identity and default destination.

    Either the OAuth refresh-token triple or a service-account key is
    required, together with the root folder id. Missing values are
    reported by missing_settings() under their environment variable names.
    """
    auth_mode: str = AUTH_MODE_AUTO
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    refresh_token: Optional[str] = None
    service_account_json: Optional[str] = None
    root_folder_id: Optional[str] = None
    validate_destination: bool = False
    scopes: List[str] = field(default_factory=lambda: [DRIVE_SCOPE])
    token_url: str = "https://oauth2.googleapis.com/token"
    api_url: str = "https://www.googleapis.com/drive/v3"
    upload_api_url: str = "https://www.googleapis.com/upload/drive/v3"
    request_timeout: float = 30.0

    @property
    def effective_auth_mode(self) -> str:
        """Resolve ``auto`` to the mode the available credentials support."""
        if self.auth_mode != AUTH_MODE_AUTO:
            return self.auth_mode
        if self.service_account_json and not self.refresh_token:
            return AUTH_MODE_SERVICE_ACCOUNT
        return AUTH_MODE_OAUTH

    def missing_settings(self) -> List[str]:
        """Names of required settings that are absent, in check order."""
        if self.effective_auth_mode == AUTH_MODE_SERVICE_ACCOUNT:
            required = [("GOOGLE_CREDENTIALS", self.service_account_json)]
        else:
            required = [
                ("GOOGLE_CLIENT_ID", self.client_id),
                ("GOOGLE_CLIENT_SECRET", self.client_secret),
                ("GOOGLE_REFRESH_TOKEN", self.refresh_token),
            ]
        required.append(("GOOGLE_FOLDER_ID", self.root_folder_id))

        return [name for name, value in required if not value]

    def service_account_info(self) -> Dict[str, Any]:
        """
        Parse the service-account key.

        Escaped newlines in ``private_key`` are restored, since keys pasted
        into environment variables usually arrive with literal ``\\n``.

        Raises:
            ValueError: If the key is unset, not a JSON object, or has no
                ``private_key``
        """
        info = self._load_service_account()

        private_key = info.get("private_key")
        if not isinstance(private_key, str) or not private_key.strip():
            raise ValueError("GOOGLE_CREDENTIALS has no private_key field")

        info["private_key"] = private_key.replace("\\n", "\n")
        return info

    def _load_service_account(self) -> Dict[str, Any]:
        if not self.service_account_json:
            raise ValueError("GOOGLE_CREDENTIALS is not set")

        try:
            info = json.loads(self.service_account_json)
        except json.JSONDecodeError as e:
            raise ValueError(f"GOOGLE_CREDENTIALS is not valid JSON: {e}")

        if not isinstance(info, dict):
            raise ValueError("GOOGLE_CREDENTIALS must be a JSON object")
        return info

    @property
    def client_email(self) -> Optional[str]:
        """Service-account e-mail, when a key is configured."""
        if self.effective_auth_mode != AUTH_MODE_SERVICE_ACCOUNT:
            return None
        try:
            return self._load_service_account().get("client_email")
        except ValueError:
            return None


@dataclass
class ClientConfig:
    """Upload client configuration."""
    server_url: str = "http://localhost:8000"
    chunk_size: int = 256 * 1024
    request_timeout: float = 60.0


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    log_directory: str = "logs"
    max_file_size: str = "10 MB"
    backup_count: int = 5
    console_enabled: bool = True
    file_enabled: bool = True


@dataclass
class SecurityConfig:
    """HTTP security configuration."""
    allowed_origins: List[str] = field(default_factory=lambda: ["*"])


@dataclass
class ApplicationConfig:
    """Main application configuration."""

    # Basic application settings
    name: str = "Drive Handoff"
    version: str = "0.1.0"
    debug: bool = False
    environment: str = "production"

    # Component configurations
    server: ServerConfig = field(default_factory=ServerConfig)
    drive: DriveConfig = field(default_factory=DriveConfig)
    client: ClientConfig = field(default_factory=ClientConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)

    config_file_path: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate_ports()
        self._validate_timeouts()
        self._validate_auth_mode()

    def _validate_ports(self) -> None:
        if not (1 <= self.server.port <= 65535):
            raise ValueError(
                f"Server port must be between 1 and 65535, got {self.server.port}")

    def _validate_timeouts(self) -> None:
        timeouts = [
            ("Drive request timeout", self.drive.request_timeout),
            ("Client request timeout", self.client.request_timeout),
        ]

        for name, timeout in timeouts:
            if timeout <= 0:
                raise ValueError(f"{name} must be positive, got {timeout}")

        if self.client.chunk_size <= 0:
            raise ValueError(
                f"Client chunk size must be positive, got {self.client.chunk_size}")

    def _validate_auth_mode(self) -> None:
        modes = (AUTH_MODE_AUTO, AUTH_MODE_OAUTH, AUTH_MODE_SERVICE_ACCOUNT)
        if self.drive.auth_mode not in modes:
            raise ValueError(
                f"Drive auth mode must be one of {', '.join(modes)}, got {self.drive.auth_mode}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ApplicationConfig':
        """Create configuration from dictionary."""
        return cls(
            name=data.get('name', 'Drive Handoff'),
            version=data.get('version', '0.1.0'),
            debug=data.get('debug', False),
            environment=data.get('environment', 'production'),
            server=ServerConfig(**data.get('server', {})),
            drive=DriveConfig(**data.get('drive', {})),
            client=ClientConfig(**data.get('client', {})),
            logging=LoggingConfig(**data.get('logging', {})),
            security=SecurityConfig(**data.get('security', {})),
            config_file_path=data.get('config_file_path')
        )
