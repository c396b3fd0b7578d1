"""
Tests for configuration models.

This module tests ApplicationConfig and the Drive settings, including the
missing-setting report and service-account key parsing.
"""

import json

import pytest

from drive_handoff.infrastructure.config.models import (
    AUTH_MODE_OAUTH, AUTH_MODE_SERVICE_ACCOUNT, DRIVE_SCOPE, ApplicationConfig, ClientConfig,
    DriveConfig, ServerConfig
)


class TestDriveConfig:
    """Test cases for DriveConfig."""

    def test_defaults(self) -> None:
        """Test DriveConfig default values."""
        config = DriveConfig()

        assert config.auth_mode == "auto"
        assert config.effective_auth_mode == AUTH_MODE_OAUTH
        assert config.scopes == [DRIVE_SCOPE]
        assert config.validate_destination is False
        assert config.upload_api_url == "https://www.googleapis.com/upload/drive/v3"

    def test_missing_settings_oauth(self) -> None:
        """Missing OAuth settings are reported in check order."""
        config = DriveConfig(client_secret="secret")

        assert config.missing_settings() == [
            "GOOGLE_CLIENT_ID", "GOOGLE_REFRESH_TOKEN", "GOOGLE_FOLDER_ID"
        ]

    def test_complete_oauth_settings(self) -> None:
        config = DriveConfig(
            client_id="id", client_secret="secret", refresh_token="token", root_folder_id="root"
        )

        assert config.missing_settings() == []

    def test_service_account_detected(self) -> None:
        """A key without a refresh token selects the service-account mode."""
        config = DriveConfig(service_account_json='{"client_email": "svc@example.com"}')

        assert config.effective_auth_mode == AUTH_MODE_SERVICE_ACCOUNT
        assert config.missing_settings() == ["GOOGLE_FOLDER_ID"]
        assert config.client_email == "svc@example.com"

    def test_explicit_service_account_without_key(self) -> None:
        config = DriveConfig(auth_mode=AUTH_MODE_SERVICE_ACCOUNT, root_folder_id="root")

        assert config.missing_settings() == ["GOOGLE_CREDENTIALS"]
        assert config.client_email is None

    def test_private_key_newlines_restored(self) -> None:
        raw = json.dumps({"client_email": "svc@example.com", "private_key": "line1\\nline2"})
        config = DriveConfig(service_account_json=raw)

        assert config.service_account_info()["private_key"] == "line1\nline2"

    def test_invalid_service_account_json(self) -> None:
        config = DriveConfig(service_account_json="{not json")

        with pytest.raises(ValueError, match="not valid JSON"):
            config.service_account_info()
        assert config.client_email is None

    def test_service_account_without_private_key(self) -> None:
        config = DriveConfig(service_account_json='{"client_email": "svc@example.com"}')

        with pytest.raises(ValueError, match="no private_key field"):
            config.service_account_info()
        assert config.client_email == "svc@example.com"

    def test_service_account_json_must_be_object(self) -> None:
        config = DriveConfig(service_account_json='["svc@example.com"]')

        with pytest.raises(ValueError, match="must be a JSON object"):
            config.service_account_info()


class TestApplicationConfig:
    """Test cases for ApplicationConfig."""

    def test_defaults(self) -> None:
        """Test ApplicationConfig default values."""
        config = ApplicationConfig()

        assert config.name == "Drive Handoff"
        assert config.debug is False
        assert isinstance(config.server, ServerConfig)
        assert config.server.port == 8000
        assert isinstance(config.client, ClientConfig)
        assert config.client.chunk_size == 256 * 1024
        assert config.security.allowed_origins == ["*"]

    def test_invalid_port(self) -> None:
        with pytest.raises(ValueError, match="Server port"):
            ApplicationConfig(server=ServerConfig(port=70000))

    def test_invalid_timeout(self) -> None:
        with pytest.raises(ValueError, match="Drive request timeout"):
            ApplicationConfig(drive=DriveConfig(request_timeout=0))

    def test_invalid_chunk_size(self) -> None:
        with pytest.raises(ValueError, match="chunk size"):
            ApplicationConfig(client=ClientConfig(chunk_size=0))

    def test_invalid_auth_mode(self) -> None:
        with pytest.raises(ValueError, match="auth mode"):
            ApplicationConfig(drive=DriveConfig(auth_mode="api_key"))

    def test_round_trip_through_dict(self) -> None:
        """to_dict output rebuilds an equal configuration."""
        config = ApplicationConfig(
            debug=True,
            drive=DriveConfig(root_folder_id="root", validate_destination=True)
        )

        rebuilt = ApplicationConfig.from_dict(config.to_dict())

        assert rebuilt == config

    def test_from_dict_partial(self) -> None:
        config = ApplicationConfig.from_dict({"server": {"port": 9000}, "drive": {"root_folder_id": "abc"}})

        assert config.server.port == 9000
        assert config.server.host == "0.0.0.0"
        assert config.drive.root_folder_id == "abc"


class TestDriveSettingsProtocol:
    """DriveConfig is what the core services expect as settings."""

    def test_satisfies_protocol(self) -> None:
        from drive_handoff.core.interfaces.provider import IDriveSettings

        assert isinstance(DriveConfig(), IDriveSettings)
