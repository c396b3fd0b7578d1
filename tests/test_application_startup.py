"""
Tests for ApplicationStartup.

This module tests service wiring, the startup sequence and shutdown.
"""

from typing import Any, Dict, List, Optional

import pytest

from drive_handoff.application.startup import ApplicationStartup
from drive_handoff.core.domain.models import FileMetadata, FolderDescriptor
from drive_handoff.core.interfaces.lifecycle import IComponent
from drive_handoff.core.interfaces.provider import IStorageProvider
from drive_handoff.core.services.folder_directory import FolderDirectory
from drive_handoff.core.services.session_broker import SessionBroker
from drive_handoff.infrastructure.config.models import ApplicationConfig, DriveConfig
from drive_handoff.infrastructure.providers.google_drive import GoogleDriveProvider


class MockProviderComponent(IStorageProvider, IComponent):
    """Provider with a lifecycle, for testing startup and shutdown."""

    def __init__(self) -> None:
        self.events: List[str] = []
        self.should_fail_start = False
        self.should_fail_stop = False
        self.healthy = True

    @property
    def name(self) -> str:
        return "MockProvider"

    @property
    def identity(self) -> Optional[str]:
        return "svc@example.com"

    async def start(self) -> None:
        self.events.append("start")
        if self.should_fail_start:
            raise RuntimeError("Mock start failure")

    async def stop(self) -> None:
        self.events.append("stop")
        if self.should_fail_stop:
            raise RuntimeError("Mock stop failure")

    async def check_health(self) -> Dict[str, Any]:
        if not self.healthy:
            raise RuntimeError("health probe failed")
        return {"healthy": True, "status": "running", "details": {}}

    async def list_folders(self, parent_id: str) -> List[FolderDescriptor]:
        return []

    async def create_folder(self, name: str, parent_id: str) -> Optional[FolderDescriptor]:
        return None

    async def initiate_resumable_session(
        self, name: str, mime_type: str, parent_id: str, size: Optional[int] = None
    ) -> Optional[str]:
        return None

    async def get_file(self, file_id: str) -> FileMetadata:
        return FileMetadata(id=file_id, name="")


@pytest.fixture
def config() -> ApplicationConfig:
    return ApplicationConfig(drive=DriveConfig(
        client_id="id", client_secret="secret", refresh_token="token", root_folder_id="root"
    ))


class TestApplicationStartup:
    """Test cases for ApplicationStartup."""

    def test_services_unavailable_before_configuration(self, config) -> None:
        startup = ApplicationStartup(config)

        with pytest.raises(RuntimeError, match="not configured"):
            startup.broker

    async def test_configure_builds_google_drive_provider(self, config) -> None:
        startup = ApplicationStartup(config)

        await startup.configure_services()

        assert isinstance(startup.provider, GoogleDriveProvider)
        assert isinstance(startup.broker, SessionBroker)
        assert isinstance(startup.directory, FolderDirectory)

    async def test_configure_is_idempotent(self, config) -> None:
        startup = ApplicationStartup(config, provider=MockProviderComponent())

        await startup.configure_services()
        broker = startup.broker
        await startup.configure_services()

        assert startup.broker is broker

    async def test_start_and_stop(self, config) -> None:
        provider = MockProviderComponent()
        startup = ApplicationStartup(config, provider=provider)

        await startup.start_application()
        await startup.stop_application()

        assert provider.events == ["start", "stop"]

    async def test_failed_start_propagates(self, config) -> None:
        provider = MockProviderComponent()
        provider.should_fail_start = True
        startup = ApplicationStartup(config, provider=provider)

        with pytest.raises(RuntimeError, match="Mock start failure"):
            await startup.start_application()

        assert provider.events == ["start"]

    async def test_stop_errors_are_contained(self, config) -> None:
        provider = MockProviderComponent()
        provider.should_fail_stop = True
        startup = ApplicationStartup(config, provider=provider)
        await startup.start_application()

        await startup.stop_application()

        assert provider.events == ["start", "stop"]

    async def test_check_health(self, config) -> None:
        startup = ApplicationStartup(config, provider=MockProviderComponent())
        await startup.configure_services()

        health = await startup.check_health()

        assert health == {
            "healthy": True,
            "components": {"MockProvider": {"healthy": True, "status": "running", "details": {}}}
        }

    async def test_check_health_failure(self, config) -> None:
        provider = MockProviderComponent()
        provider.healthy = False
        startup = ApplicationStartup(config, provider=provider)
        await startup.configure_services()

        health = await startup.check_health()

        assert health["healthy"] is False
        assert health["components"]["MockProvider"]["details"] == {"error": "health probe failed"}

    async def test_debug_identity_passed_to_broker(self, config) -> None:
        config.debug = True
        startup = ApplicationStartup(config, provider=MockProviderComponent())

        await startup.configure_services()

        assert startup.broker._identity == "svc@example.com"
        assert startup.broker._debug is True
