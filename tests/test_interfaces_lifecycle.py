"""
Tests for lifecycle interfaces.

The provider client, transfer engine and broker client all implement
IComponent so startup can start, stop and probe them uniformly.
"""

from typing import Any, Dict

import pytest

from drive_handoff.core.interfaces.lifecycle import (
    IComponent, IHealthCheckable, IStartable, IStoppable
)
from drive_handoff.infrastructure.clients.broker_client import SessionBrokerClient
from drive_handoff.infrastructure.config.models import DriveConfig
from drive_handoff.infrastructure.providers.google_drive import GoogleDriveProvider
from drive_handoff.infrastructure.transfer.engine import AiohttpTransferEngine


class IncompleteComponent(IComponent):
    """Component missing the name property."""

    async def start(self) -> None:
        pass

    async def stop(self) -> None:
        pass

    async def check_health(self) -> Dict[str, Any]:
        return {"healthy": True, "status": "running", "details": {}}


class TestLifecycleInterfaces:
    """Test cases for the lifecycle ABCs."""

    def test_component_requires_name(self) -> None:
        with pytest.raises(TypeError):
            IncompleteComponent()  # type: ignore[abstract]

    def test_component_hierarchy(self) -> None:
        assert issubclass(IComponent, IStartable)
        assert issubclass(IComponent, IStoppable)
        assert issubclass(IComponent, IHealthCheckable)

    @pytest.mark.parametrize("component", [
        GoogleDriveProvider(DriveConfig()),
        AiohttpTransferEngine(),
        SessionBrokerClient("http://localhost:8000"),
    ])
    async def test_network_components_start_and_stop(self, component: IComponent) -> None:
        await component.start()
        running = await component.check_health()
        await component.stop()
        stopped = await component.check_health()

        assert isinstance(component, IComponent)
        assert running["status"] == "running"
        assert stopped["status"] == "stopped"
