"""
Tests for the session broker HTTP client.
"""

from typing import Any, Dict, List

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from drive_handoff.core.domain.models import Destination, SessionRequest
from drive_handoff.core.errors import BrokerRequestError, NetworkFailureError, ProviderProtocolError
from drive_handoff.infrastructure.clients.broker_client import SessionBrokerClient


@pytest.fixture
async def broker_server():
    """Broker stand-in; the file name selects the response."""
    bodies: List[Dict[str, Any]] = []

    async def upload(request: web.Request) -> web.Response:
        body = await request.json()
        bodies.append(body)
        if body.get("fileName") == "broken.txt":
            return web.json_response({"error": "MISSING CONFIG: GOOGLE_FOLDER_ID", "details": None}, status=500)
        if body.get("fileName") == "nourl.txt":
            return web.json_response({"folderId": "root"})
        if body.get("fileName") == "html.txt":
            return web.Response(status=502, text="<html>Bad gateway</html>")
        return web.json_response({
            "uploadUrl": "https://upload.example/1",
            "folderId": body.get("folderId") or "root",
        })

    async def folders(request: web.Request) -> web.Response:
        return web.json_response({"folders": [
            {"id": "F1", "name": "Docs"},
            {"id": "", "name": "Ghost"},
            {"id": "F2", "name": ""},
        ]})

    app = web.Application()
    app.router.add_post("/upload", upload)
    app.router.add_get("/folders", folders)

    server = TestServer(app)
    await server.start_server()
    yield str(server.make_url("/")), bodies
    await server.close()


class TestSessionBrokerClient:
    """Test cases for SessionBrokerClient."""

    async def test_request_session_with_folder(self, broker_server) -> None:
        base_url, bodies = broker_server

        async with SessionBrokerClient(base_url) as client:
            grant = await client.request_session(SessionRequest(
                file_name="a.txt", file_type="text/plain", file_size=10,
                destination=Destination.existing("F1")
            ))

        assert grant.upload_url == "https://upload.example/1"
        assert grant.folder_id == "F1"
        assert bodies == [{"fileName": "a.txt", "fileType": "text/plain", "fileSize": 10, "folderId": "F1"}]

    async def test_request_session_with_new_folder(self, broker_server) -> None:
        base_url, bodies = broker_server

        async with SessionBrokerClient(base_url) as client:
            await client.request_session(SessionRequest(
                file_name="a.txt", file_size=1, destination=Destination.new_folder("Reports")
            ))

        assert bodies[0]["newFolderName"] == "Reports"
        assert "folderId" not in bodies[0]
        assert bodies[0]["fileType"] == "application/octet-stream"

    async def test_root_destination_sends_no_folder(self, broker_server) -> None:
        base_url, bodies = broker_server

        async with SessionBrokerClient(base_url) as client:
            grant = await client.request_session(SessionRequest(file_name="a.txt", file_size=1))

        assert "folderId" not in bodies[0] and "newFolderName" not in bodies[0]
        assert grant.folder_id == "root"

    async def test_server_error_payload(self, broker_server) -> None:
        base_url, _ = broker_server

        async with SessionBrokerClient(base_url) as client:
            with pytest.raises(BrokerRequestError) as exc_info:
                await client.request_session(SessionRequest(file_name="broken.txt"))

        assert exc_info.value.message == "MISSING CONFIG: GOOGLE_FOLDER_ID"
        assert exc_info.value.status == 500

    async def test_non_json_error(self, broker_server) -> None:
        base_url, _ = broker_server

        async with SessionBrokerClient(base_url) as client:
            with pytest.raises(BrokerRequestError) as exc_info:
                await client.request_session(SessionRequest(file_name="html.txt"))

        assert exc_info.value.message == "Failed to create upload session."
        assert exc_info.value.status == 502

    async def test_missing_upload_url(self, broker_server) -> None:
        base_url, _ = broker_server

        async with SessionBrokerClient(base_url) as client:
            with pytest.raises(ProviderProtocolError) as exc_info:
                await client.request_session(SessionRequest(file_name="nourl.txt"))

        assert exc_info.value.message == "Missing uploadUrl from server."

    async def test_list_folders(self, broker_server) -> None:
        base_url, _ = broker_server

        async with SessionBrokerClient(base_url) as client:
            folders = await client.list_folders()

        assert [(f.id, f.name) for f in folders] == [("F1", "Docs"), ("F2", "Untitled")]

    async def test_unreachable_broker(self) -> None:
        async with SessionBrokerClient("http://127.0.0.1:1") as client:
            with pytest.raises(NetworkFailureError):
                await client.list_folders()
