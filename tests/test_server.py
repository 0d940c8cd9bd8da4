"""Tests for the HTTP listing endpoint and the MCP listing tool."""

import asyncio
import json

import pytest
from starlette.testclient import TestClient

from rindex import server as server_module
from rindex.server import RIndexServer, build_response
from rindex.service import QueryOutcome

from conftest import EXAMPLE_HTTP_DATE


def _tool_result(result):
    # call_tool returns content blocks, or (content, structured) on newer SDKs
    content = result[0] if isinstance(result, tuple) else result
    return json.loads(content[0].text)


@pytest.fixture
def root(tmp_path, mixed_dir):
    (tmp_path / "readme.txt").write_text("hello")
    (tmp_path / "empty").mkdir()
    (tmp_path / "other").mkdir()
    (tmp_path / "other" / "only.bin").write_bytes(b"\x00" * 3)
    return tmp_path


@pytest.fixture
def server(root):
    instance = RIndexServer(str(root), workers=2)
    yield instance
    instance.close()


@pytest.fixture
def client(server):
    return TestClient(server.app(), raise_server_exceptions=False)


class TestBuildResponse:
    def test_success(self):
        response = build_response(QueryOutcome.success("[]", ()))
        assert response.status_code == 200
        assert response.media_type == "application/json"
        assert response.body == b"[]"

    def test_not_found(self):
        response = build_response(QueryOutcome.path_not_found())
        assert response.status_code == 404
        assert response.body == b"Path not found!"

    def test_not_directory(self):
        response = build_response(QueryOutcome.not_directory())
        assert response.status_code == 400
        assert response.body == b"Not a directory!"


class TestServerSetup:
    def test_missing_root_is_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            RIndexServer(str(tmp_path / "missing"))

    def test_workers_default_to_cpu_count(self, root, monkeypatch):
        monkeypatch.setattr(server_module, "default_worker_count", lambda: 3)
        instance = RIndexServer(str(root))
        try:
            assert instance.workers == 3
        finally:
            instance.close()


class TestAutoindexEndpoint:
    def test_mixed_listing(self, client):
        response = client.get("/mixed")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        assert response.json() == [
            {"type": "directory", "name": "b", "mtime": EXAMPLE_HTTP_DATE},
            {"type": "file", "name": "a.txt", "mtime": EXAMPLE_HTTP_DATE, "size": 10},
            {"type": "file", "name": "c.txt", "mtime": EXAMPLE_HTTP_DATE, "size": 0},
        ]

    def test_trailing_slash(self, client):
        assert client.get("/mixed/").json() == client.get("/mixed").json()

    def test_root_listing(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert [item["name"] for item in response.json()] == [
            "empty",
            "mixed",
            "other",
            "readme.txt",
        ]

    def test_empty_directory(self, client):
        response = client.get("/empty")
        assert response.status_code == 200
        assert response.text == "[]"

    def test_missing_path(self, client):
        response = client.get("/no/such/dir")
        assert response.status_code == 404
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "Path not found!"

    def test_regular_file(self, client):
        response = client.get("/readme.txt")
        assert response.status_code == 400
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "Not a directory!"

    def test_percent_encoded_path(self, root, client):
        (root / "with space").mkdir()
        (root / "with space" / "x").write_text("x")

        response = client.get("/with%20space")

        assert response.status_code == 200
        assert [item["name"] for item in response.json()] == ["x"]

    def test_encoded_traversal_is_not_found(self, client):
        response = client.get("/%2E%2E/%2E%2E/etc")
        assert response.status_code == 404

    def test_internal_error_hides_details(self, root, client, monkeypatch, caplog):
        secret_path = str(root / "mixed")

        def fail(*args, **kwargs):
            raise PermissionError(13, "Permission denied", secret_path)

        monkeypatch.setattr(server_module, "query_directory", fail)

        response = client.get("/mixed")

        assert response.status_code == 500
        assert response.text == "Internal Server Error"
        assert secret_path not in response.text
        assert secret_path in caplog.text

    def test_concurrent_requests_are_isolated(self, server):
        async def run():
            return await asyncio.gather(*[
                server.query(name) for name in ["mixed", "other"] * 10
            ])

        outcomes = asyncio.run(run())

        for index, outcome in enumerate(outcomes):
            names = [item["name"] for item in json.loads(outcome.body)]
            if index % 2 == 0:
                assert names == ["b", "a.txt", "c.txt"]
            else:
                assert names == ["only.bin"]


class TestListDirectoryTool:
    def test_tool_is_registered(self, server):
        tools = asyncio.run(server.mcp.list_tools())
        assert "list_directory" in [tool.name for tool in tools]

    def test_success(self, server):
        result = asyncio.run(server.mcp.call_tool("list_directory", {"path": "mixed"}))
        result = _tool_result(result)
        assert result["success"] is True
        assert [item["name"] for item in result["data"]] == ["b", "a.txt", "c.txt"]

    def test_missing_path(self, server):
        result = asyncio.run(server.mcp.call_tool("list_directory", {"path": "nope"}))
        result = _tool_result(result)
        assert result == {"success": False, "error": "Path not found!", "path": "nope"}

    def test_not_a_directory(self, server):
        result = asyncio.run(server.mcp.call_tool("list_directory", {"path": "readme.txt"}))
        result = _tool_result(result)
        assert result == {"success": False, "error": "Not a directory!", "path": "readme.txt"}

    def test_internal_error(self, server, monkeypatch):
        def fail(*args, **kwargs):
            raise OSError("disk on fire")

        monkeypatch.setattr(server_module, "query_directory", fail)

        result = asyncio.run(server.mcp.call_tool("list_directory", {"path": "mixed"}))
        result = _tool_result(result)

        assert result == {"success": False, "error": "Internal Server Error", "path": "mixed"}
