import json

import pytest

from fakes import FakeLauncher, FakeSession
from proton_docs_mcp.config import ServerConfig
from proton_docs_mcp.factory import build_orchestrator
from proton_docs_mcp.server import DocsMCPServer

DOC_URL = "https://docs.proton.me/doc?mode=open&volumeId=v1&linkId=l1"


def build_server(session: FakeSession) -> tuple[DocsMCPServer, FakeLauncher]:
    config = ServerConfig.model_validate({"notifications": {"channel": "none"}})
    launcher = FakeLauncher(session)
    return DocsMCPServer(config, build_orchestrator(config, launcher=launcher)), launcher


def test_tools_publish_camel_case_schemas():
    server, _ = build_server(FakeSession())

    tools = {tool.name: tool for tool in server.tools()}

    assert len(tools) == 15
    schema = tools["create_list"].inputSchema
    assert set(schema["required"]) == {"documentUrl", "listType", "items"}
    assert "listType" in schema["properties"]
    listing = tools["list_documents"].inputSchema
    assert listing["properties"]["limit"]["default"] == 20
    assert "required" not in listing


@pytest.mark.asyncio
async def test_dispatch_success_returns_json_payload():
    session = FakeSession(all_present=True)
    session.text['[data-testid="main-editor"]'] = "Body"
    server, _ = build_server(session)

    result = await server.dispatch("read_document", {"documentUrl": DOC_URL})

    assert result.isError is False
    body = json.loads(result.content[0].text)
    assert body["documentUrl"] == DOC_URL
    assert body["text"] == "Body"


@pytest.mark.asyncio
async def test_dispatch_failure_is_flagged_with_error_code():
    server, _ = build_server(FakeSession())

    result = await server.dispatch("read_document", {"documentUrl": DOC_URL})

    assert result.isError is True
    error = json.loads(result.content[0].text)["error"]
    assert error["operation"] == "read_document"
    assert error["code"] == "surface_not_found"
    assert error["message"].startswith("Failed to read document:")


@pytest.mark.asyncio
async def test_invalid_arguments_are_rejected_before_launch():
    server, launcher = build_server(FakeSession(all_present=True))

    result = await server.dispatch("share_document", {"documentUrl": DOC_URL, "email": "nope"})

    assert result.isError is True
    error = json.loads(result.content[0].text)["error"]
    assert error["code"] == "invalid_params"
    assert error["details"][0]["loc"] == ["email"]
    assert launcher.calls == 0


@pytest.mark.asyncio
async def test_unknown_tool_is_reported():
    server, launcher = build_server(FakeSession())

    result = await server.dispatch("rename_document", {})

    assert result.isError is True
    assert json.loads(result.content[0].text)["error"]["code"] == "unknown_tool"
    assert launcher.calls == 0
