import pytest

from agent_parallel.mcp_api import (
    add_mcp_handler,
    delete_mcp_handler,
    get_mcp_handler,
    list_mcp_handler,
)
from agent_parallel.mcp_manager import McpManager
from agent_parallel.mcp_model import McpConfig


@pytest.fixture
def manager(tmp_path):
    return McpManager(tmp_path)


PAYLOAD = {"name": "fs", "type": "stdio", "command": "npx", "args": ["server"]}


def test_add_returns_config(manager):
    response = add_mcp_handler(manager, PAYLOAD)
    assert response.status == 200
    assert response.body == McpConfig.from_dict(PAYLOAD).to_dict()
    assert manager.get("fs").command == "npx"


def test_add_duplicate_is_bad_request(manager):
    add_mcp_handler(manager, PAYLOAD)
    response = add_mcp_handler(manager, PAYLOAD)
    assert response.status == 400
    assert response.body["status"] == "error"
    assert "MCP 配置已存在" in response.body["message"]


def test_add_malformed_payload_is_bad_request(manager):
    response = add_mcp_handler(manager, {"name": "fs"})
    assert response.status == 400
    assert manager.list() == []


def test_add_empty_command_is_bad_request(manager):
    response = add_mcp_handler(manager, {"name": "fs", "command": ""})
    assert response.status == 400
    assert response.body["status"] == "error"


def test_get_existing_and_missing(manager):
    add_mcp_handler(manager, PAYLOAD)
    found = get_mcp_handler(manager, "fs")
    assert found.status == 200
    assert found.body["name"] == "fs"
    missing = get_mcp_handler(manager, "absent")
    assert missing.status == 404
    assert "MCP 配置未找到" in missing.body["message"]


def test_delete_success_and_missing(manager):
    add_mcp_handler(manager, PAYLOAD)
    response = delete_mcp_handler(manager, "fs")
    assert response.status == 200
    assert response.body == {"status": "success", "message": "MCP 配置删除成功"}
    again = delete_mcp_handler(manager, "fs")
    assert again.status == 400
    assert again.body["status"] == "error"


def test_list_returns_all(manager):
    add_mcp_handler(manager, PAYLOAD)
    add_mcp_handler(manager, {"name": "web", "command": "web-tool"})
    response = list_mcp_handler(manager)
    assert response.status == 200
    assert sorted(item["name"] for item in response.body) == ["fs", "web"]