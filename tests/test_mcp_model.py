import pytest

from agent_parallel.mcp_model import (
    McpAlreadyExists,
    McpConfig,
    McpConfigList,
    McpError,
    McpNotFound,
)


def test_stdio_constructor():
    cfg = McpConfig.stdio("fs", "npx", ["-y", "server"])
    assert cfg.mcp_type == "stdio"
    assert cfg.args == ["-y", "server"]
    assert cfg.env == {}
    assert cfg.always_allow == []


def test_builders_chain_and_mutate():
    cfg = McpConfig.stdio("fs", "npx", [])
    result = cfg.with_env("HOME", "/tmp").with_always_allow("read")
    assert result is cfg
    assert cfg.env == {"HOME": "/tmp"}
    assert cfg.always_allow == ["read"]


def test_validate_rejects_empty_name():
    with pytest.raises(McpError, match="MCP 名称不能为空"):
        McpConfig.stdio("", "npx", []).validate()


def test_validate_rejects_empty_command():
    with pytest.raises(McpError, match="命令不能为空"):
        McpConfig.stdio("fs", "", []).validate()


def test_to_dict_omits_empty_always_allow():
    data = McpConfig("fs", "npx").to_dict()
    assert "alwaysAllow" not in data
    assert data["type"] is None
    assert list(data) == ["name", "type", "command", "args", "env"]


def test_to_dict_includes_always_allow():
    data = McpConfig.stdio("fs", "npx", []).with_always_allow("read").to_dict()
    assert data["alwaysAllow"] == ["read"]
    assert data["type"] == "stdio"


def test_from_dict_defaults():
    cfg = McpConfig.from_dict({"name": "fs", "command": "npx"})
    assert cfg.mcp_type is None
    assert cfg.args == []
    assert cfg.env == {}


def test_config_round_trip():
    cfg = McpConfig.stdio("fs", "npx", ["a"]).with_env("K", "V").with_always_allow("x")
    assert McpConfig.from_dict(cfg.to_dict()) == cfg


def test_from_dict_missing_command():
    with pytest.raises(ValueError):
        McpConfig.from_dict({"name": "fs"})


def test_from_dict_bad_args():
    with pytest.raises(ValueError):
        McpConfig.from_dict({"name": "fs", "command": "npx", "args": "oops"})


def test_list_add_get_remove():
    registry = McpConfigList()
    cfg = McpConfig.stdio("fs", "npx", [])
    registry.add(cfg)
    assert registry.get("fs") is cfg
    assert registry.list() == [cfg]
    assert registry.remove("fs") is cfg
    assert registry.get("fs") is None
    assert len(registry) == len([])


def test_list_duplicate_add():
    registry = McpConfigList()
    registry.add(McpConfig.stdio("fs", "npx", []))
    with pytest.raises(McpAlreadyExists) as info:
        registry.add(McpConfig.stdio("fs", "other", []))
    assert info.value.detail == "fs"
    assert registry.get("fs").command == "npx"


def test_list_remove_missing():
    with pytest.raises(McpNotFound):
        McpConfigList().remove("ghost")


def test_list_round_trip():
    registry = McpConfigList()
    registry.add(McpConfig.stdio("a", "cmd-a", []))
    registry.add(McpConfig("b", "cmd-b"))
    data = registry.to_dict()
    assert set(data["mcpServers"]) == {"a", "b"}
    assert McpConfigList.from_dict(data) == registry


def test_list_from_dict_requires_key():
    with pytest.raises(ValueError):
        McpConfigList.from_dict({})