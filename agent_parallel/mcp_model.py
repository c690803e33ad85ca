"""MCP tool configurations and their in-memory registry."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


class McpError(Exception):
    """An MCP configuration operation failed."""

    prefix = "操作失败"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"{self.prefix}: {detail}")


class McpNotFound(McpError):
    """No MCP configuration with the given name exists."""

    prefix = "MCP 配置未找到"


class McpAlreadyExists(McpError):
    """An MCP configuration with the given name already exists."""

    prefix = "MCP 配置已存在"


def _string_list(value: Any, key: str) -> List[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"`{key}` must be a list of strings")
    return list(value)


@dataclass
class McpConfig:
    """How to start one MCP tool."""

    name: str
    command: str
    mcp_type: Optional[str] = None
    args: List[str] = field(default_factory=list)
    env: Dict[str, str] = field(default_factory=dict)
    always_allow: List[str] = field(default_factory=list)

    @classmethod
    def stdio(cls, name: str, command: str, args: Optional[List[str]] = None) -> "McpConfig":
        """A configuration of type ``stdio``."""
        return cls(name=name, command=command, mcp_type="stdio", args=list(args or []))

    def with_env(self, key: str, value: str) -> "McpConfig":
        self.env[key] = value
        return self

    def with_always_allow(self, operation: str) -> "McpConfig":
        self.always_allow.append(operation)
        return self

    def validate(self) -> None:
        """Raise :class:`McpError` if the name or command is empty."""
        if not self.name:
            raise McpError("MCP 名称不能为空")
        if not self.command:
            raise McpError("命令不能为空")

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "type": self.mcp_type,
            "command": self.command,
            "args": list(self.args),
            "env": dict(self.env),
        }
        if self.always_allow:
            data["alwaysAllow"] = list(self.always_allow)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "McpConfig":
        if not isinstance(data, Mapping):
            raise ValueError("MCP configuration must be an object")
        for key in ("name", "command"):
            if key not in data:
                raise ValueError(f"missing field `{key}`")
            if not isinstance(data[key], str):
                raise ValueError(f"`{key}` must be a string")
        mcp_type = data.get("type")
        if mcp_type is not None and not isinstance(mcp_type, str):
            raise ValueError("`type` must be a string or null")
        env = data.get("env", {})
        if not isinstance(env, Mapping) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in env.items()
        ):
            raise ValueError("`env` must map strings to strings")
        return cls(
            name=data["name"],
            command=data["command"],
            mcp_type=mcp_type,
            args=_string_list(data.get("args", []), "args"),
            env=dict(env),
            always_allow=_string_list(data.get("alwaysAllow", []), "alwaysAllow"),
        )


@dataclass
class McpConfigList:
    """MCP configurations keyed by name."""

    servers: Dict[str, McpConfig] = field(default_factory=dict)

    def add(self, config: McpConfig) -> None:
        if config.name in self.servers:
            raise McpAlreadyExists(config.name)
        self.servers[config.name] = config

    def remove(self, name: str) -> McpConfig:
        try:
            return self.servers.pop(name)
        except KeyError:
            raise McpNotFound(name) from None

    def get(self, name: str) -> Optional[McpConfig]:
        return self.servers.get(name)

    def list(self) -> List[McpConfig]:
        return list(self.servers.values())

    def __len__(self) -> int:
        return len(self.servers)

    def __contains__(self, name: object) -> bool:
        return name in self.servers

    def to_dict(self) -> Dict[str, Any]:
        return {"mcpServers": {name: cfg.to_dict() for name, cfg in self.servers.items()}}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "McpConfigList":
        servers = data.get("mcpServers") if isinstance(data, Mapping) else None
        if not isinstance(servers, Mapping):
            raise ValueError("missing field `mcpServers`")
        return cls({name: McpConfig.from_dict(cfg) for name, cfg in servers.items()})