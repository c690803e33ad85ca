"""Workspace errors and agent descriptions."""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Tuple


class WorkspaceError(Exception):
    """A workspace operation failed."""

    prefix = "操作失败"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"{self.prefix}: {detail}")


class WorkspaceNotFound(WorkspaceError):
    """No workspace with the given name exists."""

    prefix = "未找到对应的工作区"


class WorkspaceAlreadyExists(WorkspaceError):
    """A workspace with the given name already exists."""

    prefix = "该工作区已存在"


class AgentKind(str, Enum):
    """Kind of agent, usable for routing or capability matching."""

    GENERAL = "general"
    CODE = "code"
    RESEARCH = "research"
    CUSTOM = "custom"

    def as_db_str(self) -> str:
        return self.value

    @classmethod
    def from_db_str(cls, value: str) -> "AgentKind":
        """Parse a stored value; anything unknown is ``GENERAL``."""
        try:
            return cls(value)
        except ValueError:
            return cls.GENERAL


@dataclass
class AgentInfo:
    """An agent belonging to an existing workspace."""

    id: uuid.UUID
    name: str
    kind: AgentKind
    workspace_name: str
    owner_username: str = ""
    mcp_list: List[str] = field(default_factory=list)

    @classmethod
    def create(cls, name: str, kind: AgentKind, workspace_name: str) -> "AgentInfo":
        """Create an agent with a freshly generated id."""
        return cls(uuid.uuid4(), name, kind, workspace_name)

    def display_name(self) -> str:
        return f"{self.workspace_name}:{self.id}:{self.name}"

    def as_pair(self) -> Tuple[uuid.UUID, str]:
        return self.id, self.name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "name": self.name,
            "kind": self.kind.value,
            "workspace_name": self.workspace_name,
            "owner_username": self.owner_username,
            "mcp_list": list(self.mcp_list),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AgentInfo":
        try:
            agent_id = uuid.UUID(str(data["id"]))
            name = data["name"]
            workspace_name = data["workspace_name"]
            owner_username = data["owner_username"]
        except KeyError as exc:
            raise ValueError(f"missing field `{exc.args[0]}`") from None
        kind = AgentKind(data.get("kind", AgentKind.GENERAL.value))
        mcp_list = data.get("mcp_list", [])
        if not all(isinstance(s, str) for s in (name, workspace_name, owner_username)):
            raise ValueError("name, workspace_name and owner_username must be strings")
        if not isinstance(mcp_list, list) or not all(isinstance(m, str) for m in mcp_list):
            raise ValueError("mcp_list must be a list of strings")
        return cls(agent_id, name, kind, workspace_name, owner_username, list(mcp_list))