"""Workspace directory layout: ``<root>/<workspace>/agents/<agent_id>/``.

The root comes from the ``WORKSPACE_ROOT`` environment variable and defaults
to ``.workspace`` relative to the current directory.
"""

import os
import uuid
from pathlib import Path
from typing import Union


def workspace_root() -> Path:
    """Root directory holding all workspaces."""
    return Path(os.environ.get("WORKSPACE_ROOT", ".workspace"))


def workspace_dir(workspace_name: str) -> Path:
    """Directory of one workspace: ``<root>/<workspace_name>``."""
    return workspace_root() / workspace_name


def workspace_agents_dir(workspace_name: str) -> Path:
    """Agents directory of a workspace: ``<root>/<workspace_name>/agents``."""
    return workspace_dir(workspace_name) / "agents"


def agent_dir(workspace_name: str, agent_id: uuid.UUID) -> Path:
    """Directory of one agent inside a workspace."""
    return workspace_agents_dir(workspace_name) / str(agent_id)


def agent_memory_dir(workspace_name: str, agent_id: uuid.UUID) -> Path:
    """Memory storage directory of one agent."""
    return agent_dir(workspace_name, agent_id) / "memory"


def ensure_dir(path: Union[str, os.PathLike]) -> None:
    """Create ``path`` and any missing parents."""
    Path(path).mkdir(parents=True, exist_ok=True)