"""DAG task orchestration, MCP tool management and task notifications for parallel agents."""

__version__ = "0.0.1"