"""HTTP-style handlers for managing MCP configurations."""

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from agent_parallel.mcp_manager import McpManager
from agent_parallel.mcp_model import McpConfig, McpError

logger = logging.getLogger(__name__)


@dataclass
class ApiResponse:
    """An HTTP status code with a JSON-serialisable body."""

    status: int
    body: Any


def _error(status: int, message: str) -> ApiResponse:
    return ApiResponse(status, {"status": "error", "message": message})


def add_mcp_handler(manager: McpManager, payload: Mapping[str, Any]) -> ApiResponse:
    """POST /mcp"""
    try:
        config = McpConfig.from_dict(payload)
    except ValueError as exc:
        return _error(400, str(exc))
    try:
        added = manager.add(config)
    except McpError as exc:
        logger.error("添加 MCP 配置失败: %s", exc)
        return _error(400, str(exc))
    return ApiResponse(200, added.to_dict())


def delete_mcp_handler(manager: McpManager, name: str) -> ApiResponse:
    """DELETE /mcp/{name}"""
    try:
        manager.delete(name)
    except McpError as exc:
        logger.error("删除 MCP 配置失败: %s", exc)
        return _error(400, str(exc))
    return ApiResponse(200, {"status": "success", "message": "MCP 配置删除成功"})


def get_mcp_handler(manager: McpManager, name: str) -> ApiResponse:
    """GET /mcp/{name}"""
    try:
        config = manager.get(name)
    except McpError as exc:
        logger.error("查询 MCP 配置失败: %s", exc)
        return _error(404, str(exc))
    return ApiResponse(200, config.to_dict())


def list_mcp_handler(manager: McpManager) -> ApiResponse:
    """GET /mcp"""
    try:
        configs = manager.list()
    except McpError as exc:
        logger.error("查询 MCP 配置列表失败: %s", exc)
        return _error(500, str(exc))
    return ApiResponse(200, [c.to_dict() for c in configs])