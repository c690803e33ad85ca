"""HTTP-style handlers for listing, reading and creating tasks."""

import uuid
from typing import Any, Mapping, Union

from agent_parallel.mcp_api import ApiResponse
from agent_parallel.orchestrator import DagOrchestrator
from agent_parallel.task_record import CreateTaskInput

TASK_NOT_FOUND = "任务不存在"


def list_tasks_handler(orchestrator: DagOrchestrator) -> ApiResponse:
    """GET /tasks"""
    return ApiResponse(200, [view.to_dict() for view in orchestrator.list_tasks()])


def get_task_handler(
    orchestrator: DagOrchestrator, task_id: Union[str, uuid.UUID]
) -> ApiResponse:
    """GET /tasks/{id}"""
    if not isinstance(task_id, uuid.UUID):
        try:
            task_id = uuid.UUID(str(task_id))
        except ValueError:
            return ApiResponse(404, TASK_NOT_FOUND)
    view = orchestrator.get_task(task_id)
    if view is None:
        return ApiResponse(404, TASK_NOT_FOUND)
    return ApiResponse(200, view.to_dict())


def create_task_handler(
    orchestrator: DagOrchestrator, payload: Mapping[str, Any]
) -> ApiResponse:
    """POST /tasks"""
    try:
        task_input = CreateTaskInput.from_dict(payload)
    except ValueError as exc:
        return ApiResponse(400, str(exc))
    return ApiResponse(200, orchestrator.create_task(task_input).to_dict())