"""Task records kept by the orchestrator and the views exposed to clients."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from agent_parallel.task_model import TaskItem, TaskPriority, TaskStatus

DEFAULT_TASK_NAME = "未命名任务"

_STATUS_LABELS: Dict[TaskStatus, str] = {
    TaskStatus.PUBLISHED: "等待中",
    TaskStatus.ACCEPTED: "已接取",
    TaskStatus.EXECUTING: "执行中",
    TaskStatus.SUBMITTED: "已提交",
    TaskStatus.REVIEWING: "审核中",
    TaskStatus.COMPLETED_SUCCESS: "已完成",
    TaskStatus.COMPLETED_FAILURE: "失败",
    TaskStatus.CANCELLED: "已取消",
}

_STATUS_GROUPS: Dict[TaskStatus, str] = {
    TaskStatus.PUBLISHED: "pending",
    TaskStatus.ACCEPTED: "running",
    TaskStatus.EXECUTING: "running",
    TaskStatus.SUBMITTED: "running",
    TaskStatus.REVIEWING: "running",
    TaskStatus.COMPLETED_SUCCESS: "completed",
    TaskStatus.COMPLETED_FAILURE: "failed",
    TaskStatus.CANCELLED: "failed",
}

_ACTIVE_STATUSES = frozenset(
    {
        TaskStatus.ACCEPTED,
        TaskStatus.EXECUTING,
        TaskStatus.SUBMITTED,
        TaskStatus.REVIEWING,
    }
)


def status_label(status: TaskStatus) -> str:
    """Human-readable label of a status."""
    return _STATUS_LABELS[status]


def status_group(status: TaskStatus) -> str:
    """Coarse group of a status: pending, running, completed or failed."""
    return _STATUS_GROUPS[status]


def is_active_status(status: TaskStatus) -> bool:
    """Whether a task in this status keeps its agent busy."""
    return status in _ACTIVE_STATUSES


def priority_to_db(priority: Optional[TaskPriority]) -> Optional[str]:
    return priority.value if priority is not None else None


def priority_from_db(value: Optional[str]) -> Optional[TaskPriority]:
    """Parse a stored priority; unknown or missing values give ``None``."""
    try:
        return TaskPriority(value)
    except ValueError:
        return None


def task_status_to_db(status: TaskStatus) -> str:
    return status.value


def task_status_from_db(value: str) -> TaskStatus:
    """Parse a stored status; anything unknown is ``PUBLISHED``."""
    try:
        return TaskStatus(value)
    except ValueError:
        return TaskStatus.PUBLISHED


def _opt_str(data: Mapping[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"`{key}` must be a string or null")
    return value


def _opt_str_list(data: Mapping[str, Any], key: str) -> Optional[List[str]]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"`{key}` must be a list of strings or null")
    return list(value)


@dataclass
class TaskView:
    """A task as presented to clients."""

    id: str
    task_key: str
    name: str
    description: str
    priority: Optional[TaskPriority]
    status: TaskStatus
    status_label: str
    status_group: str
    due_date: Optional[str]
    depends_on: List[str]
    required_mcp: List[str]
    assigned_agent_id: Optional[str]
    assigned_agent_name: Optional[str]
    created_at: str
    updated_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "task_key": self.task_key,
            "name": self.name,
            "description": self.description,
            "priority": priority_to_db(self.priority),
            "status": self.status.value,
            "status_label": self.status_label,
            "status_group": self.status_group,
            "due_date": self.due_date,
            "depends_on": list(self.depends_on),
            "required_mcp": list(self.required_mcp),
            "assigned_agent_id": self.assigned_agent_id,
            "assigned_agent_name": self.assigned_agent_name,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class CreateTaskInput:
    """Body of a request to create a task."""

    name: str
    task_key: Optional[str] = None
    description: str = ""
    priority: Optional[TaskPriority] = None
    due_date: Optional[str] = None
    depends_on: Optional[List[str]] = None
    required_mcp: Optional[List[str]] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CreateTaskInput":
        if not isinstance(data, Mapping):
            raise ValueError("task input must be an object")
        if "name" not in data:
            raise ValueError("missing field `name`")
        if not isinstance(data["name"], str):
            raise ValueError("`name` must be a string")
        description = data.get("description", "")
        if not isinstance(description, str):
            raise ValueError("`description` must be a string")
        priority = data.get("priority")
        return cls(
            name=data["name"],
            task_key=_opt_str(data, "task_key"),
            description=description,
            priority=None if priority is None else TaskPriority.parse(priority),
            due_date=_opt_str(data, "due_date"),
            depends_on=_opt_str_list(data, "depends_on"),
            required_mcp=_opt_str_list(data, "required_mcp"),
        )


@dataclass
class TaskRecord:
    """A task node of the DAG together with its assignment state."""

    id: uuid.UUID
    task_key: str
    name: str
    description: str
    status: TaskStatus
    created_at: datetime
    updated_at: datetime
    priority: Optional[TaskPriority] = None
    due_date: Optional[str] = None
    depends_on: List[str] = field(default_factory=list)
    required_mcp: List[str] = field(default_factory=list)
    mcp_execution_started: bool = False
    assigned_agent_id: Optional[uuid.UUID] = None
    assigned_agent_name: Optional[str] = None

    @classmethod
    def from_task_item(
        cls, task_id: uuid.UUID, task: TaskItem, now: Optional[datetime] = None
    ) -> "TaskRecord":
        """Build a fresh, unassigned record from a proposed task.

        The task key is the item's ``task_key``, else its ``id``, else the
        record id.
        """
        if now is None:
            now = datetime.now(timezone.utc)
        if task.task_key is not None:
            task_key = task.task_key
        elif task.id is not None:
            task_key = task.id
        else:
            task_key = str(task_id)
        return cls(
            id=task_id,
            task_key=task_key,
            name=task.name if task.name is not None else DEFAULT_TASK_NAME,
            description=task.description if task.description is not None else "",
            status=task.status if task.status is not None else TaskStatus.PUBLISHED,
            created_at=now,
            updated_at=now,
            priority=task.priority,
            due_date=task.due_date,
            depends_on=list(task.depends_on or []),
            required_mcp=list(task.required_mcp or []),
        )

    def to_view(self) -> TaskView:
        return TaskView(
            id=str(self.id),
            task_key=self.task_key,
            name=self.name,
            description=self.description,
            priority=self.priority,
            status=self.status,
            status_label=status_label(self.status),
            status_group=status_group(self.status),
            due_date=self.due_date,
            depends_on=list(self.depends_on),
            required_mcp=list(self.required_mcp),
            assigned_agent_id=(
                str(self.assigned_agent_id) if self.assigned_agent_id is not None else None
            ),
            assigned_agent_name=self.assigned_agent_name,
            created_at=self.created_at.isoformat(),
            updated_at=self.updated_at.isoformat(),
        )