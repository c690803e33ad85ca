"""Task descriptions and the classification responses that carry them."""

import json
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def parse(cls, value: str) -> "TaskPriority":
        """Parse a priority, accepting the usual spellings; raise ValueError otherwise."""
        try:
            return _PRIORITY_ALIASES[value]
        except (KeyError, TypeError):
            raise ValueError(f"unknown task priority: {value!r}") from None


_PRIORITY_ALIASES: Dict[str, TaskPriority] = {}
for _p in TaskPriority:
    for _spelling in (_p.value, _p.value.capitalize(), _p.value.upper()):
        _PRIORITY_ALIASES[_spelling] = _p
for _spelling in ("Normal", "NORMAL", "normal"):
    _PRIORITY_ALIASES[_spelling] = TaskPriority.MEDIUM


class TaskStatus(str, Enum):
    PUBLISHED = "published"
    ACCEPTED = "accepted"
    EXECUTING = "executing"
    SUBMITTED = "submitted"
    REVIEWING = "reviewing"
    COMPLETED_SUCCESS = "completed_success"
    COMPLETED_FAILURE = "completed_failure"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value: str) -> "TaskStatus":
        """Parse a snake_case status; raise ValueError otherwise."""
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"unknown task status: {value!r}") from None


def _field(data: Mapping[str, Any], primary: str, alias: Optional[str] = None) -> Any:
    if alias is not None and primary in data and alias in data:
        raise ValueError(f"duplicate field `{primary}`")
    if primary in data:
        return data[primary]
    return data.get(alias) if alias is not None else None


def _opt_str(value: Any, key: str) -> Optional[str]:
    if value is not None and not isinstance(value, str):
        raise ValueError(f"`{key}` must be a string or null")
    return value


def _opt_str_list(value: Any, key: str) -> Optional[List[str]]:
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"`{key}` must be a list of strings or null")
    return list(value)


def _require_str(data: Mapping[str, Any], key: str) -> str:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    if not isinstance(data[key], str):
        raise ValueError(f"`{key}` must be a string")
    return data[key]


def _require_bool(data: Mapping[str, Any], key: str) -> bool:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    if not isinstance(data[key], bool):
        raise ValueError(f"`{key}` must be a boolean")
    return data[key]


def _load_object(json_str: str) -> Mapping[str, Any]:
    data = json.loads(json_str)
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object")
    return data


def _dump(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


@dataclass
class TaskItem:
    """One task as proposed by the classifier; every field is optional."""

    id: Optional[str] = None
    task_key: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[str] = None
    depends_on: Optional[List[str]] = None
    required_mcp: Optional[List[str]] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TaskItem":
        if not isinstance(data, Mapping):
            raise ValueError("task item must be an object")
        priority = _field(data, "priority")
        status = _field(data, "status")
        return cls(
            id=_opt_str(_field(data, "id", "task_id"), "id"),
            task_key=_opt_str(_field(data, "task_key"), "task_key"),
            name=_opt_str(_field(data, "name", "task"), "name"),
            description=_opt_str(
                _field(data, "description", "task_description"), "description"
            ),
            priority=None if priority is None else TaskPriority.parse(priority),
            status=None if status is None else TaskStatus.parse(status),
            due_date=_opt_str(_field(data, "due_date"), "due_date"),
            depends_on=_opt_str_list(_field(data, "depends_on"), "depends_on"),
            required_mcp=_opt_str_list(_field(data, "required_mcp"), "required_mcp"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "task_key": self.task_key,
            "name": self.name,
            "description": self.description,
            "priority": self.priority.value if self.priority is not None else None,
            "status": self.status.value if self.status is not None else None,
            "due_date": self.due_date,
            "depends_on": list(self.depends_on) if self.depends_on is not None else None,
            "required_mcp": (
                list(self.required_mcp) if self.required_mcp is not None else None
            ),
        }


@dataclass
class MessageClassificationResponse:
    """Whether a message is a task request, and the tasks it holds."""

    is_task: bool = False
    reason: Optional[str] = None
    tasks: Optional[List[TaskItem]] = None

    def task_count(self) -> int:
        return len(self.tasks) if self.tasks else 0

    def has_tasks(self) -> bool:
        return bool(self.tasks)

    def to_json(self) -> str:
        return _dump(
            {
                "is_task": self.is_task,
                "reason": self.reason,
                "tasks": (
                    [t.to_dict() for t in self.tasks] if self.tasks is not None else None
                ),
            }
        )

    @classmethod
    def from_json(cls, json_str: str) -> "MessageClassificationResponse":
        data = _load_object(json_str)
        tasks = data.get("tasks")
        if tasks is not None and not isinstance(tasks, list):
            raise ValueError("`tasks` must be a list or null")
        return cls(
            is_task=_require_bool(data, "is_task"),
            reason=_opt_str(data.get("reason"), "reason"),
            tasks=None if tasks is None else [TaskItem.from_dict(t) for t in tasks],
        )


@dataclass
class TaskDetail:
    """A titled task with a detailed description."""

    task_id: str
    task: str
    task_description: str

    @classmethod
    def with_uuid(cls, task: str, task_description: str) -> "TaskDetail":
        """Create a task detail with a random UUID as its id."""
        return cls(str(uuid.uuid4()), task, task_description)

    def to_dict(self) -> Dict[str, str]:
        return {
            "task_id": self.task_id,
            "task": self.task,
            "task_description": self.task_description,
        }

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> "TaskDetail":
        if not isinstance(data, Mapping):
            raise ValueError("task detail must be an object")
        return cls(
            _require_str(data, "task_id"),
            _require_str(data, "task"),
            _require_str(data, "task_description"),
        )


@dataclass
class IntentClassificationResponse:
    """Intent classification with a confidence score and a reply."""

    is_task: bool = False
    confidence: float = 0.0
    content: str = ""
    reason: str = ""
    tasks: Optional[List[TaskDetail]] = None

    def is_valid(self, confidence_threshold: float) -> bool:
        return self.confidence >= confidence_threshold

    def task_count(self) -> int:
        return len(self.tasks) if self.tasks else 0

    def has_tasks(self) -> bool:
        return bool(self.tasks)

    def to_json(self) -> str:
        return _dump(
            {
                "is_task": self.is_task,
                "confidence": self.confidence,
                "content": self.content,
                "reason": self.reason,
                "tasks": (
                    [t.to_dict() for t in self.tasks] if self.tasks is not None else None
                ),
            }
        )

    @classmethod
    def from_json(cls, json_str: str) -> "IntentClassificationResponse":
        data = _load_object(json_str)
        if "confidence" not in data:
            raise ValueError("missing field `confidence`")
        confidence = data["confidence"]
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
            raise ValueError("`confidence` must be a number")
        tasks = data.get("tasks")
        if tasks is not None and not isinstance(tasks, list):
            raise ValueError("`tasks` must be a list or null")
        return cls(
            is_task=_require_bool(data, "is_task"),
            confidence=float(confidence),
            content=_require_str(data, "content"),
            reason=_require_str(data, "reason"),
            tasks=None if tasks is None else [TaskDetail._from_dict(t) for t in tasks],
        )