import json
import uuid

import pytest

from agent_parallel.task_model import (
    IntentClassificationResponse,
    MessageClassificationResponse,
    TaskDetail,
    TaskItem,
    TaskPriority,
    TaskStatus,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("low", TaskPriority.LOW),
        ("LOW", TaskPriority.LOW),
        ("Medium", TaskPriority.MEDIUM),
        ("Normal", TaskPriority.MEDIUM),
        ("normal", TaskPriority.MEDIUM),
        ("HIGH", TaskPriority.HIGH),
        ("Critical", TaskPriority.CRITICAL),
    ],
)
def test_priority_aliases(text, expected):
    assert TaskPriority.parse(text) is expected


@pytest.mark.parametrize("text", ["urgent", "hIgh", ""])
def test_priority_rejects_unknown(text):
    with pytest.raises(ValueError):
        TaskPriority.parse(text)


def test_status_parse():
    assert TaskStatus.parse("completed_success") is TaskStatus.COMPLETED_SUCCESS


def test_status_rejects_other_case():
    with pytest.raises(ValueError):
        TaskStatus.parse("Published")


def test_task_item_aliases():
    item = TaskItem.from_dict(
        {"task_id": "t1", "task": "写报告", "task_description": "整理数据", "priority": "High"}
    )
    assert item.id == "t1"
    assert item.name == "写报告"
    assert item.description == "整理数据"
    assert item.priority is TaskPriority.HIGH
    assert item.depends_on is None


def test_task_item_duplicate_alias_rejected():
    with pytest.raises(ValueError):
        TaskItem.from_dict({"id": "a", "task_id": "b"})


def test_task_item_bad_type_rejected():
    with pytest.raises(ValueError):
        TaskItem.from_dict({"depends_on": "a"})


def test_task_item_round_trip():
    item = TaskItem(
        id="t1",
        task_key="k1",
        name="n",
        description="d",
        priority=TaskPriority.CRITICAL,
        status=TaskStatus.ACCEPTED,
        due_date="2024-01-01",
        depends_on=["k0"],
        required_mcp=["fs"],
    )
    data = item.to_dict()
    assert data["priority"] == "critical"
    assert data["status"] == "accepted"
    assert TaskItem.from_dict(data) == item


def test_classification_from_json():
    payload = {
        "is_task": True,
        "reason": "用户请求",
        "tasks": [{"name": "a"}, {"task": "b", "depends_on": ["a"]}],
    }
    resp = MessageClassificationResponse.from_json(json.dumps(payload))
    assert resp.is_task is True
    assert resp.task_count() == len(payload["tasks"])
    assert resp.has_tasks()
    assert resp.tasks[1].name == "b"


def test_classification_empty_and_null_tasks():
    empty = MessageClassificationResponse.from_json('{"is_task": false, "tasks": []}')
    null = MessageClassificationResponse.from_json('{"is_task": false, "tasks": null}')
    assert not empty.has_tasks()
    assert not null.has_tasks()
    assert empty.task_count() == null.task_count() == len([])
    assert null.reason is None


def test_classification_round_trip_keeps_unicode():
    resp = MessageClassificationResponse(True, "原因", [TaskItem(name="任务")])
    text = resp.to_json()
    assert "原因" in text
    assert MessageClassificationResponse.from_json(text) == resp


def test_classification_default():
    resp = MessageClassificationResponse()
    assert resp.is_task is False
    assert resp.tasks is None


def test_classification_missing_is_task():
    with pytest.raises(ValueError):
        MessageClassificationResponse.from_json('{"reason": "x"}')


def test_classification_invalid_json():
    with pytest.raises(ValueError):
        MessageClassificationResponse.from_json("not json")


def test_task_detail_with_uuid():
    a = TaskDetail.with_uuid("t", "d")
    b = TaskDetail.with_uuid("t", "d")
    assert str(uuid.UUID(a.task_id)) == a.task_id
    assert a.task_id != b.task_id
    assert a.to_dict()["task_description"] == "d"


def test_intent_is_valid():
    resp = IntentClassificationResponse(True, 0.5, "ok", "r")
    assert resp.is_valid(0.5)
    assert resp.is_valid(0.25)
    assert not resp.is_valid(0.75)


def test_intent_round_trip():
    resp = IntentClassificationResponse(
        True, 0.75, "好的", "总任务", [TaskDetail("1", "a", "b"), TaskDetail("2", "c", "d")]
    )
    parsed = IntentClassificationResponse.from_json(resp.to_json())
    assert parsed == resp
    assert parsed.task_count() == len(resp.tasks)
    assert parsed.has_tasks()


def test_intent_default_and_missing_field():
    default = IntentClassificationResponse()
    assert not default.has_tasks()
    assert default.confidence == 0.0
    with pytest.raises(ValueError):
        IntentClassificationResponse.from_json('{"is_task": true, "confidence": 1}')