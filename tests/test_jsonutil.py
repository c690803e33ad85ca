import json

from agent_parallel.jsonutil import clean_json_string


def test_strips_json_fence():
    assert clean_json_string('```json\n{"a": 1}\n```') == '{"a": 1}'


def test_strips_plain_fence():
    assert clean_json_string("```\n[1, 2]\n```") == "[1, 2]"


def test_plain_text_is_only_trimmed():
    assert clean_json_string('   {"x":2}  \n') == '{"x":2}'


def test_leading_fence_without_trailing_fence():
    assert clean_json_string('```json{"b":true}') == '{"b":true}'


def test_trailing_fence_only():
    assert clean_json_string('{"c": null}\n```') == '{"c": null}'


def test_bare_fence_becomes_empty():
    assert clean_json_string("```") == ""


def test_cleaned_output_parses():
    payload = {"is_task": True, "tasks": [{"name": "写报告"}]}
    raw = "\n```json\n" + json.dumps(payload, ensure_ascii=False) + "\n```\n"
    assert json.loads(clean_json_string(raw)) == payload


def test_idempotent():
    once = clean_json_string("```json\n[3]\n```")
    assert clean_json_string(once) == once