"""Cleanup of JSON text wrapped in Markdown code fences."""


def clean_json_string(raw: str) -> str:
    """Strip surrounding whitespace and Markdown code fences from ``raw``."""
    text = raw.strip()
    if text.startswith("```json"):
        text = text[len("```json"):]
    elif text.startswith("```"):
        text = text[len("```"):]
    if text.endswith("```"):
        text = text[: -len("```")]
    return text.strip()