"""Markdown fence stripping for LLM output."""

_JSON_FENCE = "```json"
_FENCE = "```"


def strip_markdown_fences(content: str) -> str:
    """Remove one leading and one trailing markdown code fence.

    The ``json`` tag is matched case-sensitively. Text without fences comes
    back trimmed and otherwise unchanged.
    """
    content = content.strip()
    if content.startswith(_JSON_FENCE):
        content = content[len(_JSON_FENCE):].strip()
    elif content.startswith(_FENCE):
        content = content[len(_FENCE):].strip()
    if content.endswith(_FENCE):
        content = content[: -len(_FENCE)].strip()
    return content
