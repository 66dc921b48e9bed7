"""Helpers shared by prompt consumers."""

import re

_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*\n?(.*?)\n?\s*```", re.DOTALL)


def strip_markdown_code_blocks(text: str) -> str:
    """Return the payload of the first fenced block, or the stripped text.

    Gemini sometimes wraps JSON answers in a ```json fence even in JSON
    response mode, occasionally with a sentence before or after it.
    """
    text = text.strip()
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    return text
