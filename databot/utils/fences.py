"""Fenced code block extraction for generated text."""

import re

# Opening fence must start a line; only whitespace may follow the tag.
_FENCE_PATTERN = re.compile(
    r"^[ \t]*```[ \t]*(?P<lang>[\w+#.-]*)[ \t]*\n(?P<body>.*?)```",
    re.DOTALL | re.MULTILINE,
)
_FENCE_LANGUAGE_TAG = re.compile(r"```[ \t]*[\w+#.-]+")


def extract_code_blocks(text: str, language: str = "sql") -> list[str]:
    """
    Return the non-empty bodies of fenced blocks tagged with ``language``, in order.

    Matching of the tag is case-insensitive. Untagged fences, fences with
    another tag and inline mentions of a fence are skipped. Bodies are
    stripped of surrounding whitespace.
    """
    if not text:
        return []

    wanted = language.lower()
    blocks = []
    for match in _FENCE_PATTERN.finditer(text):
        body = match.group("body").strip()
        if match.group("lang").lower() == wanted and body:
            blocks.append(body)
    return blocks


def strip_fence_languages(text: str) -> str:
    """Reduce language-tagged opening fences (```sql) to plain fences (```)."""
    return _FENCE_LANGUAGE_TAG.sub("```", text)
