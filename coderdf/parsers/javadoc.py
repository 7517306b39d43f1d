"""
Reader of Javadoc comments.
"""
import re
from typing import Dict, List, Optional

from ..pipeline.handler import JavadocEntry

JAVADOC_START = "/**"
JAVADOC_END = "*/"

_LINE_PREFIX = re.compile(r"^\s*\*?\s?")
_TAG = re.compile(r"^@(\w+)\s*(.*)$")
_SENTENCE_END = re.compile(r"\.(\s|$)")


def is_javadoc(text: str) -> bool:
    return text.startswith(JAVADOC_START) and not text.startswith("/**/") and text.endswith(JAVADOC_END)


def read_javadoc(text: str, row: int = 0, column: int = 0) -> Optional[JavadocEntry]:
    """
    Read a documentation comment.

    The description runs until the first block tag. Its first sentence is the
    short description and the rest the long description. Each block tag keeps
    its text, continuation lines included, under ``@name``.

    Args:
        text: Comment text, delimiters included
        row: 1-based line of the comment
        column: 1-based column of the comment

    Returns:
        The entry, or None if ``text`` is not a documentation comment
    """
    if not is_javadoc(text):
        return None
    body = text[len(JAVADOC_START):-len(JAVADOC_END)]

    description: List[str] = []
    tags: Dict[str, List[str]] = {}
    current: Optional[List[str]] = None
    for raw_line in body.splitlines():
        line = _LINE_PREFIX.sub("", raw_line, count=1).strip()
        match = _TAG.match(line)
        if match:
            name, value = match.groups()
            current = tags.setdefault(f"@{name}", [])
            current.append(value)
        elif current is not None:
            if line:
                current[-1] = f"{current[-1]} {line}".strip()
        else:
            description.append(line)

    description_text = " ".join(line for line in description if line)
    match = _SENTENCE_END.search(description_text)
    if match:
        short_description = description_text[:match.start() + 1]
        long_description = description_text[match.end():].strip()
    else:
        short_description, long_description = description_text, ""
    return JavadocEntry(
        short_description=short_description,
        long_description=long_description,
        tags=tags,
        row=row,
        column=column,
    )
