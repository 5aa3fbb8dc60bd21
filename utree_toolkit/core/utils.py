from __future__ import annotations

"""Simple reusable helper functions.

These helpers are side-effect-free and contain no disk I/O; they are shared by
the name decoder, the node factory and the localization layer.
"""

import re
from typing import List, Optional, Tuple

__all__ = [
    "NAME_SEPARATOR",
    "ANSWER_SEPARATOR",
    "split_name",
    "join_name",
    "apply_markup",
    "split_answer",
    "parse_int",
    "local_name",
]

NAME_SEPARATOR = "~"
ANSWER_SEPARATOR = "Answer="

_LINE_BREAK_RE = re.compile(r"\{br\}", re.IGNORECASE)


def split_name(raw_name: Optional[str]) -> List[str]:
    """Split a raw node name into its ``~``-separated components.

    ``None`` is treated as an empty name and yields a single empty component,
    mirroring ``"".split("~")``.
    """
    return (raw_name or "").split(NAME_SEPARATOR)


def join_name(components: List[str]) -> str:
    return NAME_SEPARATOR.join(components)


def apply_markup(text: str) -> str:
    """Rewrite the inline markup tokens of display text.

    Only ``{br}`` (any case) is recognised; it becomes a newline.

    Examples:
        >>> apply_markup("Line one{BR}Line two")
        'Line one\\nLine two'
    """
    if not text:
        return ""
    return _LINE_BREAK_RE.sub("\n", text)


def split_answer(text: str) -> Tuple[str, Optional[str]]:
    """Split display text on the first ``Answer=`` marker.

    Returns the question part and the stored answer, or ``(text, None)`` when
    the marker is absent.
    """
    question, separator, answer = text.partition(ANSWER_SEPARATOR)
    if not separator:
        return text, None
    return question, answer


def parse_int(value: Optional[str]) -> Optional[int]:
    """Return *value* as an int, or None when it is not an integer literal."""
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def local_name(tag: object) -> str:
    """Return the namespace-less name of an lxml tag (``{ns}task`` -> ``task``)."""
    if not isinstance(tag, str):
        # Comments and processing instructions carry callables as tags
        return ""
    return tag.rsplit("}", 1)[-1]
