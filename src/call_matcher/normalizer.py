# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Whitespace normalization for marker fields."""

import re

_LINE_CONTINUATION = "\\\n"
_WHITESPACE = frozenset(" \t\n\r\v\f")
_LEADING_SEPARATOR = re.compile(r"^[ \t\n\r\v\f]*,[ \t\n\r\v\f]*")


def normalize_field(raw: str, is_param: bool = False) -> str:
    """Normalize a raw marker field for display.

    Line continuations are removed first. Whitespace runs outside double-quoted
    strings collapse to one space; string contents are kept verbatim, and an
    unterminated string consumes the rest of the input.

    Args:
        raw: Field text as sliced from the source.
        is_param: Whether the text is a parameter section. Parameter sections
            also lose one leading separator comma.

    Returns:
        Normalized field text without leading or trailing whitespace.
    """
    text = raw.replace(_LINE_CONTINUATION, "")
    collapsed = _collapse_whitespace(text)
    if is_param:
        collapsed = _LEADING_SEPARATOR.sub("", collapsed, count=1)
    return collapsed.strip(" \t\n\r\v\f")


def _collapse_whitespace(text: str) -> str:
    result: list[str] = []
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char == '"' and _is_unescaped(text, index):
            result.append(char)
            index += 1
            while index < length:
                char = text[index]
                result.append(char)
                index += 1
                if char == '"' and _is_unescaped(text, index - 1):
                    break
        elif char in _WHITESPACE:
            result.append(" ")
            while index < length and text[index] in _WHITESPACE:
                index += 1
        else:
            result.append(char)
            index += 1
    return "".join(result)


def _is_unescaped(text: str, index: int) -> bool:
    """Return whether the quote at ``index`` is not preceded by a backslash."""
    return index == 0 or text[index - 1] != "\\"
