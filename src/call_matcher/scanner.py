# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Marker scanning and argument extraction."""

import logging
from collections.abc import Sequence

from call_matcher.model import MARKER_SHAPES, MarkerKind, MatchRecord, RawMatch
from call_matcher.normalizer import normalize_field

logger = logging.getLogger(__name__)

PARAM_SEPARATOR = "/"
_TRAILING_WHITESPACE = " \t\n\r\v\f"


def scan_document(lines: Sequence[str]) -> list[MatchRecord]:
    """Scan a document given as a sequence of lines.

    Args:
        lines: Document lines without line terminators.

    Returns:
        Match records in source order.
    """
    return scan_text("\n".join(lines))


def scan_text(text: str) -> list[MatchRecord]:
    """Scan flat text for markers and build normalized records.

    Malformed markers are skipped; this function never raises on content.

    Args:
        text: Full document text with ``\\n`` line separators.

    Returns:
        Match records in source order.
    """
    records = [_build_record(text, raw) for raw in find_raw_matches(text)]
    logger.debug(f"Scan completed (chars={len(text)} records={len(records)})")
    return records


def find_raw_matches(text: str) -> list[RawMatch]:
    """Locate balanced, well-formed markers without normalizing them.

    Args:
        text: Full document text.

    Returns:
        Raw matches in source order.
    """
    matches: list[RawMatch] = []
    cursor = 0
    while True:
        found = find_next_marker(text, cursor)
        if found is None:
            break
        kind, start = found
        keyword_end = start + len(MARKER_SHAPES[kind].keyword)
        end = find_closing_paren(text, keyword_end)
        if end is None:
            logger.debug(f"Skipping unterminated marker (kind={kind} offset={start})")
            cursor = keyword_end
            continue
        raw = split_fields(text, kind, start, end)
        if raw is None:
            logger.debug(
                f"Skipping marker without parameter section (kind={kind} offset={start})"
            )
        else:
            matches.append(raw)
        cursor = end + 1
    return matches


def find_next_marker(text: str, cursor: int) -> tuple[MarkerKind, int] | None:
    """Find the earliest marker opener at or after ``cursor``.

    Args:
        text: Full document text.
        cursor: Offset to search from.

    Returns:
        The marker kind and keyword offset, or ``None`` when no marker remains.
    """
    best: tuple[MarkerKind, int] | None = None
    for kind, shape in MARKER_SHAPES.items():
        index = text.find(shape.opener, cursor)
        if index != -1 and (best is None or index < best[1]):
            best = (kind, index)
    return best


def find_closing_paren(text: str, open_index: int) -> int | None:
    """Return the offset of the parenthesis closing the one at ``open_index``.

    Args:
        text: Full document text.
        open_index: Offset of an opening parenthesis.

    Returns:
        Offset of the matching ``)``, or ``None`` if the text ends first.
    """
    depth = 1
    for index in range(open_index + 1, len(text)):
        char = text[index]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index
    return None


def split_fields(text: str, kind: MarkerKind, start: int, end: int) -> RawMatch | None:
    """Split a balanced marker span into leading fields and parameters.

    All leading fields but the last end at a top-level comma. The last one ends
    at the first ``/`` after the previous boundary; that search ignores nesting.
    The parameter section runs from there to the closing parenthesis, minus the
    closing ``/``.

    Args:
        text: Full document text.
        kind: Marker kind found at ``start``.
        start: Offset of the marker keyword.
        end: Offset of the matching closing parenthesis.

    Returns:
        The raw match, or ``None`` when a field boundary or the separator is
        missing.
    """
    shape = MARKER_SHAPES[kind]
    body = text[start + len(shape.opener) : end]
    fields: list[str] = []
    position = 0
    for _ in shape.field_names[:-1]:
        comma = _find_top_level_comma(body, position)
        if comma is None:
            return None
        fields.append(body[position:comma])
        position = comma + 1

    separator = body.find(PARAM_SEPARATOR, position)
    if separator == -1:
        return None
    fields.append(body[position:separator])

    raw_params = body[separator + 1 :]
    trimmed = raw_params.rstrip(_TRAILING_WHITESPACE)
    if trimmed.endswith(PARAM_SEPARATOR):
        raw_params = trimmed[: -len(PARAM_SEPARATOR)]
    return RawMatch(
        kind=kind,
        start=start,
        end=end,
        raw_fields=tuple(fields),
        raw_params=raw_params,
    )


def _find_top_level_comma(body: str, position: int) -> int | None:
    depth = 0
    for index in range(position, len(body)):
        char = body[index]
        if char == "," and depth == 0:
            return index
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
    return None


def _build_record(text: str, raw: RawMatch) -> MatchRecord:
    shape = MARKER_SHAPES[raw.kind]
    values = {
        field_name: normalize_field(raw_field)
        for field_name, raw_field in zip(shape.field_names, raw.raw_fields)
    }
    return MatchRecord(
        kind=raw.kind,
        owner=values["owner"],
        name=values.get("name"),
        method=values.get("method"),
        params=normalize_field(raw.raw_params, is_param=True),
        line=text.count("\n", 0, raw.start) + 1,
        end_line=text.count("\n", 0, raw.end) + 1,
    )
