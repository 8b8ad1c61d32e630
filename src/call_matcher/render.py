# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Human-readable renderings and line annotations for match records."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from rich.text import Text

from call_matcher.model import MARKER_SHAPES, MatchRecord

logger = logging.getLogger(__name__)

OWNER_STYLE = "bold"
NAME_STYLE = "underline"


@dataclass(frozen=True)
class Annotation:
    """Represent one rendering placed below a source line.

    Attributes:
        line: Source line the annotation sits below (1-based).
        column: Column of the marker keyword on the marker's first line (0-based).
        text: One-line rendering of the record.
        record: Record the annotation was built from.
    """

    line: int
    column: int
    text: str
    record: MatchRecord


def render_record(record: MatchRecord) -> str:
    """Render a record with its kind's one-line template.

    Args:
        record: Match record.

    Returns:
        Rendering such as ``(Foo&)obj.bar(x, y)``.
    """
    shape = MARKER_SHAPES[record.kind]
    values = dict(zip(shape.field_names, record.fields()))
    return shape.template.format(params=record.params, **values)


def render_rich(record: MatchRecord, indent: int = 0) -> Text:
    """Render a record as styled text.

    The owner and separators are bold and the called name is underlined.

    Args:
        record: Match record.
        indent: Number of leading spaces.

    Returns:
        Styled rendering with the same plain text as ``render_record``.
    """
    padding = (" " * indent, "")
    if record.kind == "CALL":
        return Text.assemble(
            padding,
            ("(", OWNER_STYLE),
            (record.owner, OWNER_STYLE),
            ("&)", OWNER_STYLE),
            (str(record.name), NAME_STYLE),
            f".{record.method}({record.params})",
        )
    if record.kind == "NSCALL":
        return Text.assemble(
            padding,
            (record.owner, OWNER_STYLE),
            ("::", OWNER_STYLE),
            f"{record.name}({record.params})",
        )
    separator = "." if record.kind == "MTD" else "::"
    return Text.assemble(
        padding,
        (record.owner, OWNER_STYLE),
        (separator, OWNER_STYLE),
        (str(record.method), NAME_STYLE),
        f"({record.params})",
    )


def place_annotations(
    lines: Sequence[str], records: Sequence[MatchRecord]
) -> list[Annotation]:
    """Compute where each record's rendering goes in the document.

    The column is the position of ``<KIND>(`` on the record's first line; the
    annotation goes below ``end_line``. Records whose lines fall outside the
    document are skipped with a warning, and records whose keyword is not on
    their first line are skipped silently.

    Args:
        lines: Current document lines.
        records: Records from a scan of the document.

    Returns:
        Annotations in record order.
    """
    annotations: list[Annotation] = []
    for record in records:
        if not (1 <= record.line <= len(lines) and 1 <= record.end_line <= len(lines)):
            logger.warning(
                f"Marker line outside document; skipping annotation "
                f"(kind={record.kind} line={record.line} end_line={record.end_line} "
                f"line_count={len(lines)})"
            )
            continue
        column = lines[record.line - 1].find(MARKER_SHAPES[record.kind].opener)
        if column == -1:
            continue
        annotations.append(
            Annotation(
                line=record.end_line,
                column=column,
                text=render_record(record),
                record=record,
            )
        )
    return annotations


def annotate_lines(
    lines: Sequence[str], annotations: Sequence[Annotation]
) -> list[Text]:
    """Interleave source lines with their annotations.

    Args:
        lines: Document lines.
        annotations: Annotations placed against ``lines``.

    Returns:
        Source lines as plain text, each followed by its styled annotations.
    """
    by_line: dict[int, list[Annotation]] = {}
    for annotation in annotations:
        by_line.setdefault(annotation.line, []).append(annotation)

    output: list[Text] = []
    for line_no, line in enumerate(lines, start=1):
        output.append(Text(line))
        for annotation in by_line.get(line_no, []):
            output.append(render_rich(annotation.record, indent=annotation.column))
    return output
