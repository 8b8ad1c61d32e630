# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Domain models for marker matches."""

from dataclasses import dataclass
from typing import Literal

MarkerKind = Literal["CALL", "NSCALL", "MTD", "NSMTD"]


@dataclass(frozen=True)
class MarkerShape:
    """Describe the fixed layout of one marker kind.

    Attributes:
        kind: Marker kind.
        keyword: Literal keyword text that precedes the opening parenthesis.
        field_names: Names of the comma-delimited leading fields, in order.
        template: Rendering template keyed by field names plus ``params``.
    """

    kind: MarkerKind
    keyword: str
    field_names: tuple[str, ...]
    template: str

    @property
    def opener(self) -> str:
        return f"{self.keyword}("


MARKER_SHAPES: dict[MarkerKind, MarkerShape] = {
    "CALL": MarkerShape(
        kind="CALL",
        keyword="CALL",
        field_names=("owner", "name", "method"),
        template="({owner}&){name}.{method}({params})",
    ),
    "NSCALL": MarkerShape(
        kind="NSCALL",
        keyword="NSCALL",
        field_names=("owner", "name"),
        template="{owner}::{name}({params})",
    ),
    "MTD": MarkerShape(
        kind="MTD",
        keyword="MTD",
        field_names=("owner", "method"),
        template="{owner}.{method}({params})",
    ),
    "NSMTD": MarkerShape(
        kind="NSMTD",
        keyword="NSMTD",
        field_names=("owner", "method"),
        template="{owner}::{method}({params})",
    ),
}


@dataclass(frozen=True)
class RawMatch:
    """Represent one balanced marker before normalization.

    Attributes:
        kind: Marker kind.
        start: Offset of the first keyword character in the scanned text.
        end: Offset of the matching closing parenthesis.
        raw_fields: Unsplit leading-field text, one entry per field name.
        raw_params: Parameter section text without the ``/`` delimiters.
    """

    kind: MarkerKind
    start: int
    end: int
    raw_fields: tuple[str, ...]
    raw_params: str


@dataclass(frozen=True)
class MatchRecord:
    """Represent one recognized marker occurrence.

    Attributes:
        kind: Marker kind.
        owner: Class or namespace field.
        name: Instance or function name; ``None`` for ``MTD`` and ``NSMTD``.
        method: Method name; ``None`` for ``NSCALL``.
        params: Normalized parameter section.
        line: Line of the marker keyword (1-based).
        end_line: Line of the matching closing parenthesis (1-based).
    """

    kind: MarkerKind
    owner: str
    name: str | None
    method: str | None
    params: str
    line: int
    end_line: int

    def fields(self) -> tuple[str, ...]:
        """Return the leading fields in marker order."""
        shape = MARKER_SHAPES[self.kind]
        return tuple(str(getattr(self, field_name)) for field_name in shape.field_names)
