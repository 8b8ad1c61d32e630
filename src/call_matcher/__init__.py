# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Public import surface for call marker scanning."""

from call_matcher.model import MARKER_SHAPES, MarkerKind, MatchRecord, RawMatch
from call_matcher.normalizer import normalize_field
from call_matcher.render import (
    Annotation,
    annotate_lines,
    place_annotations,
    render_record,
    render_rich,
)
from call_matcher.scanner import find_raw_matches, scan_document, scan_text
from call_matcher.session import AnnotationSession

__all__ = [
    "MARKER_SHAPES",
    "Annotation",
    "AnnotationSession",
    "MarkerKind",
    "MatchRecord",
    "RawMatch",
    "annotate_lines",
    "find_raw_matches",
    "normalize_field",
    "place_annotations",
    "render_record",
    "render_rich",
    "scan_document",
    "scan_text",
]
