# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Per-document annotation state for editor-style refresh triggers."""

import logging
import threading
from collections.abc import Sequence

from call_matcher.filetypes import is_eligible
from call_matcher.render import Annotation, place_annotations
from call_matcher.scanner import scan_document

logger = logging.getLogger(__name__)


class AnnotationSession:
    """Hold the current annotation set of each open document.

    Callers invoke ``refresh`` on buffer enter, after writes and on text
    changes. Each refresh replaces the previous set in a single step.
    """

    def __init__(self, permissive: bool = False) -> None:
        """Initialize session.

        Args:
            permissive: Also accept ``cpp`` documents.
        """
        self._permissive = permissive
        self._lock = threading.Lock()
        self._annotations: dict[str, list[Annotation]] = {}

    def refresh(
        self, document_id: str, lines: Sequence[str], filetype: str | None
    ) -> list[Annotation] | None:
        """Rescan a document and replace its annotations.

        Args:
            document_id: Caller-chosen document identifier.
            lines: Current document lines.
            filetype: Declared filetype of the document.

        Returns:
            The new annotation set, or ``None`` for an ineligible document.
        """
        if not is_eligible(filetype, permissive=self._permissive):
            logger.warning(
                f"Not a C/C++ file (document_id={document_id} filetype={filetype})"
            )
            return None
        snapshot = list(lines)
        annotations = place_annotations(snapshot, scan_document(snapshot))
        with self._lock:
            self._annotations[document_id] = annotations
        logger.debug(
            f"Annotations refreshed (document_id={document_id} count={len(annotations)})"
        )
        return list(annotations)

    def annotations(self, document_id: str) -> list[Annotation]:
        """Return the current annotations of a document."""
        with self._lock:
            return list(self._annotations.get(document_id, []))

    def clear(self, document_id: str) -> None:
        """Drop all annotations of a document."""
        with self._lock:
            self._annotations.pop(document_id, None)
