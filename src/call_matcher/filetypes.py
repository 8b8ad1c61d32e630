# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""File type eligibility for marker scanning."""

from pathlib import Path

STRICT_FILETYPES: frozenset[str] = frozenset({"c", "h"})
PERMISSIVE_FILETYPES: frozenset[str] = frozenset({"c", "h", "cpp"})

_SUFFIX_FILETYPES: dict[str, str] = {
    ".c": "c",
    ".h": "h",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".hpp": "cpp",
    ".hh": "cpp",
    ".hxx": "cpp",
}


def filetype_for_path(path: Path) -> str | None:
    """Return the filetype name for a path, or ``None`` if unknown."""
    return _SUFFIX_FILETYPES.get(path.suffix.lower())


def is_eligible(filetype: str | None, permissive: bool = False) -> bool:
    """Check whether a filetype should be scanned.

    Args:
        filetype: Filetype name as reported by the caller.
        permissive: Also accept ``cpp``.

    Returns:
        True when markers should be scanned for this filetype.
    """
    allowed = PERMISSIVE_FILETYPES if permissive else STRICT_FILETYPES
    return filetype in allowed
