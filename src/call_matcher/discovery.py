# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Discovery of C-family source files beneath a project root."""

import logging
from dataclasses import dataclass
from pathlib import Path

import pathspec

from call_matcher.filetypes import filetype_for_path, is_eligible

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceFile:
    """Represent one eligible source file.

    Attributes:
        path: Root-relative POSIX path; the file name for a single-file root.
        filetype: Filetype name derived from the suffix.
        lines: File content split into lines.
    """

    path: str
    filetype: str
    lines: list[str]


@dataclass(frozen=True)
class DiscoveryError:
    """Represent a recoverable discovery error for one file."""

    file_path: str
    message: str


class DiscoveryFailure(RuntimeError):
    """Represent an unusable discovery root."""


def load_ignore_spec(root: Path) -> pathspec.GitIgnoreSpec:
    """Compile the root and nested .gitignore files into one root-relative spec.

    Raises:
        OSError: If a .gitignore file cannot be read.
        UnicodeDecodeError: If a .gitignore file is not valid UTF-8.
    """
    patterns: list[str] = []
    for ignore_path in sorted(root.rglob(".gitignore")):
        base = ignore_path.parent.relative_to(root).as_posix()
        lines = ignore_path.read_text(encoding="utf-8").splitlines()
        patterns.extend(
            _rebase_gitignore_line(line=line, base="" if base == "." else base)
            for line in lines
        )
    return pathspec.GitIgnoreSpec.from_lines(patterns)


def _is_ignored(spec: pathspec.GitIgnoreSpec, child: Path, relative: str) -> bool:
    if spec.match_file(relative):
        return True
    return child.is_dir() and spec.match_file(f"{relative}/")


def discover_sources(
    root: Path, permissive: bool = False
) -> tuple[list[SourceFile], list[DiscoveryError]]:
    """Collect eligible source files beneath ``root``.

    Symlinked directories are not entered. Unreadable directories and files are
    reported as errors and skipped.

    Args:
        root: Project directory or a single source file.
        permissive: Also accept ``cpp`` files.

    Returns:
        A tuple of readable source files (sorted by path) and recoverable errors.

    Raises:
        DiscoveryFailure: If ``root`` does not exist or its ignore files are
            unreadable.
    """
    if not root.exists():
        raise DiscoveryFailure(f"Path does not exist: {root}")
    if root.is_file():
        return _discover_single_file(root, permissive=permissive)

    try:
        ignore_spec = load_ignore_spec(root)
    except (OSError, UnicodeDecodeError) as exc:
        raise DiscoveryFailure(f"Failed to read .gitignore files: {exc}") from exc

    sources: list[SourceFile] = []
    errors: list[DiscoveryError] = []
    ignored = 0
    linked_dirs = 0
    queue: list[Path] = [root]
    while queue:
        current = queue.pop(0)
        try:
            children = sorted(current.iterdir(), key=lambda item: item.name)
        except OSError as exc:
            relative_dir = current.relative_to(root).as_posix()
            logger.warning(
                f"Skipping unreadable directory (dir_path={relative_dir} error={exc})"
            )
            errors.append(DiscoveryError(file_path=relative_dir, message=str(exc)))
            continue
        for child in children:
            relative = child.relative_to(root).as_posix()
            if child.name == ".git" and child.is_dir():
                continue
            if _is_ignored(ignore_spec, child, relative):
                ignored += 1
                continue
            if child.is_dir():
                if child.is_symlink():
                    linked_dirs += 1
                else:
                    queue.append(child)
                continue
            filetype = filetype_for_path(child)
            if not is_eligible(filetype, permissive=permissive):
                continue
            source = read_source(child, relative, str(filetype), errors)
            if source is not None:
                sources.append(source)

    logger.info(
        f"Discovery completed (root={root} files={len(sources)} ignored={ignored} "
        f"linked_dirs_skipped={linked_dirs} errors={len(errors)})"
    )
    return sorted(sources, key=lambda source: source.path), errors


def _discover_single_file(
    path: Path, permissive: bool
) -> tuple[list[SourceFile], list[DiscoveryError]]:
    errors: list[DiscoveryError] = []
    filetype = filetype_for_path(path)
    if not is_eligible(filetype, permissive=permissive):
        logger.warning(f"Not a C/C++ file (file_path={path} filetype={filetype})")
        errors.append(DiscoveryError(file_path=path.name, message="Not a C/C++ file"))
        return [], errors
    source = read_source(path, path.name, str(filetype), errors)
    return ([source] if source is not None else []), errors


def read_source(
    path: Path, relative: str, filetype: str, errors: list[DiscoveryError]
) -> SourceFile | None:
    """Read one source file, appending to ``errors`` when it cannot be decoded.

    Args:
        path: File to read.
        relative: Path reported in the record and in errors.
        filetype: Filetype name of the file.
        errors: Error list that receives read failures.

    Returns:
        The source file, or ``None`` when reading failed.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(f"Skipping unreadable file (file_path={relative} error={exc})")
        errors.append(DiscoveryError(file_path=relative, message=str(exc)))
        return None
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return SourceFile(path=relative, filetype=filetype, lines=lines)


def _rebase_gitignore_line(line: str, base: str) -> str:
    """Rewrite one nested .gitignore line relative to the project root.

    Patterns without an inner slash match at any depth below ``base``.
    """
    if not base or not line.strip():
        return line
    if line.lstrip().startswith("#"):
        return line
    if line.startswith(r"\!") or line.startswith(r"\#"):
        return line
    is_negation = line.startswith("!")
    pattern = line[1:] if is_negation else line
    if pattern.startswith("/") or "/" in pattern.rstrip("/"):
        rebased = f"/{base}/{pattern.lstrip('/')}"
    else:
        rebased = f"/{base}/**/{pattern}"
    return f"!{rebased}" if is_negation else rebased
