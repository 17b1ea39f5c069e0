"""Source discovery and module path derivation."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

import pathspec
from loguru import logger

from .config import DEFAULT_EXCLUDES, IGNORE_FILENAMES, PACKAGE_INIT, SOURCE_SUFFIX
from .exceptions import SourceIOError


def module_path_for(file_path: str | Path, root: str | Path) -> str | None:
    """Map `root/pkg/sub/mod.py` to `pkg.sub.mod` and `root/pkg/__init__.py` to `pkg`.

    Returns None for files outside the root and for a root-level `__init__.py`.
    """
    try:
        relative = Path(file_path).relative_to(root)
    except ValueError:
        return None

    parts = list(relative.parent.parts)
    stem = relative.name.removesuffix(SOURCE_SUFFIX)
    if stem != PACKAGE_INIT:
        parts.append(stem)
    if not parts:
        return None
    return ".".join(parts)


def is_package_file(file_path: str | Path) -> bool:
    return Path(file_path).name == PACKAGE_INIT + SOURCE_SUFFIX


def iter_python_files(
    root: str | Path,
    exclude_dirs: Iterable[str | Path] | None = None,
    respect_ignore_files: bool = True,
) -> list[str]:
    """
    Recursively collect `.py` files under `root`.

    Args:
        root: Directory to scan.
        exclude_dirs: Directories to leave out. Relative entries are taken
            relative to `root`.
        respect_ignore_files: Honor `.gitignore` / `.ignore` files found at any
            level of the tree.

    Returns:
        Sorted absolute file paths.

    Raises:
        SourceIOError: If `root` is not a readable directory.
    """
    root_path = Path(root).resolve()
    if not root_path.is_dir():
        raise SourceIOError(str(root_path), "not a directory")

    excluded = _absolute_excludes(root_path, exclude_dirs or ())
    if excluded:
        logger.debug(f"Excluding directories: {[str(path) for path in excluded]}")

    specs_by_dir: dict[Path, list[tuple[Path, pathspec.PathSpec]]] = {}
    matches: list[str] = []

    def on_error(error: OSError) -> None:
        if error.filename and Path(error.filename) == root_path:
            raise SourceIOError(str(root_path), error.strerror or str(error)) from error
        logger.warning(f"Skipping unreadable directory '{error.filename}': {error}")

    for current, dirs, files in os.walk(root_path, onerror=on_error):
        current_path = Path(current)
        specs = list(specs_by_dir.pop(current_path, []))
        if respect_ignore_files:
            own = _load_ignore_spec(current_path)
            if own is not None:
                specs.append((current_path, own))

        kept_dirs = []
        for name in sorted(dirs):
            dir_path = current_path / name
            if _skip_name(name) or _is_excluded(dir_path, excluded):
                continue
            if _is_ignored(dir_path, specs, is_dir=True):
                logger.debug(f"Ignoring directory '{dir_path}' due to ignore rules")
                continue
            kept_dirs.append(name)
            specs_by_dir[dir_path] = specs
        dirs[:] = kept_dirs

        for name in files:
            if not name.endswith(SOURCE_SUFFIX) or name.startswith("."):
                continue
            file_path = current_path / name
            if _is_ignored(file_path, specs, is_dir=False):
                logger.debug(f"Ignoring '{file_path}' due to ignore rules")
                continue
            matches.append(str(file_path))

    matches.sort()
    return matches


def _skip_name(name: str) -> bool:
    return name.startswith(".") or name in DEFAULT_EXCLUDES


def _absolute_excludes(root: Path, exclude_dirs: Iterable[str | Path]) -> list[Path]:
    resolved = []
    for entry in exclude_dirs:
        path = Path(entry)
        if not path.is_absolute():
            path = root / path
        resolved.append(path.resolve())
    return resolved


def _is_excluded(path: Path, excluded: list[Path]) -> bool:
    return any(path == entry or entry in path.parents for entry in excluded)


def _load_ignore_spec(directory: Path) -> pathspec.PathSpec | None:
    lines: list[str] = []
    for filename in IGNORE_FILENAMES:
        ignore_path = directory / filename
        if not ignore_path.is_file():
            continue
        try:
            lines.extend(ignore_path.read_text(encoding="utf-8").splitlines())
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(f"Could not read ignore file '{ignore_path}': {exc}")
    if not lines:
        return None
    return pathspec.PathSpec.from_lines("gitwildmatch", lines)


def _is_ignored(
    path: Path,
    specs: list[tuple[Path, pathspec.PathSpec]],
    is_dir: bool,
) -> bool:
    # Deepest ignore file with a matching rule decides, so `!pattern` can re-include.
    for base, spec in reversed(specs):
        relative = path.relative_to(base).as_posix()
        if is_dir:
            relative += "/"
        result = spec.check_file(relative)
        if result.include is not None:
            return result.include
    return False
