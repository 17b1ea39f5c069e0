"""On-disk JSON cache of parse results keyed by file path, mtime, and size."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from loguru import logger

from .config import CACHE_VERSION
from .exceptions import ParseError
from .extract import extract_files
from .models import ParsedFile


@dataclass(frozen=True)
class CacheEntry:
    mtime_ns: int
    size: int
    parsed: ParsedFile


def file_signature(path: str | Path) -> tuple[int, int] | None:
    try:
        stats = os.stat(path)
    except OSError:
        return None
    return stats.st_mtime_ns, stats.st_size


class ParseCache:
    """Parse results from a previous run.

    Load once, update in memory while parsing, save once at the end. Module
    paths depend on the root they were derived from, so a cache written for
    a different root is discarded wholesale.
    """

    def __init__(
        self,
        path: str | Path,
        entries: dict[str, CacheEntry] | None = None,
        root: str | Path | None = None,
    ) -> None:
        self.path = Path(path)
        self.entries: dict[str, CacheEntry] = entries or {}
        self.root = str(root) if root is not None else None
        self.dirty = False

    @classmethod
    def load(cls, path: str | Path, root: str | Path | None = None) -> "ParseCache":
        cache_path = Path(path)
        if not cache_path.is_file():
            return cls(cache_path, root=root)
        try:
            data = json.loads(cache_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning(f"Ignoring unreadable cache '{cache_path}': {exc}")
            return cls(cache_path, root=root)

        if not isinstance(data, dict) or data.get("version") != CACHE_VERSION:
            logger.info(f"Cache '{cache_path}' has a different format version; starting fresh")
            return cls(cache_path, root=root)
        if root is not None and data.get("root") != str(root):
            logger.info(
                f"Cache '{cache_path}' was built for root '{data.get('root')}'; starting fresh"
            )
            return cls(cache_path, root=root)

        entries: dict[str, CacheEntry] = {}
        try:
            for file_path, entry in data.get("entries", {}).items():
                entries[file_path] = CacheEntry(
                    mtime_ns=int(entry["mtime_ns"]),
                    size=int(entry["size"]),
                    parsed=ParsedFile.from_dict(entry["parsed"]),
                )
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning(f"Ignoring malformed cache '{cache_path}': {exc}")
            return cls(cache_path, root=root)
        return cls(cache_path, entries, root=root)

    def save(self) -> None:
        data = {
            "version": CACHE_VERSION,
            "root": self.root,
            "entries": {
                file_path: {
                    "mtime_ns": entry.mtime_ns,
                    "size": entry.size,
                    "parsed": entry.parsed.to_dict(),
                }
                for file_path, entry in sorted(self.entries.items())
            },
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data), encoding="utf-8")
        self.dirty = False

    def lookup(self, file_path: str) -> ParsedFile | None:
        entry = self.entries.get(file_path)
        if entry is None:
            return None
        if file_signature(file_path) != (entry.mtime_ns, entry.size):
            return None
        return entry.parsed

    def store(self, file_path: str, parsed: ParsedFile) -> None:
        signature = file_signature(file_path)
        if signature is None:
            self.evict(file_path)
            return
        self.entries[file_path] = CacheEntry(mtime_ns=signature[0], size=signature[1], parsed=parsed)
        self.dirty = True

    def evict(self, file_path: str) -> None:
        if self.entries.pop(file_path, None) is not None:
            self.dirty = True

    def prune(self, keep: Sequence[str]) -> None:
        wanted = set(keep)
        for file_path in [path for path in self.entries if path not in wanted]:
            self.evict(file_path)


def parse_with_cache(
    root: str | Path,
    paths: Sequence[str],
    cache_path: str | Path,
    max_workers: int | None = None,
) -> list[ParsedFile | ParseError]:
    """Like `extract_files`, but reuse cached results for unchanged files."""
    cache = ParseCache.load(cache_path, root=str(Path(root)))
    results: list[ParsedFile | ParseError | None] = [None] * len(paths)
    misses: list[int] = []

    for index, file_path in enumerate(paths):
        cached = cache.lookup(file_path)
        if cached is None:
            misses.append(index)
        else:
            results[index] = cached

    fresh = extract_files(root, [paths[index] for index in misses], max_workers=max_workers)
    for index, result in zip(misses, fresh):
        file_path = paths[index]
        if isinstance(result, ParseError):
            cache.evict(file_path)
        else:
            cache.store(file_path, result)
        results[index] = result

    cache.prune(paths)
    logger.info(f"Cache: {len(paths) - len(misses)} hits, {len(misses)} misses")

    if cache.dirty:
        try:
            cache.save()
        except OSError as exc:
            logger.warning(f"Failed to save cache '{cache.path}': {exc}")

    return results
