"""Defaults and run configuration for building a Finder."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path

from .exceptions import ConfigError

SOURCE_SUFFIX = ".py"
PACKAGE_INIT = "__init__"

DEFAULT_EXCLUDES = {".venv", "__pycache__", ".git", ".hg", ".svn"}
IGNORE_FILENAMES = (".gitignore", ".ignore")

CACHE_FILENAME = ".classintel-cache.json"
CACHE_VERSION = 1


def default_max_workers() -> int:
    return min(32, (os.cpu_count() or 1) + 4)


@dataclass(frozen=True)
class FinderConfig:
    root: Path
    exclude: tuple[Path, ...] = field(default_factory=tuple)
    use_cache: bool = True
    cache_path: Path | None = None
    max_workers: int | None = None
    respect_ignore_files: bool = True

    @classmethod
    def from_env(cls, root: str | Path, **overrides) -> "FinderConfig":
        """Build a config from CLASSINTEL_* environment variables plus overrides."""
        values: dict = {}
        if os.getenv("CLASSINTEL_NO_CACHE", "").lower() in ("1", "true", "yes"):
            values["use_cache"] = False
        cache_path = os.getenv("CLASSINTEL_CACHE_PATH")
        if cache_path:
            values["cache_path"] = Path(cache_path)
        max_workers = os.getenv("CLASSINTEL_MAX_WORKERS")
        if max_workers:
            try:
                values["max_workers"] = int(max_workers)
            except ValueError as exc:
                raise ConfigError(
                    f"CLASSINTEL_MAX_WORKERS must be an integer, got {max_workers!r}"
                ) from exc

        values.update({key: value for key, value in overrides.items() if value is not None})
        if "exclude" in values:
            values["exclude"] = tuple(Path(item) for item in values["exclude"])
        config = cls(root=Path(root), **values)
        config.validate()
        return config

    def validate(self) -> None:
        if self.max_workers is not None and self.max_workers < 1:
            raise ConfigError(f"max_workers must be positive, got {self.max_workers}")

    def resolved_cache_path(self) -> Path:
        if self.cache_path is not None:
            return self.cache_path
        return self.root / CACHE_FILENAME

    def with_root(self, root: Path) -> "FinderConfig":
        return replace(self, root=root)
