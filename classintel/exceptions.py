"""Exception types raised by classintel."""

from __future__ import annotations

from typing import Iterable


class ClassIntelError(Exception):
    """Base exception for all application-specific errors."""


class ClassNotFound(ClassIntelError):
    def __init__(self, name: str, module_path: str | None = None):
        self.name = name
        self.module_path = module_path
        message = f"Class '{name}' not found"
        if module_path:
            message += f" in module '{module_path}'"
        super().__init__(message)


class AmbiguousClassName(ClassIntelError):
    """Raised when a bare class name is defined in more than one module."""

    def __init__(self, name: str, candidates: Iterable[str]):
        self.name = name
        self.candidates = list(candidates)
        super().__init__(
            f"Class '{name}' found in multiple modules: {', '.join(self.candidates)}"
        )


class ParseError(ClassIntelError):
    """Raised when a single source file cannot be turned into a ParsedFile."""

    def __init__(self, file_path: str, message: str):
        self.file_path = file_path
        self.message = message
        super().__init__(f"Failed to parse {file_path}: {message}")


class SourceIOError(ClassIntelError):
    """Raised when the source root itself cannot be read."""

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"I/O error on {path}: {message}")


class ConfigError(ClassIntelError):
    """Raised for configuration-related problems."""
