"""Dict-shaped hierarchy queries for tool servers."""

from __future__ import annotations

from .exceptions import AmbiguousClassName, ClassNotFound
from .finder import Finder
from .models import SearchMode
from .output import build_payload


class HierarchyService:
    def __init__(self, finder: Finder) -> None:
        self.finder = finder

    def metadata(self) -> dict:
        return {
            "root": str(self.finder.root) if self.finder.root else None,
            "class_count": self.finder.class_count,
            "module_count": self.finder.module_count,
            "edge_count": self.finder.graph.edge_count,
            "parse_failures": [
                {"file_path": failure.file_path, "message": failure.message}
                for failure in self.finder.failures
            ],
        }

    def subclasses(self, name: str, module: str | None = None, mode: str = "all") -> dict:
        search_mode = _search_mode(mode)
        if search_mode is None:
            return _invalid_mode(mode)
        try:
            references = self.finder.find_subclasses(name, module, search_mode)
        except (AmbiguousClassName, ClassNotFound) as exc:
            return _error(exc)
        return build_payload(name, module, references)

    def parents(self, name: str, module: str | None = None, mode: str = "all") -> dict:
        search_mode = _search_mode(mode)
        if search_mode is None:
            return _invalid_mode(mode)
        try:
            references = self.finder.find_parent_classes(name, module, search_mode)
        except (AmbiguousClassName, ClassNotFound) as exc:
            return _error(exc)
        return build_payload(name, module, references, parents=True)

    def resolve(self, name: str, module: str | None = None) -> dict:
        try:
            reference = self.finder.resolve_class_reference(name, module)
        except (AmbiguousClassName, ClassNotFound) as exc:
            return _error(exc)
        return {**reference.to_dict(), "qualified_name": reference.qualified_name}


def _error(exc: AmbiguousClassName | ClassNotFound) -> dict:
    payload: dict = {"error": str(exc)}
    if isinstance(exc, AmbiguousClassName):
        payload["candidates"] = exc.candidates
    return payload


def _search_mode(mode: str) -> SearchMode | None:
    try:
        return SearchMode(mode)
    except ValueError:
        return None


def _invalid_mode(mode: str) -> dict:
    choices = ", ".join(item.value for item in SearchMode)
    return {"error": f"Invalid mode '{mode}'; expected one of: {choices}"}
