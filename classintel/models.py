"""Lightweight data models for classes, imports, and parsed files."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SearchMode(str, Enum):
    DIRECT = "direct"
    ALL = "all"


@dataclass(frozen=True, order=True)
class ClassId:
    module_path: str
    class_name: str  # dotted for nested classes, e.g. Outer.Inner

    @property
    def qualified_name(self) -> str:
        return f"{self.module_path}.{self.class_name}"


@dataclass(frozen=True)
class Import:
    """A normalized import binding.

    `import a.b as c` -> Import("a.b", "c")
    `from a import b` -> Import("a.b", "b")
    `from .m import x` inside pkg.mod -> Import("pkg.m.x", "x")
    """

    imported_item: str
    imported_as: str


@dataclass(frozen=True)
class ClassDefinition:
    name: str
    bases: tuple[str, ...] = ()


@dataclass(frozen=True)
class ModuleMetadata:
    file_path: str
    is_package: bool


@dataclass(frozen=True)
class ClassMetadata:
    bases: tuple[str, ...]


@dataclass
class ParsedFile:
    file_path: str
    module_path: str
    is_package: bool
    classes: list[ClassDefinition] = field(default_factory=list)
    imports: list[Import] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "file_path": self.file_path,
            "module_path": self.module_path,
            "is_package": self.is_package,
            "classes": [
                {"name": cls.name, "bases": list(cls.bases)} for cls in self.classes
            ],
            "imports": [
                {"imported_item": imp.imported_item, "imported_as": imp.imported_as}
                for imp in self.imports
            ],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ParsedFile":
        return cls(
            file_path=data["file_path"],
            module_path=data["module_path"],
            is_package=bool(data["is_package"]),
            classes=[
                ClassDefinition(name=item["name"], bases=tuple(item["bases"]))
                for item in data["classes"]
            ],
            imports=[
                Import(
                    imported_item=item["imported_item"],
                    imported_as=item["imported_as"],
                )
                for item in data["imports"]
            ],
        )


@dataclass(frozen=True, order=True)
class ClassReference:
    module_path: str
    class_name: str
    file_path: str

    @property
    def qualified_name(self) -> str:
        return f"{self.module_path}.{self.class_name}"

    def to_dict(self) -> dict:
        return {
            "class_name": self.class_name,
            "module_path": self.module_path,
            "file_path": self.file_path,
        }
