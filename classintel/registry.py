"""Global index of modules, classes, and imports with base-class name resolution."""

from __future__ import annotations

from typing import Iterable, Iterator, Mapping

from loguru import logger

from .models import ClassId, ClassMetadata, Import, ModuleMetadata, ParsedFile


class Registry:
    """Read-only index built from a complete set of parsed files.

    `resolve_class` maps a base-class reference, as written in some module, to
    the ClassId that actually defines it. Re-exports are followed by recursing
    into whichever module a dotted name lands in, so no separate re-export
    table is kept.
    """

    def __init__(
        self,
        modules: Mapping[str, ModuleMetadata],
        classes: Mapping[ClassId, ClassMetadata],
        imports: Mapping[str, list[Import]],
    ) -> None:
        self._modules = dict(modules)
        self._classes = dict(classes)
        self._imports = {module: list(items) for module, items in imports.items()}
        self._by_name: dict[str, list[ClassId]] = {}
        for class_id in sorted(self._classes):
            self._by_name.setdefault(class_id.class_name, []).append(class_id)

    @classmethod
    def build(cls, parsed_files: Iterable[ParsedFile]) -> "Registry":
        modules: dict[str, ModuleMetadata] = {}
        classes: dict[ClassId, ClassMetadata] = {}
        imports: dict[str, list[Import]] = {}

        for parsed in parsed_files:
            if parsed.module_path in modules:
                logger.debug(
                    f"Module '{parsed.module_path}' defined twice; "
                    f"'{parsed.file_path}' replaces '{modules[parsed.module_path].file_path}'"
                )
                classes = {
                    class_id: meta
                    for class_id, meta in classes.items()
                    if class_id.module_path != parsed.module_path
                }
            modules[parsed.module_path] = ModuleMetadata(
                file_path=parsed.file_path,
                is_package=parsed.is_package,
            )
            for definition in parsed.classes:
                classes[ClassId(parsed.module_path, definition.name)] = ClassMetadata(
                    bases=tuple(definition.bases)
                )
            imports[parsed.module_path] = list(parsed.imports)

        return cls(modules, classes, imports)

    @property
    def modules(self) -> Mapping[str, ModuleMetadata]:
        return self._modules

    @property
    def classes(self) -> Mapping[ClassId, ClassMetadata]:
        return self._classes

    def imports_of(self, module_path: str) -> list[Import]:
        return list(self._imports.get(module_path, ()))

    def module(self, module_path: str) -> ModuleMetadata | None:
        return self._modules.get(module_path)

    def get(self, class_id: ClassId) -> ClassMetadata | None:
        return self._classes.get(class_id)

    def classes_named(self, name: str) -> list[ClassId]:
        return list(self._by_name.get(name, ()))

    def __contains__(self, class_id: object) -> bool:
        return class_id in self._classes

    def __iter__(self) -> Iterator[ClassId]:
        return iter(self._classes)

    def __len__(self) -> int:
        return len(self._classes)

    def resolve_class(self, context_module: str, name: str) -> ClassId | None:
        """Resolve `name`, as referenced from `context_module`, to its defining class.

        Returns None for anything outside the indexed tree (builtins, third-party
        bases, bare module paths, or cyclic re-exports).
        """
        return self._resolve(context_module, name, set())

    def _resolve(
        self,
        context_module: str,
        name: str,
        visited: set[tuple[str, str]],
    ) -> ClassId | None:
        key = (context_module, name)
        if key in visited:
            return None
        visited.add(key)

        direct = ClassId(context_module, name)
        if direct in self._classes:
            return direct

        resolved = self._apply_imports(context_module, name)

        parts = resolved.split(".")
        for cut in range(len(parts) - 1, 0, -1):
            candidate = ".".join(parts[:cut])
            if candidate in self._modules:
                return self._resolve(candidate, ".".join(parts[cut:]), visited)
        return None

    def _apply_imports(self, context_module: str, name: str) -> str:
        for item in self._imports.get(context_module, ()):
            alias = item.imported_as
            if name == alias:
                return item.imported_item
            if name.startswith(alias + "."):
                return f"{item.imported_item}.{name[len(alias) + 1:]}"
        return name
