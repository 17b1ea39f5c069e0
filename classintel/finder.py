"""End-to-end orchestration: discover, parse, index, and query a source tree."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from loguru import logger

from .cache import parse_with_cache
from .config import FinderConfig
from .exceptions import AmbiguousClassName, ClassNotFound, ParseError, SourceIOError
from .extract import extract_files
from .file_walker import iter_python_files
from .graph import InheritanceGraph
from .models import ClassId, ClassReference, ParsedFile, SearchMode
from .registry import Registry


class Finder:
    """Answers subclass and parent-class queries over one source tree.

    Building a Finder parses the whole tree; the resulting registry and graph
    are read-only, so one instance can serve concurrent queries.
    """

    def __init__(
        self,
        root: str | Path,
        exclude: Iterable[str | Path] = (),
        use_cache: bool = True,
        max_workers: int | None = None,
        cache_path: str | Path | None = None,
        respect_ignore_files: bool = True,
    ) -> None:
        config = FinderConfig(
            root=Path(root),
            exclude=tuple(Path(item) for item in exclude),
            use_cache=use_cache,
            cache_path=Path(cache_path) if cache_path is not None else None,
            max_workers=max_workers,
            respect_ignore_files=respect_ignore_files,
        )
        config.validate()
        self._build(config)

    @classmethod
    def from_config(cls, config: FinderConfig) -> "Finder":
        finder = cls.__new__(cls)
        config.validate()
        finder._build(config)
        return finder

    @classmethod
    def from_parsed(cls, parsed_files: Iterable[ParsedFile]) -> "Finder":
        """Build a Finder from already-parsed files, skipping discovery."""
        finder = cls.__new__(cls)
        finder.root = None
        finder.failures = []
        finder._index(list(parsed_files))
        return finder

    def _build(self, config: FinderConfig) -> None:
        try:
            root = config.root.resolve(strict=True)
        except OSError as exc:
            raise SourceIOError(str(config.root), exc.strerror or str(exc)) from exc
        if not root.is_dir():
            raise SourceIOError(str(root), "not a directory")
        config = config.with_root(root)
        self.root = root

        logger.debug(f"Searching for Python files in: {root}")
        files = iter_python_files(
            root,
            exclude_dirs=config.exclude,
            respect_ignore_files=config.respect_ignore_files,
        )
        logger.debug(f"Discovered {len(files)} Python files")

        if config.use_cache:
            results = parse_with_cache(
                root,
                files,
                config.resolved_cache_path(),
                max_workers=config.max_workers,
            )
        else:
            logger.debug("Cache disabled")
            results = extract_files(root, files, max_workers=config.max_workers)

        parsed: list[ParsedFile] = []
        self.failures: list[ParseError] = []
        for result in results:
            if isinstance(result, ParseError):
                logger.warning(str(result))
                self.failures.append(result)
            else:
                parsed.append(result)

        self._index(parsed)

    def _index(self, parsed: list[ParsedFile]) -> None:
        self.registry = Registry.build(parsed)
        self.graph = InheritanceGraph.build(self.registry)
        logger.debug(
            f"Found {self.class_count} classes in codebase "
            f"across {self.module_count} modules"
        )

    @property
    def class_count(self) -> int:
        return len(self.registry)

    @property
    def module_count(self) -> int:
        return len(self.registry.modules)

    def resolve_target_class(self, name: str, module_path: str | None = None) -> ClassId:
        if module_path:
            class_id = self.registry.resolve_class(module_path, name)
            if class_id is None:
                raise ClassNotFound(name, module_path)
            return class_id

        candidates = self.registry.classes_named(name)
        if not candidates:
            raise ClassNotFound(name)
        if len(candidates) > 1:
            raise AmbiguousClassName(name, sorted(c.module_path for c in candidates))
        return candidates[0]

    def resolve_class_reference(self, name: str, module_path: str | None = None) -> ClassReference:
        class_id = self.resolve_target_class(name, module_path)
        reference = self._reference(class_id)
        if reference is None:
            raise ClassNotFound(name, module_path)
        return reference

    def find_subclasses(
        self,
        name: str,
        module_path: str | None = None,
        mode: SearchMode = SearchMode.ALL,
    ) -> list[ClassReference]:
        target = self.resolve_target_class(name, module_path)
        logger.debug(f"Searching for subclasses of '{target.qualified_name}' ({mode.value})")
        if mode == SearchMode.DIRECT:
            found = self.graph.find_direct_subclasses(target)
        else:
            found = self.graph.find_all_subclasses(target)
        return self._references(found)

    def find_parent_classes(
        self,
        name: str,
        module_path: str | None = None,
        mode: SearchMode = SearchMode.ALL,
    ) -> list[ClassReference]:
        target = self.resolve_target_class(name, module_path)
        logger.debug(f"Searching for parent classes of '{target.qualified_name}' ({mode.value})")
        if mode == SearchMode.DIRECT:
            found = self.graph.find_direct_parent_classes(target)
        else:
            found = self.graph.find_all_parent_classes(target)
        return self._references(found)

    def _reference(self, class_id: ClassId) -> ClassReference | None:
        metadata = self.registry.module(class_id.module_path)
        if metadata is None:
            return None
        return ClassReference(
            module_path=class_id.module_path,
            class_name=class_id.class_name,
            file_path=metadata.file_path,
        )

    def _references(self, class_ids: Iterable[ClassId]) -> list[ClassReference]:
        references = [ref for ref in map(self._reference, class_ids) if ref is not None]
        references.sort(key=lambda ref: (ref.module_path, ref.class_name))
        return references
