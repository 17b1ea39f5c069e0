"""Extract class definitions and normalized imports from a Python Tree-sitter AST."""

from __future__ import annotations

import ast
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Sequence

from loguru import logger

from .config import default_max_workers
from .exceptions import ParseError
from .file_walker import is_package_file, module_path_for
from .models import ClassDefinition, Import, ParsedFile
from .parser import ParsedSource, thread_parser


IMPORT_TYPES = {"import_statement", "import_from_statement", "future_import_statement"}
UTF8_BOM = b"\xef\xbb\xbf"


def extract_files(
    root: str | Path,
    paths: Sequence[str],
    max_workers: int | None = None,
) -> list[ParsedFile | ParseError]:
    """Extract every file on a bounded thread pool, keeping input order.

    Per-file failures come back as ParseError values instead of being raised.
    """
    root_path = Path(root)

    def work(path: str) -> ParsedFile | ParseError:
        module_path = module_path_for(path, root_path)
        if module_path is None:
            return ParseError(path, "Failed to convert file path to module path")
        try:
            return extract_file(path, module_path)
        except ParseError as exc:
            return exc

    if not paths:
        return []
    workers = min(max_workers or default_max_workers(), len(paths))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="classintel-parse") as pool:
        return list(pool.map(work, paths))


def extract_file(path: str | Path, module_path: str) -> ParsedFile:
    """Parse one file into a ParsedFile.

    Extraction is best effort: only what tree-sitter flags as an error is
    rejected. Its grammar still accepts some Python 2 forms (`print "x"`,
    `exec code`), so such files are indexed rather than reported.
    """
    try:
        source_bytes = Path(path).read_bytes()
    except OSError as exc:
        raise ParseError(str(path), exc.strerror or str(exc)) from exc

    if source_bytes.startswith(UTF8_BOM):
        source_bytes = source_bytes[len(UTF8_BOM) :]
    try:
        source_bytes.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError(str(path), f"not valid UTF-8: {exc.reason}") from exc

    parsed = thread_parser().parse_bytes(source_bytes)
    error = parsed.syntax_error()
    if error:
        raise ParseError(str(path), error)

    return extract_parsed(
        parsed,
        module_path=module_path,
        is_package=is_package_file(path),
        file_path=str(path),
    )


def extract_parsed(
    parsed: ParsedSource,
    module_path: str,
    is_package: bool = False,
    file_path: str = "",
) -> ParsedFile:
    source_bytes = parsed.source_bytes
    classes: list[ClassDefinition] = []
    imports: list[Import] = []

    def visit_block(node, parent: str | None) -> None:
        for child in node.children:
            statement = child
            if statement.type == "decorated_definition":
                statement = statement.child_by_field_name("definition")
                if statement is None:
                    continue

            if statement.type == "class_definition":
                name_node = statement.child_by_field_name("name")
                if name_node is None:
                    continue
                name = _node_text(name_node, source_bytes)
                if parent:
                    name = f"{parent}.{name}"
                classes.append(
                    ClassDefinition(name=name, bases=tuple(_class_bases(statement, source_bytes)))
                )
                body = statement.child_by_field_name("body")
                if body is not None:
                    visit_block(body, name)
            elif statement.type in IMPORT_TYPES:
                imports.extend(
                    _extract_imports(statement, source_bytes, module_path, is_package)
                )

    visit_block(parsed.root, None)

    return ParsedFile(
        file_path=file_path,
        module_path=module_path,
        is_package=is_package,
        classes=classes,
        imports=imports,
    )


def _node_text(node, source_bytes: bytes) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8")


def _class_bases(node, source_bytes: bytes) -> list[str]:
    bases_node = node.child_by_field_name("superclasses")
    if bases_node is None:
        return []

    bases: list[str] = []
    for child in bases_node.named_children:
        base = _base_name(child, source_bytes)
        if base:
            bases.append(base)
    return bases


def _base_name(node, source_bytes: bytes) -> str | None:
    """Flatten `Bar`, `pkg.mod.Bar`, and `Bar[T]` to a dotted name.

    Keyword arguments, calls, splats, and anything else dynamic yield None.
    """
    if node.type == "identifier":
        return _node_text(node, source_bytes)
    if node.type == "attribute":
        obj = node.child_by_field_name("object")
        attr = node.child_by_field_name("attribute")
        if obj is None or attr is None:
            return None
        prefix = _base_name(obj, source_bytes) if obj.type in ("identifier", "attribute") else None
        if prefix is None:
            return None
        return f"{prefix}.{_node_text(attr, source_bytes)}"
    if node.type in ("subscript", "generic_type"):
        value = node.child_by_field_name("value") or node.child(0)
        if value is None:
            return None
        return _base_name(value, source_bytes)
    return None


def resolve_relative_module(module_path: str, level: int, is_package: bool) -> str | None:
    """Resolve the package a `level`-dot relative import starts from.

    In package `pkg.sub`, level 1 is `pkg.sub`; in module `pkg.sub.mod`, level 1
    is `pkg.sub`. Returns None when the import climbs above the indexed root.
    """
    parts = module_path.split(".")
    climb = level - 1 if is_package else level
    if climb >= len(parts):
        return None
    return ".".join(parts[: len(parts) - climb])


def _extract_imports(
    node,
    source_bytes: bytes,
    module_path: str,
    is_package: bool,
) -> list[Import]:
    text = _node_text(node, source_bytes)
    try:
        module = ast.parse(text)
    except SyntaxError:
        return []

    imports: list[Import] = []
    for stmt in module.body:
        if isinstance(stmt, ast.Import):
            for alias in stmt.names:
                imports.append(Import(imported_item=alias.name, imported_as=alias.asname or alias.name))
        elif isinstance(stmt, ast.ImportFrom):
            if stmt.level:
                base = resolve_relative_module(module_path, stmt.level, is_package)
                if base is None:
                    logger.debug(
                        f"Relative import climbs above the root in '{module_path}': {text!r}"
                    )
                    continue
                source = f"{base}.{stmt.module}" if stmt.module else base
            else:
                source = stmt.module or ""
            for alias in stmt.names:
                if alias.name == "*":
                    continue
                item = f"{source}.{alias.name}" if source else alias.name
                imports.append(Import(imported_item=item, imported_as=alias.asname or alias.name))

    return imports
