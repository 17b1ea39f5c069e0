"""Tree-sitter based parser for Python sources."""

from __future__ import annotations

import threading
from dataclasses import dataclass

from tree_sitter import Language, Parser


def load_python_language() -> Language:
    """Return a Tree-sitter Language object for Python."""
    try:
        import tree_sitter_python as tspython
    except ImportError as exc:  # pragma: no cover - import guard
        raise RuntimeError("tree_sitter_python is not installed") from exc

    # tree_sitter_python exposes either `language` (callable or object) or `LANGUAGE`.
    if hasattr(tspython, "language"):
        lang = tspython.language
        lang = lang() if callable(lang) else lang
    elif hasattr(tspython, "LANGUAGE"):
        lang = tspython.LANGUAGE
    else:
        raise RuntimeError("Unsupported tree_sitter_python API")

    if isinstance(lang, Language):
        return lang
    return Language(lang)


@dataclass
class ParsedSource:
    tree: object
    source_bytes: bytes

    @property
    def root(self):
        return self.tree.root_node

    def syntax_error(self) -> str | None:
        """Describe the first ERROR or MISSING node, or None for a clean tree."""
        if not self.root.has_error:
            return None
        stack = [self.root]
        while stack:
            node = stack.pop()
            if node.type == "ERROR" or node.is_missing:
                line, column = node.start_point
                kind = f"missing {node.type}" if node.is_missing else "invalid syntax"
                return f"{kind} at line {line + 1}, column {column + 1}"
            if node.has_error:
                stack.extend(reversed(node.children))
        return "invalid syntax"


class PythonParser:
    def __init__(self) -> None:
        self._parser = Parser()
        language = load_python_language()
        # tree-sitter API supports either set_language or direct attribute.
        if hasattr(self._parser, "set_language"):
            self._parser.set_language(language)
        else:
            self._parser.language = language

    def parse_bytes(self, source_bytes: bytes) -> ParsedSource:
        tree = self._parser.parse(source_bytes)
        return ParsedSource(tree=tree, source_bytes=source_bytes)

    def parse_text(self, source_text: str) -> ParsedSource:
        return self.parse_bytes(source_text.encode("utf-8"))


_local = threading.local()


def thread_parser() -> PythonParser:
    """Return the calling thread's parser; tree-sitter parsers are not shared."""
    parser = getattr(_local, "parser", None)
    if parser is None:
        parser = PythonParser()
        _local.parser = parser
    return parser
