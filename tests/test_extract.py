from __future__ import annotations

from pathlib import Path

import pytest

from classintel.exceptions import ParseError
from classintel.extract import extract_file, extract_files, extract_parsed, resolve_relative_module
from classintel.models import ClassDefinition, Import
from classintel.parser import PythonParser


SAMPLE = """
import os, json
import foo.bar as fb
from sys import path as sys_path
from typing import Generic, TypeVar

T = TypeVar("T")


class Foo:
    class_var = 1

    class Inner(Base):
        class Deepest(pkg.mod.Base):
            pass


@decorator
class Container(Generic[T], metaclass=Meta):
    pass


class Bar(Foo, typing.Dict[str, int], make_base(), *extra):
    pass


def build():
    class Hidden(Foo):
        pass
    return Hidden
"""


def _extract(source: str, module_path: str = "mymodule", is_package: bool = False):
    parser = PythonParser()
    parsed = parser.parse_text(source)
    return extract_parsed(parsed, module_path=module_path, is_package=is_package)


def test_extracts_nested_and_decorated_classes():
    parsed = _extract(SAMPLE)
    bases = {cls.name: cls.bases for cls in parsed.classes}

    assert list(bases) == ["Foo", "Foo.Inner", "Foo.Inner.Deepest", "Container", "Bar"]
    assert bases["Foo"] == ()
    assert bases["Foo.Inner"] == ("Base",)
    assert bases["Foo.Inner.Deepest"] == ("pkg.mod.Base",)
    assert bases["Container"] == ("Generic",)
    assert bases["Bar"] == ("Foo", "typing.Dict")


def test_extracts_normalized_imports():
    parsed = _extract(SAMPLE)

    assert parsed.imports == [
        Import("os", "os"),
        Import("json", "json"),
        Import("foo.bar", "fb"),
        Import("sys.path", "sys_path"),
        Import("typing.Generic", "Generic"),
        Import("typing.TypeVar", "TypeVar"),
    ]


@pytest.mark.parametrize(
    ("source", "module_path", "is_package", "expected"),
    [
        ("import foo.bar.baz", "mymodule", False, [("foo.bar.baz", "foo.bar.baz")]),
        ("from foo import Bar as B, Baz", "mymodule", False, [("foo.Bar", "B"), ("foo.Baz", "Baz")]),
        ("from .sibling import Foo", "pkg.mymodule", False, [("pkg.sibling.Foo", "Foo")]),
        ("from .sibling import Foo", "pkg", True, [("pkg.sibling.Foo", "Foo")]),
        ("from ..other import Foo", "pkg.sub.mymodule", False, [("pkg.other.Foo", "Foo")]),
        ("from ..other import Foo", "pkg.sub", True, [("pkg.other.Foo", "Foo")]),
        ("from . import Foo", "pkg.mymodule", False, [("pkg.Foo", "Foo")]),
        ("from ... import Foo", "pkg.mymodule", False, []),
        ("from foo import *", "mymodule", False, []),
    ],
)
def test_import_normalization(source, module_path, is_package, expected):
    parsed = _extract(source, module_path=module_path, is_package=is_package)

    assert [(imp.imported_item, imp.imported_as) for imp in parsed.imports] == expected


def test_resolve_relative_module():
    assert resolve_relative_module("a.b.c", 1, False) == "a.b"
    assert resolve_relative_module("a.b.c", 1, True) == "a.b.c"
    assert resolve_relative_module("a.b.c", 3, False) is None
    assert resolve_relative_module("a.b.c", 3, True) == "a"


def test_extract_file_marks_packages(tmp_path: Path):
    init = tmp_path / "pkg" / "__init__.py"
    init.parent.mkdir()
    init.write_text("from ._base import Node\n", encoding="utf-8")

    parsed = extract_file(init, "pkg")

    assert parsed.is_package
    assert parsed.file_path == str(init)
    assert parsed.imports == [Import("pkg._base.Node", "Node")]


def test_extract_file_rejects_syntax_errors(tmp_path: Path):
    broken = tmp_path / "broken.py"
    broken.write_text("class Foo(:\n    pass\n", encoding="utf-8")

    with pytest.raises(ParseError) as excinfo:
        extract_file(broken, "broken")

    assert excinfo.value.file_path == str(broken)


def test_extract_file_indexes_python2_statements(tmp_path: Path):
    legacy = tmp_path / "legacy.py"
    legacy.write_text(
        "from base import Parent\n\nprint \"hello\"\n\nclass Child(Parent):\n    pass\n",
        encoding="utf-8",
    )

    parsed = extract_file(legacy, "legacy")

    assert parsed.classes == [ClassDefinition("Child", ("Parent",))]


def test_extract_file_rejects_non_utf8(tmp_path: Path):
    binary = tmp_path / "binary.py"
    binary.write_bytes(b"class Foo:\n    x = '\xff\xfe'\n")

    with pytest.raises(ParseError):
        extract_file(binary, "binary")


def test_extract_files_keeps_order_and_reports_failures(write_tree):
    root = write_tree(
        {
            "a.py": "class A:\n    pass\n",
            "b.py": "class B(:\n",
            "__init__.py": "",
            "c.py": "class C(A):\n    pass\n",
        }
    )
    paths = [str(root / name) for name in ("a.py", "b.py", "__init__.py", "c.py")]

    results = extract_files(root, paths, max_workers=2)

    assert [type(result).__name__ for result in results] == [
        "ParsedFile",
        "ParseError",
        "ParseError",
        "ParsedFile",
    ]
    assert results[0].module_path == "a"
    assert results[3].classes[0].bases == ("A",)
