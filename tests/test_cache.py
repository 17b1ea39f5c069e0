from __future__ import annotations

import json
import os

from classintel.cache import ParseCache, parse_with_cache
from classintel.config import CACHE_VERSION
from classintel.exceptions import ParseError
from classintel.extract import extract_files
from classintel.models import ClassDefinition, Import, ParsedFile


def _paths(root, *names):
    return [str(root / name) for name in names]


def test_second_run_is_served_from_cache(write_tree, monkeypatch):
    root = write_tree({"a.py": "class A:\n    pass\n", "b.py": "from a import A\n\nclass B(A):\n    pass\n"})
    cache_path = root / "cache.json"
    paths = _paths(root, "a.py", "b.py")

    first = parse_with_cache(root, paths, cache_path)

    parsed_again: list[list[str]] = []

    def tracking(root, paths, max_workers=None):
        parsed_again.append(list(paths))
        return extract_files(root, paths, max_workers=max_workers)

    monkeypatch.setattr("classintel.cache.extract_files", tracking)
    second = parse_with_cache(root, paths, cache_path)

    assert parsed_again == [[]]
    assert [parsed.to_dict() for parsed in first] == [parsed.to_dict() for parsed in second]


def test_changed_file_is_reparsed(write_tree):
    root = write_tree({"a.py": "class A:\n    pass\n"})
    cache_path = root / "cache.json"
    paths = _paths(root, "a.py")
    parse_with_cache(root, paths, cache_path)

    target = root / "a.py"
    target.write_text("class A:\n    pass\n\nclass Extra(A):\n    pass\n", encoding="utf-8")
    stats = target.stat()
    os.utime(target, ns=(stats.st_atime_ns, stats.st_mtime_ns + 1_000_000_000))

    [parsed] = parse_with_cache(root, paths, cache_path)

    assert [cls.name for cls in parsed.classes] == ["A", "Extra"]


def test_failed_files_are_evicted(write_tree):
    root = write_tree({"a.py": "class A:\n    pass\n"})
    cache_path = root / "cache.json"
    paths = _paths(root, "a.py")
    parse_with_cache(root, paths, cache_path)

    target = root / "a.py"
    target.write_text("class A(:\n", encoding="utf-8")
    stats = target.stat()
    os.utime(target, ns=(stats.st_atime_ns, stats.st_mtime_ns + 1_000_000_000))

    [result] = parse_with_cache(root, paths, cache_path)

    assert isinstance(result, ParseError)
    assert ParseCache.load(cache_path).entries == {}


def test_vanished_files_are_pruned(write_tree):
    root = write_tree({"a.py": "class A:\n    pass\n", "b.py": "class B:\n    pass\n"})
    cache_path = root / "cache.json"
    parse_with_cache(root, _paths(root, "a.py", "b.py"), cache_path)

    parse_with_cache(root, _paths(root, "a.py"), cache_path)

    assert list(ParseCache.load(cache_path).entries) == _paths(root, "a.py")


def test_version_mismatch_and_corrupt_files_start_fresh(tmp_path):
    stale = tmp_path / "stale.json"
    stale.write_text(json.dumps({"version": CACHE_VERSION + 1, "entries": {"x.py": {}}}), encoding="utf-8")
    corrupt = tmp_path / "corrupt.json"
    corrupt.write_text("{not json", encoding="utf-8")
    malformed = tmp_path / "malformed.json"
    malformed.write_text(json.dumps({"version": CACHE_VERSION, "entries": {"x.py": {}}}), encoding="utf-8")

    assert ParseCache.load(stale).entries == {}
    assert ParseCache.load(corrupt).entries == {}
    assert ParseCache.load(malformed).entries == {}
    assert ParseCache.load(tmp_path / "missing.json").entries == {}


def test_save_and_load_preserve_entries(write_tree):
    root = write_tree({"pkg/__init__.py": "from .a import A\n"})
    file_path = str(root / "pkg" / "__init__.py")
    parsed = ParsedFile(
        file_path=file_path,
        module_path="pkg",
        is_package=True,
        classes=[ClassDefinition("Outer.Inner", ("Base", "mod.Other"))],
        imports=[Import("pkg.a.A", "A")],
    )
    cache = ParseCache(root / "nested" / "cache.json")
    cache.store(file_path, parsed)
    cache.save()

    loaded = ParseCache.load(root / "nested" / "cache.json")

    assert loaded.lookup(file_path) == parsed


def test_cache_for_another_root_starts_fresh(write_tree):
    root = write_tree({"pkg/a.py": "class A:\n    pass\n"})
    cache_path = root / "cache.json"
    parse_with_cache(root, _paths(root, "pkg/a.py"), cache_path)

    assert ParseCache.load(cache_path, root=str(root)).entries
    assert ParseCache.load(cache_path, root=str(root / "pkg")).entries == {}

    [parsed] = parse_with_cache(root / "pkg", _paths(root, "pkg/a.py"), cache_path)

    assert parsed.module_path == "a"
    assert ParseCache.load(cache_path, root=str(root / "pkg")).root == str(root / "pkg")
