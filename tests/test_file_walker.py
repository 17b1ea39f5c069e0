from __future__ import annotations

from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from classintel.exceptions import SourceIOError
from classintel.file_walker import is_package_file, iter_python_files, module_path_for


def test_iter_python_files_filters_non_py():
    with TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "a.py").write_text("print('a')", encoding="utf-8")
        (root / "b.txt").write_text("nope", encoding="utf-8")
        sub = root / "sub"
        sub.mkdir()
        (sub / "c.py").write_text("print('c')", encoding="utf-8")

        matches = iter_python_files(root)
        names = {Path(path).name for path in matches}

        assert names == {"a.py", "c.py"}
        assert all(Path(path).is_absolute() for path in matches)


def test_iter_python_files_skips_hidden_and_default_excludes(write_tree):
    root = write_tree(
        {
            "keep.py": "",
            ".hidden/skip.py": "",
            "__pycache__/skip.py": "",
            ".venv/lib/skip.py": "",
        }
    )

    names = {Path(path).relative_to(root.resolve()).as_posix() for path in iter_python_files(root)}

    assert names == {"keep.py"}


def test_iter_python_files_honors_gitignore_at_any_level(write_tree):
    root = write_tree(
        {
            ".gitignore": "build/\ngenerated_*.py\n",
            "build/out.py": "",
            "generated_models.py": "",
            "src/app.py": "",
            "src/.ignore": "legacy.py\n",
            "src/legacy.py": "",
        }
    )

    names = {Path(path).relative_to(root.resolve()).as_posix() for path in iter_python_files(root)}

    assert names == {"src/app.py"}


def test_iter_python_files_lets_deeper_ignore_files_reinclude(write_tree):
    root = write_tree(
        {
            ".gitignore": "gen_*.py\n",
            "a.py": "",
            "gen_top.py": "",
            "sub/.gitignore": "!gen_keep.py\n",
            "sub/gen_keep.py": "",
            "sub/gen_drop.py": "",
        }
    )

    names = {Path(path).relative_to(root.resolve()).as_posix() for path in iter_python_files(root)}

    assert names == {"a.py", "sub/gen_keep.py"}


def test_iter_python_files_can_ignore_the_ignore_files(write_tree):
    root = write_tree({".gitignore": "skipped.py\n", "skipped.py": ""})

    matches = iter_python_files(root, respect_ignore_files=False)

    assert [Path(path).name for path in matches] == ["skipped.py"]


def test_iter_python_files_excludes_relative_and_absolute_dirs(write_tree):
    root = write_tree(
        {
            "app/main.py": "",
            "tests/test_main.py": "",
            "vendor/lib.py": "",
            "vendorized/keep.py": "",
        }
    )

    matches = iter_python_files(root, exclude_dirs=["tests", root / "vendor"])
    names = {Path(path).relative_to(root.resolve()).as_posix() for path in matches}

    assert names == {"app/main.py", "vendorized/keep.py"}


def test_iter_python_files_rejects_missing_root(tmp_path: Path):
    with pytest.raises(SourceIOError):
        iter_python_files(tmp_path / "missing")


def test_module_path_for():
    root = Path("/project/src")

    assert module_path_for(root / "foo/bar/baz.py", root) == "foo.bar.baz"
    assert module_path_for(root / "foo/bar/__init__.py", root) == "foo.bar"
    assert module_path_for(root / "module.py", root) == "module"
    assert module_path_for(root / "__init__.py", root) is None
    assert module_path_for(Path("/elsewhere/module.py"), root) is None


def test_is_package_file():
    assert is_package_file("pkg/__init__.py")
    assert not is_package_file("pkg/init.py")
