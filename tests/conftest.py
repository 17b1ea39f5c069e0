from __future__ import annotations

import os
from pathlib import Path

import pytest

from classintel.logging_config import setup_logging


def pytest_configure(config):
    os.environ.setdefault("CLASSINTEL_MACHINE_MODE", "1")


@pytest.fixture(autouse=True)
def quiet_logging():
    setup_logging(level="DEBUG", suppress_console=True)


@pytest.fixture
def write_tree(tmp_path: Path):
    """Write {relative_path: source} into tmp_path and return the root."""

    def write(files: dict[str, str]) -> Path:
        for relative, source in files.items():
            path = tmp_path / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(source, encoding="utf-8")
        return tmp_path

    return write
