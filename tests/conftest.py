"""Shared fixtures for the aidigest test suite."""

from pathlib import Path
from typing import Dict, List, Union

import pytest


def make_tree(root: Path, files: Dict[str, Union[str, bytes]]) -> Path:
    """Create *files* (relative path -> content) under *root*."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8", newline="")
    return root


def section_headers(document: str) -> List[str]:
    """Relative paths of every ``# <path>`` header in a digest."""
    return [ln[2:] for ln in document.splitlines() if ln.startswith("# ")]


@pytest.fixture
def project(tmp_path):
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def out_file(tmp_path):
    return tmp_path / "out" / "digest.md"
