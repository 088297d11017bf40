from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Mapping

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


TreeFactory = Callable[[Path, Mapping[str, "str | bytes"]], Path]


def _write_tree(root: Path, files: Mapping[str, str | bytes]) -> Path:
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture()
def make_tree() -> TreeFactory:
    """Write ``{relative_path: content}`` under a directory and return it."""

    return _write_tree


@pytest.fixture()
def web_template(tmp_path: Path) -> Path:
    """A small JavaScript-style template used across the scaffold tests."""

    return _write_tree(
        tmp_path / "templates" / "web",
        {
            "package.json": '{"name": "{{project_name}}"}\n',
            "README.md": "# {{project_name}}\n",
            "src/index.ts": "export const name = '{{project_name}}';\n",
            "src/secrets/key.pem": "-----BEGIN KEY-----\n",
            "assets/logo.png": b"\x89PNG\r\n\x1a\n\x00\x00{{project_name}}",
        },
    )
