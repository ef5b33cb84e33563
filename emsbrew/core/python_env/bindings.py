from __future__ import annotations

from pathlib import Path
from typing import List


def build_ext_argv(python: str, prefix: Path) -> List[str]:
    return [
        python,
        "setup.py",
        "build_ext",
        f"-I{prefix / 'include'}",
        f"-L{prefix / 'lib'}",
        f"-R{prefix / 'lib'}",
    ]


def install_argv(python: str, prefix: Path) -> List[str]:
    return [
        python,
        "setup.py",
        "install",
        f"--prefix={prefix}",
        "--single-version-externally-managed",
        "--record=installed.txt",
    ]
