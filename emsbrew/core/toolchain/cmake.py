from __future__ import annotations

from pathlib import Path
from typing import List, Optional


def std_cmake_args(prefix: Path, *, build_type: str = "Release") -> List[str]:
    return [
        f"-DCMAKE_INSTALL_PREFIX={prefix}",
        f"-DCMAKE_BUILD_TYPE={build_type}",
        "-DCMAKE_FIND_FRAMEWORK=LAST",
        "-DCMAKE_VERBOSE_MAKEFILE=ON",
        "-Wno-dev",
    ]


def configure_argv(prefix: Path) -> List[str]:
    return ["cmake", ".", *std_cmake_args(prefix)]


def make_argv(jobs: Optional[int] = None) -> List[str]:
    # the upstream superbuild installs its own artifacts (ExternalProject_Add),
    # so there is no separate install target
    argv = ["make"]
    if jobs:
        argv.append(f"-j{jobs}")
    return argv
