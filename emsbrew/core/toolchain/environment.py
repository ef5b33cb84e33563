from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Sequence

_log = logging.getLogger("emsbrew.toolchain")


def _append_flag(current: Optional[str], flag: str) -> str:
    parts = (current or "").split()
    if flag in parts:
        return " ".join(parts)
    return " ".join(parts + [flag])


def _prepend_path(current: Optional[str], entries: Sequence[str]) -> str:
    existing = [p for p in (current or "").split(os.pathsep) if p]
    out: List[str] = []
    for p in list(entries) + existing:
        if p not in out:
            out.append(p)
    return os.pathsep.join(out)


def build_env_overrides(
    *,
    base: Mapping[str, str],
    cxx_std: Optional[str] = None,
    sdk_root: Optional[Path] = None,
    dependency_prefixes: Sequence[Path] = (),
    python_path: Sequence[Path] = (),
) -> Dict[str, str]:
    """Compute the variables to set for the build, relative to ``base``."""
    out: Dict[str, str] = {}
    if sdk_root is not None:
        out["SDKROOT"] = str(sdk_root)
    if cxx_std:
        out["CXXFLAGS"] = _append_flag(base.get("CXXFLAGS"), f"-std={cxx_std}")
    if dependency_prefixes:
        out["CMAKE_PREFIX_PATH"] = _prepend_path(
            base.get("CMAKE_PREFIX_PATH"), [str(p) for p in dependency_prefixes]
        )
    if python_path:
        out["PYTHONPATH"] = _prepend_path(base.get("PYTHONPATH"), [str(p) for p in python_path])
    return out


@contextmanager
def scoped_environ(overrides: Mapping[str, str]) -> Iterator[None]:
    """Apply ``overrides`` to os.environ and restore the previous values on exit."""
    saved: Dict[str, Optional[str]] = {k: os.environ.get(k) for k in overrides}
    for k, v in overrides.items():
        _log.debug("env %s=%s", k, v)
        os.environ[k] = v
    try:
        yield
    finally:
        for k, old in saved.items():
            if old is None:
                os.environ.pop(k, None)
            else:
                os.environ[k] = old
