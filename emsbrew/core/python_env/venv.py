from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from emsbrew.core.toolchain.backends import CommandBackend
from emsbrew.core.toolchain.commands import run_checked

_log = logging.getLogger("emsbrew.python")

_VERSION_RE = re.compile(r"^\d+\.\d+$")


@dataclass(frozen=True)
class BindingEnv:
    """Private virtual environment the binding build depends on."""

    python: str
    python_version: str
    venv_root: Path

    @property
    def venv_python(self) -> Path:
        return self.venv_root / "bin" / "python"

    @property
    def site_packages(self) -> Path:
        return self.venv_root / "lib" / f"python{self.python_version}" / "site-packages"


def venv_root_for(prefix: Path) -> Path:
    # libexec is never linked onto PATH
    return prefix / "libexec" / "venv"


def main_site_packages(prefix: Path, python_version: str) -> Path:
    return prefix / "lib" / f"python{python_version}" / "site-packages"


def binding_env(prefix: Path, python: str, python_version: str) -> BindingEnv:
    return BindingEnv(python=python, python_version=python_version, venv_root=venv_root_for(prefix))


def probe_python_version(backend: CommandBackend, python: str) -> str:
    r = run_checked(
        backend,
        [python, "-c", "import sys; print('%d.%d' % sys.version_info[:2])"],
    )
    version = (r.stdout or "").strip()
    if not _VERSION_RE.match(version):
        raise ValueError(f"could not determine python version of {python}: {version!r}")
    _log.debug("%s is python %s", python, version)
    return version


def create_venv_argv(env: BindingEnv) -> List[str]:
    return [env.python, "-m", "venv", str(env.venv_root)]


def pip_install_argv(env: BindingEnv, packages: Sequence[str]) -> List[str]:
    return [str(env.venv_python), "-m", "pip", "install", *packages]
