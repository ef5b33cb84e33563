from __future__ import annotations

import logging
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from emsbrew.core.errors import MissingDependencyError
from emsbrew.core.formula.models import Dependency
from emsbrew.core.toolchain.backends import CommandBackend

_log = logging.getLogger("emsbrew.deps")


class DependencyResolver(ABC):
    name: str

    @abstractmethod
    def locate(self, dep: Dependency) -> Optional[Path]:
        """Return the dependency's installation prefix, or None if absent."""


class StaticResolver(DependencyResolver):
    """Prefixes supplied up front, e.g. from the settings file."""

    name = "static"

    def __init__(self, prefixes: Mapping[str, Path]):
        self.prefixes = {k: Path(v) for k, v in prefixes.items()}

    def locate(self, dep: Dependency) -> Optional[Path]:
        p = self.prefixes.get(dep.name)
        if p is None:
            return None
        return p if p.exists() else None


class BrewResolver(DependencyResolver):
    """Asks Homebrew for the prefix of an installed formula."""

    name = "brew"

    def __init__(self, backend: CommandBackend, brew: str = "brew"):
        self.backend = backend
        self.brew = brew

    def locate(self, dep: Dependency) -> Optional[Path]:
        r = self.backend.run([self.brew, "--prefix", "--installed", dep.name])
        if r.returncode != 0:
            return None
        out = (r.stdout or "").strip()
        return Path(out) if out else None


class ExecutableResolver(DependencyResolver):
    """Finds build tools (cmake, flex, bison) on PATH."""

    name = "path"

    def __init__(self, kinds: Sequence[str] = ("build",)):
        self.kinds = set(kinds)

    def locate(self, dep: Dependency) -> Optional[Path]:
        if dep.kind not in self.kinds:
            return None
        exe = shutil.which(dep.name.split("@", 1)[0])
        if not exe:
            return None
        # <prefix>/bin/<tool>
        return Path(exe).resolve().parent.parent


class ChainResolver(DependencyResolver):
    name = "chain"

    def __init__(self, resolvers: Iterable[DependencyResolver]):
        self.resolvers: List[DependencyResolver] = list(resolvers)

    def locate(self, dep: Dependency) -> Optional[Path]:
        for r in self.resolvers:
            p = r.locate(dep)
            if p is not None:
                _log.debug("%s resolved by %s -> %s", dep.name, r.name, p)
                return p
        return None


def resolve_all(deps: Sequence[Dependency], resolver: DependencyResolver) -> Dict[str, Path]:
    """Locate every dependency; raise MissingDependencyError naming all that are absent."""
    found: Dict[str, Path] = {}
    missing: List[str] = []
    for dep in deps:
        p = resolver.locate(dep)
        if p is None:
            _log.error("dependency %s (%s) not found", dep.name, dep.kind)
            missing.append(dep.name)
            continue
        if dep.tags:
            _log.debug("%s requested with %s", dep.name, ", ".join(dep.tags))
        found[dep.name] = p
    if missing:
        raise MissingDependencyError(missing)
    _log.info("Resolved %d dependencies", len(found))
    return found
