from pathlib import Path

import pytest

from emsbrew.core.deps import BrewResolver, ChainResolver, ExecutableResolver, StaticResolver, resolve_all
from emsbrew.core.errors import MissingDependencyError
from emsbrew.core.formula import Dependency
from emsbrew.core.toolchain.backends import CommandBackend, CommandResult


class _BrewStub(CommandBackend):
    name = "brew-stub"

    def __init__(self, installed):
        self.installed = installed
        self.calls = []

    def run(self, argv, *, cwd=None, env=None):
        self.calls.append(list(argv))
        name = argv[-1]
        if name in self.installed:
            return CommandResult(argv=list(argv), returncode=0, stdout=f"{self.installed[name]}\n")
        return CommandResult(argv=list(argv), returncode=1, stderr=f"Error: No available formula {name}\n")


def test_static_resolver_requires_existing_prefix(tmp_path: Path):
    (tmp_path / "vtk").mkdir()
    r = StaticResolver({"vtk": tmp_path / "vtk", "boost": tmp_path / "boost"})
    assert r.locate(Dependency(name="vtk")) == tmp_path / "vtk"
    assert r.locate(Dependency(name="boost")) is None
    assert r.locate(Dependency(name="cgal")) is None


def test_brew_resolver_asks_for_installed_prefix():
    stub = _BrewStub({"hdf5": "/opt/homebrew/opt/hdf5"})
    r = BrewResolver(stub)

    assert r.locate(Dependency(name="hdf5")) == Path("/opt/homebrew/opt/hdf5")
    assert r.locate(Dependency(name="tinyxml")) is None
    assert stub.calls[0] == ["brew", "--prefix", "--installed", "hdf5"]


def test_executable_resolver_only_handles_build_tools(tmp_path: Path, monkeypatch):
    bindir = tmp_path / "tools" / "bin"
    bindir.mkdir(parents=True)
    tool = bindir / "cmake"
    tool.write_text("#!/bin/sh\n", encoding="utf-8")
    tool.chmod(0o755)
    monkeypatch.setenv("PATH", str(bindir))

    r = ExecutableResolver()
    assert r.locate(Dependency(name="cmake", kind="build")) == (tmp_path / "tools").resolve()
    assert r.locate(Dependency(name="cmake", kind="runtime")) is None
    assert r.locate(Dependency(name="flex", kind="build")) is None


def test_chain_resolver_first_hit_wins(tmp_path: Path):
    (tmp_path / "local-vtk").mkdir()
    stub = _BrewStub({"vtk": "/opt/homebrew/opt/vtk", "boost": "/opt/homebrew/opt/boost"})
    chain = ChainResolver([StaticResolver({"vtk": tmp_path / "local-vtk"}), BrewResolver(stub)])

    assert chain.locate(Dependency(name="vtk")) == tmp_path / "local-vtk"
    assert chain.locate(Dependency(name="boost")) == Path("/opt/homebrew/opt/boost")
    assert stub.calls == [["brew", "--prefix", "--installed", "boost"]]


def test_resolve_all_reports_every_missing_name():
    stub = _BrewStub({"vtk": "/opt/vtk"})
    deps = [Dependency(name="vtk"), Dependency(name="cgal"), Dependency(name="boost")]

    with pytest.raises(MissingDependencyError) as ei:
        resolve_all(deps, BrewResolver(stub))

    assert ei.value.names == ["cgal", "boost"]
    assert str(ei.value).startswith("Missing dependency: cgal")


def test_resolve_all_returns_prefixes():
    stub = _BrewStub({"vtk": "/opt/vtk", "cgal": "/opt/cgal"})
    out = resolve_all([Dependency(name="vtk"), Dependency(name="cgal", tags=["c++11"])], BrewResolver(stub))
    assert out == {"vtk": Path("/opt/vtk"), "cgal": Path("/opt/cgal")}
