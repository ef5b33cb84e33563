import os
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Sequence

import pytest

from emsbrew.core.config import InstallerSettings
from emsbrew.core.deps import StaticResolver
from emsbrew.core.formula import FormulaRegistry
from emsbrew.core.observability import close_audit_handlers
from emsbrew.core.toolchain.backends import CommandBackend, CommandResult

WATCHED_ENV = ("CXXFLAGS", "SDKROOT", "PYTHONPATH", "CMAKE_PREFIX_PATH", "MAKEFLAGS")


class FakeBackend(CommandBackend):
    """Records commands instead of running them.

    - ``python -c ...`` answers with ``python_version``
    - ``python -m venv <dir>`` creates <dir>
    - ``fail_when(argv)`` returning True makes that command exit 2
    """

    name = "fake"

    def __init__(
        self,
        *,
        python_version: str = "3.11",
        fail_when: Optional[Callable[[List[str]], bool]] = None,
    ):
        self.python_version = python_version
        self.fail_when = fail_when
        self.calls: List[Dict[str, object]] = []

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> CommandResult:
        args = [str(a) for a in argv]
        self.calls.append(
            {
                "argv": args,
                "cwd": str(cwd) if cwd is not None else None,
                "env": {k: os.environ.get(k) for k in WATCHED_ENV},
            }
        )
        if self.fail_when is not None and self.fail_when(args):
            return CommandResult(argv=args, returncode=2, stderr="error: simulated failure\n")
        if len(args) >= 2 and args[1] == "-c":
            return CommandResult(argv=args, returncode=0, stdout=f"{self.python_version}\n")
        if args[1:3] == ["-m", "venv"]:
            Path(args[3]).mkdir(parents=True, exist_ok=True)
        return CommandResult(argv=args, returncode=0, cwd=str(cwd) if cwd is not None else None)

    def argvs(self) -> List[List[str]]:
        return [c["argv"] for c in self.calls]  # type: ignore[misc]

    def build_commands(self) -> List[List[str]]:
        """Everything except the interpreter version query."""
        return [a for a in self.argvs() if not (len(a) >= 2 and a[1] == "-c")]


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    for key in (
        "EMSBREW_PREFIX",
        "EMSBREW_SOURCE_DIR",
        "EMSBREW_JOBS",
        "EMSBREW_SDK_ROOT",
        "EMSBREW_CXX_STD",
        "EMSBREW_PYTHON",
        "EMSBREW_STATE_DIR",
        "EMSBREW_FORMULA",
        "EMSBREW_FORMULA_DIR",
        "EMSBREW_CONFIG_FILE",
        "SDKROOT",
    ):
        monkeypatch.delenv(key, raising=False)
    yield
    close_audit_handlers()


@pytest.fixture()
def source_tree(tmp_path: Path) -> Path:
    src = tmp_path / "openEMS-Project"
    for sub in ("CSXCAD/python", "openEMS/python"):
        (src / sub).mkdir(parents=True)
    (src / "CMakeLists.txt").write_text("project(openEMS-Project)\n", encoding="utf-8")
    return src


@pytest.fixture()
def settings(tmp_path: Path, source_tree: Path) -> InstallerSettings:
    sdk = tmp_path / "MacOSX.sdk"
    sdk.mkdir()
    return InstallerSettings(
        prefix=tmp_path / "Cellar" / "openems" / "HEAD",
        source_dir=source_tree,
        jobs=4,
        sdk_root=sdk,
        python="python3",
        state_dir=tmp_path / "state",
    )


@pytest.fixture()
def formula():
    return FormulaRegistry().latest()


@pytest.fixture()
def dep_prefixes(tmp_path: Path, formula) -> Dict[str, Path]:
    out: Dict[str, Path] = {}
    for dep in formula.dependencies:
        p = tmp_path / "opt" / dep.name
        p.mkdir(parents=True)
        out[dep.name] = p
    return out


@pytest.fixture()
def resolver(dep_prefixes) -> StaticResolver:
    return StaticResolver(dep_prefixes)


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def make_backend():
    return FakeBackend
