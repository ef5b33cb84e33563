import json
from pathlib import Path

import pytest

from emsbrew import cli
from emsbrew.core.errors import CommandFailedError, MissingDependencyError
from emsbrew.core.install import InstallState
from emsbrew.core.install.installer import InstallResult


def test_dry_run_prints_plan_without_running_anything(tmp_path: Path, capsys):
    rc = cli.main([
        "install",
        "--dry-run",
        "--without-python",
        "--prefix", str(tmp_path / "prefix"),
        "--source-dir", str(tmp_path / "src"),
        "-j", "2",
    ])
    assert rc == 0

    plan = json.loads(capsys.readouterr().out)
    assert plan["version_tag"] == "v5"
    assert [s["step_id"] for s in plan["steps"]] == ["resolve_dependencies", "configure", "build"]
    assert plan["steps"][2]["argv"] == ["make", "-j2"]
    assert not (tmp_path / "prefix").exists()


def test_dry_run_for_older_formula(tmp_path: Path, capsys):
    rc = cli.main(["install", "--dry-run", "--formula", "v1", "--prefix", str(tmp_path)])
    assert rc == 0
    plan = json.loads(capsys.readouterr().out)
    assert "flex" in plan["steps"][0]["inputs"]["dependencies"]


def test_unknown_formula_is_usage_error(tmp_path: Path):
    assert cli.main(["install", "--dry-run", "--formula", "v42"]) == 2


def test_python_option_on_formula_without_it_is_usage_error(tmp_path: Path):
    assert cli.main(["install", "--dry-run", "--formula", "v2", "--with-python"]) == 2


def test_invalid_jobs_is_usage_error():
    assert cli.main(["install", "--dry-run", "-j", "0"]) == 2


class _StubInstaller:
    raises = None
    seen = {}

    def __init__(self, formula, settings, **kw):
        self.formula = formula
        self.settings = settings

    def install(self, options=None):
        _StubInstaller.seen = {"options": options, "prefix": self.settings.prefix}
        if _StubInstaller.raises is not None:
            raise _StubInstaller.raises
        return InstallResult(
            formula=self.formula.name,
            version_tag=self.formula.version_tag,
            plan_id="x",
            prefix=str(self.settings.prefix),
            state=InstallState.SUCCEEDED,
            options=sorted(k for k, v in (options or {}).items() if v),
            dependency_prefixes={},
            completed_steps=[],
        )


@pytest.mark.parametrize(
    "exc,code",
    [
        (None, 0),
        (MissingDependencyError(["vtk"]), 2),
        (CommandFailedError(["make"], 2), 1),
    ],
)
def test_install_exit_codes(monkeypatch, tmp_path: Path, exc, code):
    monkeypatch.setattr(cli, "FormulaInstaller", _StubInstaller)
    monkeypatch.setattr(_StubInstaller, "raises", exc)

    rc = cli.main(["install", "--with-python", "--prefix", str(tmp_path)])

    assert rc == code
    assert _StubInstaller.seen == {"options": {"python": True}, "prefix": tmp_path}


def test_missing_config_file_is_usage_error(tmp_path: Path):
    assert cli.main(["install", "--dry-run", "--config", str(tmp_path / "nope.yaml")]) == 2
