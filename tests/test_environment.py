import os
from pathlib import Path

import pytest

from emsbrew.core.toolchain import build_env_overrides, scoped_environ


def test_overrides_append_std_flag_once():
    out = build_env_overrides(base={"CXXFLAGS": "-O2 -std=c++17"}, cxx_std="c++17")
    assert out == {"CXXFLAGS": "-O2 -std=c++17"}

    out = build_env_overrides(base={}, cxx_std="c++11")
    assert out == {"CXXFLAGS": "-std=c++11"}


def test_overrides_prepend_prefix_paths_without_duplicates(tmp_path: Path):
    a, b = tmp_path / "a", tmp_path / "b"
    out = build_env_overrides(
        base={"CMAKE_PREFIX_PATH": os.pathsep.join([str(b), "/usr/local"])},
        dependency_prefixes=[a, b],
    )
    assert out["CMAKE_PREFIX_PATH"].split(os.pathsep) == [str(a), str(b), "/usr/local"]


def test_overrides_sdk_and_pythonpath(tmp_path: Path):
    out = build_env_overrides(base={}, sdk_root=tmp_path / "sdk", python_path=[tmp_path / "site"])
    assert out == {"SDKROOT": str(tmp_path / "sdk"), "PYTHONPATH": str(tmp_path / "site")}


def test_no_overrides_when_nothing_configured():
    assert build_env_overrides(base=dict(os.environ)) == {}


def test_scoped_environ_restores_previous_values(monkeypatch):
    monkeypatch.setenv("CXXFLAGS", "-O2")
    monkeypatch.delenv("SDKROOT", raising=False)

    with scoped_environ({"CXXFLAGS": "-O2 -std=c++17", "SDKROOT": "/sdk"}):
        assert os.environ["CXXFLAGS"] == "-O2 -std=c++17"
        assert os.environ["SDKROOT"] == "/sdk"

    assert os.environ["CXXFLAGS"] == "-O2"
    assert "SDKROOT" not in os.environ


def test_scoped_environ_restores_on_error(monkeypatch):
    monkeypatch.delenv("SDKROOT", raising=False)
    with pytest.raises(RuntimeError):
        with scoped_environ({"SDKROOT": "/sdk"}):
            raise RuntimeError("boom")
    assert "SDKROOT" not in os.environ
