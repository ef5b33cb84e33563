from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Literal, Optional

from emsbrew.core.formula.models import Formula
from emsbrew.core.python_env import (
    binding_env,
    build_ext_argv,
    create_venv_argv,
    install_argv,
    main_site_packages,
    pip_install_argv,
)
from emsbrew.core.python_env.site_link import PTH_NAME
from emsbrew.core.toolchain.cmake import configure_argv, make_argv


StepType = Literal[
    "ResolveDependencies",
    "Configure",
    "Build",
    "CreateVenv",
    "PipInstall",
    "LinkSitePackages",
    "BuildBinding",
    "InstallBinding",
]

PYTHON_STEP_TYPES = {"CreateVenv", "PipInstall", "LinkSitePackages", "BuildBinding", "InstallBinding"}


@dataclass(frozen=True)
class PlanStep:
    step_id: str
    step_type: StepType
    depends_on: List[str] = field(default_factory=list)
    argv: List[str] = field(default_factory=list)
    cwd: Optional[str] = None
    env: Dict[str, str] = field(default_factory=dict)
    inputs: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step_id": self.step_id,
            "step_type": self.step_type,
            "depends_on": self.depends_on,
            "argv": self.argv,
            "cwd": self.cwd,
            "env": self.env,
            "inputs": self.inputs,
        }


@dataclass(frozen=True)
class InstallPlan:
    plan_version: str
    formula: str
    version_tag: str
    prefix: str
    source_dir: str
    options: List[str]
    steps: List[PlanStep] = field(default_factory=list)
    expected_paths: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def compute_plan_id(self) -> str:
        payload = {
            "plan_version": self.plan_version,
            "formula": self.formula,
            "version_tag": self.version_tag,
            "prefix": self.prefix,
            "source_dir": self.source_dir,
            "options": self.options,
            "steps": [s.to_dict() for s in self.steps],
            "expected_paths": self.expected_paths,
        }
        return hashlib.sha256(json.dumps(payload, sort_keys=True).encode("utf-8")).hexdigest()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "plan_id": self.compute_plan_id(),
            "plan_version": self.plan_version,
            "formula": self.formula,
            "version_tag": self.version_tag,
            "prefix": self.prefix,
            "source_dir": self.source_dir,
            "options": self.options,
            "expected_paths": self.expected_paths,
            "metadata": self.metadata,
            "steps": [s.to_dict() for s in self.steps],
        }

    def step_ids(self) -> List[str]:
        return [s.step_id for s in self.steps]


def _slug(subdir: str) -> str:
    return subdir.strip("/").replace("/", "_").lower()


def make_install_plan(
    *,
    formula: Formula,
    selected_options: Iterable[str],
    prefix: Path,
    source_dir: Path,
    jobs: Optional[int] = None,
    python: Optional[str] = None,
    python_version: Optional[str] = None,
) -> InstallPlan:
    options = sorted(set(selected_options))
    deps = formula.required_dependencies(options)
    src = str(source_dir)

    steps: List[PlanStep] = [
        PlanStep(
            step_id="resolve_dependencies",
            step_type="ResolveDependencies",
            inputs={"dependencies": [d.name for d in deps]},
        ),
        PlanStep(
            step_id="configure",
            step_type="Configure",
            depends_on=["resolve_dependencies"],
            argv=configure_argv(prefix),
            cwd=src,
        ),
        PlanStep(
            step_id="build",
            step_type="Build",
            depends_on=["configure"],
            argv=make_argv(jobs),
            cwd=src,
        ),
    ]
    expected_paths = [str(prefix)]

    if "python" in options and formula.has_python_bindings():
        if not python or not python_version:
            raise ValueError("python bindings need both an interpreter and its version")
        benv = binding_env(prefix, python, python_version)
        site = main_site_packages(prefix, python_version)
        pythonpath = {"PYTHONPATH": str(benv.site_packages)}

        steps += [
            PlanStep(
                step_id="create_venv",
                step_type="CreateVenv",
                depends_on=["build"],
                argv=create_venv_argv(benv),
            ),
            PlanStep(
                step_id="pip_install",
                step_type="PipInstall",
                depends_on=["create_venv"],
                argv=pip_install_argv(benv, formula.python_packages),
            ),
            PlanStep(
                step_id="link_site_packages",
                step_type="LinkSitePackages",
                depends_on=["pip_install"],
                inputs={"main_site": str(site), "target_site": str(benv.site_packages), "name": PTH_NAME},
            ),
        ]

        prev = "link_site_packages"
        for subdir in formula.binding_subdirs:
            slug = _slug(subdir)
            cwd = str(source_dir / subdir)
            steps += [
                PlanStep(
                    step_id=f"build_binding_{slug}",
                    step_type="BuildBinding",
                    depends_on=[prev],
                    argv=build_ext_argv(python, prefix),
                    cwd=cwd,
                    env=dict(pythonpath),
                ),
                PlanStep(
                    step_id=f"install_binding_{slug}",
                    step_type="InstallBinding",
                    depends_on=[f"build_binding_{slug}"],
                    argv=install_argv(python, prefix),
                    cwd=cwd,
                    env=dict(pythonpath),
                ),
            ]
            prev = f"install_binding_{slug}"

        expected_paths += [str(benv.venv_root), str(site / PTH_NAME)]

    return InstallPlan(
        plan_version="v1",
        formula=formula.name,
        version_tag=formula.version_tag,
        prefix=str(prefix),
        source_dir=src,
        options=options,
        steps=steps,
        expected_paths=expected_paths,
        metadata={"homepage": formula.homepage, "head_url": formula.head_url},
    )
