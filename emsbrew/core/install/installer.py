from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from emsbrew.core.config import InstallerSettings
from emsbrew.core.deps import (
    BrewResolver,
    ChainResolver,
    DependencyResolver,
    ExecutableResolver,
    StaticResolver,
    resolve_all,
)
from emsbrew.core.formula.models import Formula
from emsbrew.core.observability.audit import audit_event
from emsbrew.core.python_env import link_environment, probe_python_version
from emsbrew.core.toolchain.backends import CommandBackend, SubprocessBackend
from emsbrew.core.toolchain.commands import run_checked
from emsbrew.core.toolchain.environment import build_env_overrides, scoped_environ

from .events import EventType, InstallEvent
from .models import InstallRecord, InstallState
from .plan import PYTHON_STEP_TYPES, InstallPlan, PlanStep, make_install_plan
from .state_machine import is_terminal
from .store import InstallStore

_log = logging.getLogger("emsbrew.install")

# state reached once a step of this type completes
_STATE_AFTER: Dict[str, InstallState] = {
    "ResolveDependencies": InstallState.RESOLVED,
    "Configure": InstallState.CONFIGURED,
    "Build": InstallState.BUILT,
}


@dataclass
class InstallResult:
    formula: str
    version_tag: str
    plan_id: str
    prefix: str
    state: InstallState
    options: List[str]
    dependency_prefixes: Dict[str, str]
    completed_steps: List[str]
    written_paths: List[str] = field(default_factory=list)
    events: List[Dict[str, Any]] = field(default_factory=list)


class FormulaInstaller:
    """Runs one formula's install procedure.

    Steps run strictly in plan order: resolve dependencies, cmake configure,
    make, then (python option only) private env, pip packages, the .pth link
    and the two binding builds. The first failure aborts the install; there
    is no retry and no rollback.
    """

    def __init__(
        self,
        formula: Formula,
        settings: InstallerSettings,
        *,
        backend: Optional[CommandBackend] = None,
        resolver: Optional[DependencyResolver] = None,
        store: Optional[InstallStore] = None,
    ):
        self.formula = formula
        self.settings = settings
        self.backend = backend or SubprocessBackend()
        self.resolver = resolver or default_resolver(settings, self.backend)
        if store is None and settings.state_dir is not None:
            store = InstallStore(state_dir=settings.state_dir)
        self.store = store

    # -----------------------------------------------------------------
    # planning
    # -----------------------------------------------------------------

    def plan(self, options: Optional[Dict[str, bool]] = None) -> InstallPlan:
        selected = self.formula.effective_options(options)
        python_version = None
        if "python" in selected and self.formula.has_python_bindings():
            python_version = probe_python_version(self.backend, self.settings.python)
        return make_install_plan(
            formula=self.formula,
            selected_options=selected,
            prefix=self.settings.prefix,
            source_dir=self.settings.source_dir,
            jobs=self.settings.jobs,
            python=self.settings.python,
            python_version=python_version,
        )

    def sdk_root(self) -> Optional[Path]:
        if self.settings.sdk_root is not None:
            return self.settings.sdk_root
        if not self.formula.sdk_root_required or sys.platform != "darwin":
            return None
        r = self.backend.run(["xcrun", "--sdk", "macosx", "--show-sdk-path"])
        out = (r.stdout or "").strip()
        if r.returncode != 0 or not out:
            _log.warning("xcrun could not report the macOS SDK path; SDKROOT left unset")
            return None
        return Path(out)

    # -----------------------------------------------------------------
    # execution
    # -----------------------------------------------------------------

    def install(self, options: Optional[Dict[str, bool]] = None) -> InstallResult:
        selected = sorted(self.formula.effective_options(options))
        events: List[InstallEvent] = []
        completed: List[str] = []
        written: List[str] = []
        dep_prefixes: Dict[str, Path] = {}
        plan: Optional[InstallPlan] = None
        plan_id: Optional[str] = None

        rec = self._start(selected)
        self._emit(events, "InstallRequested", None, payload={"options": selected})

        _log.info(
            "Installing %s@%s into %s (options: %s)",
            self.formula.name,
            self.formula.version_tag,
            self.settings.prefix,
            ", ".join(selected) or "none",
        )

        # dependencies are checked before anything external runs, the
        # interpreter version query behind plan() included
        stage: Optional[str] = "resolve_dependencies"
        try:
            self._emit(events, "StepStarted", None, step_id=stage)
            deps = self.formula.required_dependencies(selected)
            dep_prefixes = resolve_all(deps, self.resolver)
            completed.append(stage)
            self._emit(events, "StepCompleted", None, step_id=stage)
            if rec is not None:
                rec.dependency_prefixes = {k: str(v) for k, v in dep_prefixes.items()}
            rec = self._advance(rec, InstallState.RESOLVED, stage, {"dependencies": sorted(dep_prefixes)})

            stage = "plan"
            plan = self.plan(options)
            plan_id = plan.compute_plan_id()
            rec = self._attach_plan(rec, plan)
            self._emit(events, "PlanCreated", plan_id, payload={"step_count": len(plan.steps)})

            overrides = build_env_overrides(
                base=os.environ,
                cxx_std=self.settings.cxx_std or self.formula.cxx_std,
                sdk_root=self.sdk_root(),
                dependency_prefixes=list(dep_prefixes.values()),
            )
            with scoped_environ(overrides):
                for step in plan.steps[1:]:
                    stage = step.step_id
                    self._emit(events, "StepStarted", plan_id, step_id=step.step_id)
                    out = self._run_step(step)
                    if out is not None:
                        written.append(str(out))
                    completed.append(step.step_id)
                    self._emit(events, "StepCompleted", plan_id, step_id=step.step_id)

                    nxt = _STATE_AFTER.get(step.step_type)
                    if nxt is not None:
                        rec = self._advance(rec, nxt, step.step_id)
            stage = None

            if any(s.step_type in PYTHON_STEP_TYPES for s in plan.steps):
                rec = self._advance(rec, InstallState.BINDINGS_INSTALLED, None)
            rec = self._advance(rec, InstallState.SUCCEEDED, None)
            self._emit(events, "InstallCompleted", plan_id, payload={"steps": len(completed)})
        except Exception as exc:
            _log.error(
                "Install of %s@%s failed at %s: %s",
                self.formula.name,
                self.formula.version_tag,
                stage,
                exc,
            )
            self._emit(events, "StepFailed", plan_id, step_id=stage, payload={"error": str(exc)})
            self._emit(events, "InstallFailed", plan_id, payload={"error": str(exc)})
            self._record_failure(rec, exc, stage, events)
            raise

        self._flush(events)

        return InstallResult(
            formula=plan.formula,
            version_tag=plan.version_tag,
            plan_id=plan_id,
            prefix=plan.prefix,
            state=InstallState.SUCCEEDED,
            options=list(plan.options),
            dependency_prefixes={k: str(v) for k, v in dep_prefixes.items()},
            completed_steps=completed,
            written_paths=written,
            events=[e.to_dict() for e in events],
        )

    def _run_step(self, step: PlanStep) -> Optional[Path]:
        if step.step_type == "LinkSitePackages":
            return link_environment(
                Path(step.inputs["main_site"]),
                Path(step.inputs["target_site"]),
                name=step.inputs["name"],
            )

        cwd = Path(step.cwd) if step.cwd else None
        if step.env:
            env = dict(step.env)
            if "PYTHONPATH" in env:
                env.update(build_env_overrides(base=os.environ, python_path=[env["PYTHONPATH"]]))
            with scoped_environ(env):
                run_checked(self.backend, step.argv, cwd=cwd)
        else:
            run_checked(self.backend, step.argv, cwd=cwd)
        return None

    # -----------------------------------------------------------------
    # bookkeeping
    # -----------------------------------------------------------------

    def _start(self, selected: List[str]) -> Optional[InstallRecord]:
        if self.store is None:
            return None
        rec = self.store.start(
            formula=self.formula.name,
            version_tag=self.formula.version_tag,
            prefix=str(self.settings.prefix),
            options=selected,
        )
        self._audit("install.started", rec)
        return rec

    def _attach_plan(self, rec: Optional[InstallRecord], plan: InstallPlan) -> Optional[InstallRecord]:
        if self.store is None or rec is None:
            return rec
        return self.store.attach_plan(rec, plan)

    def _advance(
        self,
        rec: Optional[InstallRecord],
        dst: InstallState,
        step_id: Optional[str],
        data: Optional[Dict[str, Any]] = None,
    ) -> Optional[InstallRecord]:
        _log.debug("-> %s", dst.value)
        if self.store is None or rec is None:
            return rec
        rec = self.store.transition(rec, dst, message=step_id or dst.value.lower(), data=data)
        if dst == InstallState.SUCCEEDED:
            self._audit("install.succeeded", rec)
        return rec

    def _record_failure(
        self,
        rec: Optional[InstallRecord],
        exc: Exception,
        step_id: Optional[str],
        events: List[InstallEvent],
    ) -> None:
        """Persist the failure without letting bookkeeping errors replace ``exc``."""
        try:
            self._fail(rec, exc, step_id)
        except Exception:
            _log.exception("Could not record the failed install of %s@%s", self.formula.name, self.formula.version_tag)
        try:
            self._flush(events)
        except Exception:
            _log.exception("Could not write install events to %s", self.settings.state_dir)

    def _fail(self, rec: Optional[InstallRecord], exc: Exception, step_id: Optional[str]) -> None:
        # a record that already finished keeps its final state
        if self.store is None or rec is None or is_terminal(rec.state):
            return
        rec.last_error = str(exc)
        rec = self.store.transition(
            rec,
            InstallState.FAILED,
            message=f"failed at {step_id}" if step_id else "failed",
            data={"error_type": type(exc).__name__},
        )
        self._audit("install.failed", rec, extra={"step_id": step_id, "error": str(exc)})

    def _audit(self, event_type: str, rec: InstallRecord, extra: Optional[Dict[str, Any]] = None) -> None:
        if self.settings.state_dir is None:
            return
        audit_event(
            event_type,
            formula=rec.formula,
            version_tag=rec.version_tag,
            plan_id=rec.plan_id,
            state=rec.state.value,
            audit_path=self.settings.state_dir / "audit.log",
            extra=extra,
        )

    def _emit(
        self,
        events: List[InstallEvent],
        event_type: EventType,
        plan_id: Optional[str],
        *,
        step_id: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        events.append(
            InstallEvent.mk(
                event_type,
                self.formula.name,
                self.formula.version_tag,
                plan_id=plan_id,
                step_id=step_id,
                payload=payload,
            )
        )

    def _flush(self, events: List[InstallEvent]) -> None:
        if self.store is not None:
            self.store.append_events([e.to_dict() for e in events])


def default_resolver(settings: InstallerSettings, backend: CommandBackend) -> DependencyResolver:
    return ChainResolver(
        [
            StaticResolver(settings.dependency_prefixes),
            ExecutableResolver(),
            BrewResolver(backend),
        ]
    )
