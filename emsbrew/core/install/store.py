from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from .models import InstallRecord, InstallState, StateEvent, _utc_now_iso
from .plan import InstallPlan
from .state_machine import ensure_transition, is_terminal


def _installs_dir(state_dir: Path) -> Path:
    d = state_dir / "installs"
    d.mkdir(parents=True, exist_ok=True)
    return d


def _plans_dir(state_dir: Path) -> Path:
    d = state_dir / "plans"
    d.mkdir(parents=True, exist_ok=True)
    return d


class InstallStore:
    """File-backed install records, plans and event log.

    Layout under ``state_dir``:
      installs/<formula>-<tag>.json
      plans/<plan_id>.json
      events.log  (JSONL)
    """

    def __init__(self, *, state_dir: Path):
        self.state_dir = state_dir

    def _record_path(self, key: str) -> Path:
        return _installs_dir(self.state_dir) / f"{key}.json"

    def get(self, key: str) -> Optional[InstallRecord]:
        p = self._record_path(key)
        if not p.exists():
            return None
        return InstallRecord.from_dict(json.loads(p.read_text(encoding="utf-8")))

    def upsert(self, rec: InstallRecord) -> None:
        p = self._record_path(rec.key)
        p.write_text(json.dumps(rec.to_dict(), indent=2, sort_keys=True), encoding="utf-8")

    def start(self, *, formula: str, version_tag: str, prefix: str, options: List[str]) -> InstallRecord:
        """Begin a fresh record for this run; a previous record for the same formula is replaced.

        The plan id is filled in by ``attach_plan`` once dependencies have resolved.
        """
        now = _utc_now_iso()
        rec = InstallRecord(
            formula=formula,
            version_tag=version_tag,
            plan_id=None,
            prefix=prefix,
            state=InstallState.PENDING,
            created_ts=now,
            updated_ts=now,
            options=list(options),
            events=[StateEvent(ts=now, state=InstallState.PENDING, message="initialized")],
        )
        self.upsert(rec)
        return rec

    def transition(
        self,
        rec: InstallRecord,
        dst: InstallState,
        *,
        message: str = "",
        data: Optional[Dict[str, Any]] = None,
    ) -> InstallRecord:
        ensure_transition(rec.state, dst)
        now = _utc_now_iso()
        rec.state = dst
        rec.updated_ts = now
        if is_terminal(dst):
            rec.finished_ts = now
        rec.events.append(StateEvent(ts=now, state=dst, message=message, data=data or {}))
        self.upsert(rec)
        return rec

    def attach_plan(self, rec: InstallRecord, plan: InstallPlan) -> InstallRecord:
        rec.plan_id = self.save_plan(plan)
        rec.updated_ts = _utc_now_iso()
        self.upsert(rec)
        return rec

    def save_plan(self, plan: InstallPlan) -> str:
        plan_id = plan.compute_plan_id()
        out = _plans_dir(self.state_dir) / f"{plan_id}.json"
        payload = plan.to_dict()
        payload["created_ts"] = _utc_now_iso()
        out.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return plan_id

    def append_events(self, events: List[Dict[str, Any]]) -> None:
        """Append JSONL events, starting on a fresh line if the log was cut short."""
        if not events:
            return

        log = self.state_dir / "events.log"
        log.parent.mkdir(parents=True, exist_ok=True)

        with log.open("ab+") as f:
            f.seek(0, 2)
            if f.tell() > 0:
                f.seek(-1, 2)
                if f.read(1) != b"\n":
                    f.write(b"\n")
            for e in events:
                f.write((json.dumps(e) + "\n").encode("utf-8"))

