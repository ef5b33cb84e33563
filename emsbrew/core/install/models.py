from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


class InstallState(str, Enum):
    PENDING = "PENDING"
    RESOLVED = "RESOLVED"
    CONFIGURED = "CONFIGURED"
    BUILT = "BUILT"
    BINDINGS_INSTALLED = "BINDINGS_INSTALLED"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


@dataclass
class StateEvent:
    ts: str
    state: InstallState
    message: str = ""
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class InstallRecord:
    formula: str
    version_tag: str
    plan_id: Optional[str]
    prefix: str
    state: InstallState
    created_ts: str
    updated_ts: str

    options: List[str] = field(default_factory=list)
    dependency_prefixes: Dict[str, str] = field(default_factory=dict)
    finished_ts: Optional[str] = None

    last_error: Optional[str] = None
    events: List[StateEvent] = field(default_factory=list)

    @property
    def key(self) -> str:
        return f"{self.formula}-{self.version_tag}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "formula": self.formula,
            "version_tag": self.version_tag,
            "plan_id": self.plan_id,
            "prefix": self.prefix,
            "state": self.state.value,
            "created_ts": self.created_ts,
            "updated_ts": self.updated_ts,
            "options": self.options,
            "dependency_prefixes": self.dependency_prefixes or {},
            "finished_ts": self.finished_ts,
            "last_error": self.last_error,
            "events": [
                {
                    "ts": e.ts,
                    "state": e.state.value,
                    "message": e.message,
                    "data": e.data,
                }
                for e in self.events
            ],
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "InstallRecord":
        evs: List[StateEvent] = []
        for e in d.get("events", []) or []:
            evs.append(
                StateEvent(
                    ts=e["ts"],
                    state=InstallState(e["state"]),
                    message=e.get("message", ""),
                    data=e.get("data", {}) or {},
                )
            )

        return InstallRecord(
            formula=d["formula"],
            version_tag=d["version_tag"],
            plan_id=d.get("plan_id"),
            prefix=d["prefix"],
            state=InstallState(d["state"]),
            created_ts=d.get("created_ts") or _utc_now_iso(),
            updated_ts=d.get("updated_ts") or _utc_now_iso(),
            options=list(d.get("options") or []),
            dependency_prefixes=d.get("dependency_prefixes") or {},
            finished_ts=d.get("finished_ts"),
            last_error=d.get("last_error"),
            events=evs,
        )
