from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Literal, Optional

from .models import _utc_now_iso


EventType = Literal[
    "InstallRequested",
    "PlanCreated",
    "StepStarted",
    "StepCompleted",
    "StepFailed",
    "InstallCompleted",
    "InstallFailed",
]


@dataclass(frozen=True)
class InstallEvent:
    event_type: EventType
    ts: str
    formula: str
    version_tag: str
    plan_id: Optional[str] = None
    step_id: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def mk(
        event_type: EventType,
        formula: str,
        version_tag: str,
        plan_id: Optional[str] = None,
        step_id: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> "InstallEvent":
        return InstallEvent(
            event_type=event_type,
            ts=_utc_now_iso(),
            formula=formula,
            version_tag=version_tag,
            plan_id=plan_id,
            step_id=step_id,
            payload=payload or {},
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
