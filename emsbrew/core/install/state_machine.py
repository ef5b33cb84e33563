# emsbrew/core/install/state_machine.py
from __future__ import annotations

from typing import Set, Tuple

from .models import InstallState


_ALLOWED: Set[Tuple[InstallState, InstallState]] = {
    (InstallState.PENDING, InstallState.RESOLVED),
    (InstallState.RESOLVED, InstallState.CONFIGURED),
    (InstallState.CONFIGURED, InstallState.BUILT),
    (InstallState.BUILT, InstallState.BINDINGS_INSTALLED),

    # bindings are optional
    (InstallState.BUILT, InstallState.SUCCEEDED),
    (InstallState.BINDINGS_INSTALLED, InstallState.SUCCEEDED),

    (InstallState.PENDING, InstallState.FAILED),
    (InstallState.RESOLVED, InstallState.FAILED),
    (InstallState.CONFIGURED, InstallState.FAILED),
    (InstallState.BUILT, InstallState.FAILED),
    (InstallState.BINDINGS_INSTALLED, InstallState.FAILED),
}

_TERMINAL: Set[InstallState] = {
    InstallState.SUCCEEDED,
    InstallState.FAILED,
}


def is_terminal(state: InstallState) -> bool:
    return state in _TERMINAL


def can_transition(src: InstallState, dst: InstallState) -> bool:
    if src == dst:
        return True
    if src in _TERMINAL:
        return False
    return (src, dst) in _ALLOWED


def ensure_transition(src: InstallState, dst: InstallState) -> None:
    if not can_transition(src, dst):
        raise ValueError(f"Illegal transition: {src.value} -> {dst.value}")
