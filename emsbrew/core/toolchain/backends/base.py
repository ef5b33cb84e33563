from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Sequence


@dataclass(frozen=True)
class CommandResult:
    argv: List[str]
    returncode: int
    cwd: Optional[str] = None
    stdout: str = ""
    stderr: str = ""
    meta: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandBackend(ABC):
    name: str

    @abstractmethod
    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> CommandResult:
        """Run one external command to completion.

        Must not raise on a non-zero exit; the caller decides what a failure means.
        ``env=None`` inherits the current process environment.
        """
