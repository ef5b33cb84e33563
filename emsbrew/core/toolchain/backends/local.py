from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Mapping, Optional, Sequence

from .base import CommandBackend, CommandResult

_log = logging.getLogger("emsbrew.toolchain")


class SubprocessBackend(CommandBackend):
    name = "subprocess"

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> CommandResult:
        args = [str(a) for a in argv]
        try:
            p = subprocess.run(
                args,
                cwd=str(cwd) if cwd is not None else None,
                env=dict(env) if env is not None else None,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as exc:
            # executable itself is missing; report it like a shell would
            return CommandResult(
                argv=args,
                returncode=127,
                cwd=str(cwd) if cwd is not None else None,
                stderr=str(exc),
            )

        stdout = p.stdout or ""
        stderr = p.stderr or ""
        for line in stdout.splitlines():
            _log.debug("[%s] %s", Path(args[0]).name, line)
        return CommandResult(
            argv=args,
            returncode=p.returncode,
            cwd=str(cwd) if cwd is not None else None,
            stdout=stdout,
            stderr=stderr,
        )
