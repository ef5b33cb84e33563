# emsbrew/core/toolchain/commands.py
from __future__ import annotations

import logging
import shlex
from pathlib import Path
from typing import Mapping, Optional, Sequence

from emsbrew.core.errors import CommandFailedError

from .backends import CommandBackend, CommandResult

_log = logging.getLogger("emsbrew.toolchain")

# stderr lines kept on a failure
_STDERR_TAIL = 40


def run_checked(
    backend: CommandBackend,
    argv: Sequence[str],
    *,
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> CommandResult:
    """Run a command through ``backend``; any non-zero exit is fatal."""
    args = [str(a) for a in argv]
    _log.info("==> %s", " ".join(shlex.quote(a) for a in args))
    r = backend.run(args, cwd=cwd, env=env)
    if r.returncode != 0:
        tail = "\n".join((r.stderr or r.stdout or "").splitlines()[-_STDERR_TAIL:])
        _log.error("%s exited with %d (cwd=%s)", args[0], r.returncode, r.cwd)
        raise CommandFailedError(args, r.returncode, cwd=r.cwd, stderr=tail)
    return r
