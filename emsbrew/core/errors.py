# emsbrew/core/errors.py
from __future__ import annotations

from typing import List, Optional, Sequence


class InstallError(RuntimeError):
    """Base class for every fatal installation failure."""


class UnknownFormulaError(InstallError):
    def __init__(self, name: str, known: Sequence[str] = ()):
        self.name = name
        self.known = list(known)
        hint = f" (known: {', '.join(self.known)})" if self.known else ""
        super().__init__(f"Unknown formula: {name}{hint}")


class MissingDependencyError(InstallError):
    def __init__(self, names: Sequence[str]):
        if not names:
            raise ValueError("MissingDependencyError requires at least one name")
        self.names: List[str] = list(names)
        extra = f" (+{len(self.names) - 1} more: {', '.join(self.names[1:])})" if len(self.names) > 1 else ""
        super().__init__(f"Missing dependency: {self.names[0]}{extra}")


class CommandFailedError(InstallError):
    def __init__(
        self,
        argv: Sequence[str],
        returncode: int,
        *,
        cwd: Optional[str] = None,
        stderr: str = "",
    ):
        self.argv = list(argv)
        self.returncode = returncode
        self.cwd = cwd
        self.stderr = stderr
        detail = stderr.strip().splitlines()[-1] if stderr.strip() else ""
        msg = f"{self.argv[0] if self.argv else '<empty>'} failed with exit code {returncode}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)
