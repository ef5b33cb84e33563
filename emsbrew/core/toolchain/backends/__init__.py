from .base import CommandBackend, CommandResult
from .local import SubprocessBackend

__all__ = [
    "CommandBackend",
    "CommandResult",
    "SubprocessBackend",
]
