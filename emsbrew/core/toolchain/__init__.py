from .backends import CommandBackend, CommandResult, SubprocessBackend
from .cmake import configure_argv, make_argv, std_cmake_args
from .commands import run_checked
from .environment import build_env_overrides, scoped_environ

__all__ = [
    "CommandBackend",
    "CommandResult",
    "SubprocessBackend",
    "build_env_overrides",
    "configure_argv",
    "make_argv",
    "run_checked",
    "scoped_environ",
    "std_cmake_args",
]
