from .resolver import (
    BrewResolver,
    ChainResolver,
    DependencyResolver,
    ExecutableResolver,
    StaticResolver,
    resolve_all,
)

__all__ = [
    "BrewResolver",
    "ChainResolver",
    "DependencyResolver",
    "ExecutableResolver",
    "StaticResolver",
    "resolve_all",
]
