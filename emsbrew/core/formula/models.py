from __future__ import annotations

from typing import Dict, Iterable, List, Literal, Optional, Set

from pydantic import BaseModel, ConfigDict, Field


DependencyKind = Literal["build", "runtime", "recommended", "optional"]


class Dependency(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    kind: DependencyKind = "runtime"
    # build-variant tags requested from the dependency, e.g. "c++11", "with-qt"
    tags: List[str] = Field(default_factory=list)
    # formula option that gates this dependency
    option: Optional[str] = None

    def is_required(self, selected: Set[str]) -> bool:
        # selected already carries option defaults, so an option left on
        # by default keeps its recommended dependencies
        if self.option is None:
            return self.kind != "optional"
        return self.option in selected


class FormulaOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    default: bool = False


class Formula(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    version_tag: str
    desc: Optional[str] = None
    homepage: str
    head_url: str

    dependencies: List[Dependency] = Field(default_factory=list)
    options: List[FormulaOption] = Field(default_factory=list)

    # installed into the private env when the python option is on
    python_packages: List[str] = Field(default_factory=list)
    binding_subdirs: List[str] = Field(default_factory=list)

    cxx_std: Optional[str] = None
    sdk_root_required: bool = False

    def option_names(self) -> List[str]:
        return [o.name for o in self.options]

    def default_options(self) -> Set[str]:
        return {o.name for o in self.options if o.default}

    def effective_options(self, requested: Optional[Dict[str, bool]] = None) -> Set[str]:
        """Selected option names after applying explicit --with/--without choices."""
        selected = self.default_options()
        known = set(self.option_names())
        for name, on in (requested or {}).items():
            if name not in known:
                raise ValueError(f"formula {self.name}@{self.version_tag} has no option {name!r}")
            if on:
                selected.add(name)
            else:
                selected.discard(name)
        return selected

    def required_dependencies(self, selected: Iterable[str]) -> List[Dependency]:
        sel = set(selected)
        return [d for d in self.dependencies if d.is_required(sel)]

    def has_python_bindings(self) -> bool:
        return "python" in self.option_names() and bool(self.binding_subdirs)
