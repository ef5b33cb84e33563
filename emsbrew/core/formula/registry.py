from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

from emsbrew.core.errors import UnknownFormulaError

from .builtins import builtin_formulas
from .models import Formula

_log = logging.getLogger("emsbrew.formula")


class FormulaRegistry:
    """Holds the known formula variants, keyed by version tag.

    Resolution order:
      1) Built-in variants (always present)
      2) Optional <formula_dir>/*.json|*.yaml|*.yml files (override by version_tag)

    The newest variant (highest version tag) is authoritative and is what
    ``latest()`` returns.
    """

    def __init__(self, formula_dir: Optional[Path] = None):
        self.formula_dir = formula_dir if formula_dir is not None else _env_formula_dir()
        self._formulas: Dict[str, Formula] = {}
        self._load_all()

    def _load_all(self) -> None:
        self._formulas = {f.version_tag: f for f in builtin_formulas()}

        if self.formula_dir is None or not self.formula_dir.exists():
            return

        for p in sorted(self.formula_dir.iterdir()):
            if p.suffix.lower() not in (".json", ".yaml", ".yml"):
                continue
            try:
                data = _read_mapping(p)
                f = Formula(**data)
            except Exception as exc:
                _log.warning("Skipping invalid formula file %s: %s", p, exc)
                continue
            self._formulas[f.version_tag] = f
            _log.debug("Loaded formula %s@%s from %s", f.name, f.version_tag, p)

    def list_tags(self) -> List[str]:
        return sorted(self._formulas.keys(), key=_tag_sort_key)

    def get(self, version_tag: str) -> Optional[Formula]:
        return self._formulas.get(version_tag)

    def require(self, version_tag: Optional[str]) -> Formula:
        if not version_tag:
            return self.latest()
        f = self.get(version_tag)
        if f is None:
            raise UnknownFormulaError(version_tag, self.list_tags())
        return f

    def latest(self) -> Formula:
        return self._formulas[self.list_tags()[-1]]


def _tag_sort_key(tag: str):
    digits = tag.lstrip("vV")
    return (0, int(digits), tag) if digits.isdigit() else (1, 0, tag)


def _read_mapping(path: Path) -> dict:
    raw_text = path.read_text(encoding="utf-8")
    try:
        data = json.loads(raw_text)
    except json.JSONDecodeError:
        import yaml

        data = yaml.safe_load(raw_text)
    if not isinstance(data, dict):
        raise ValueError(f"expected a mapping, got {type(data).__name__}")
    return data


def _env_formula_dir() -> Optional[Path]:
    raw = os.getenv("EMSBREW_FORMULA_DIR", "").strip()
    return Path(raw) if raw else None
