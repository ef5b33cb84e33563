"""
Installer settings.

Resolution order (later wins):
    1) defaults
    2) optional config file (JSON first, YAML fallback)
       path from argument, else EMSBREW_CONFIG_FILE
    3) environment variables
    4) explicit overrides (CLI flags)

Environment variables:
    EMSBREW_PREFIX       installation prefix
    EMSBREW_SOURCE_DIR   openEMS-Project source tree
    EMSBREW_JOBS         parallel job hint forwarded to make
    EMSBREW_SDK_ROOT     macOS SDK root (falls back to SDKROOT)
    EMSBREW_CXX_STD      C++ standard, overrides the formula's (e.g. c++17)
    EMSBREW_PYTHON       interpreter used to create the private env
    EMSBREW_STATE_DIR    where install records, events and audit go
    EMSBREW_FORMULA      formula version tag (default: newest)
"""
from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

_log = logging.getLogger("emsbrew.config")


class InstallerSettings(BaseModel):
    prefix: Path = Path("/usr/local/opt/openems")
    source_dir: Path = Path(".")
    jobs: Optional[int] = None
    sdk_root: Optional[Path] = None
    cxx_std: Optional[str] = None
    python: str = sys.executable or "python3"
    state_dir: Optional[Path] = None
    formula: Optional[str] = None
    # name -> prefix for dependencies not managed by Homebrew
    dependency_prefixes: Dict[str, Path] = Field(default_factory=dict)

    @field_validator("jobs")
    @classmethod
    def _jobs_positive(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("jobs must be >= 1")
        return v


_ENV_KEYS: Dict[str, str] = {
    "prefix": "EMSBREW_PREFIX",
    "source_dir": "EMSBREW_SOURCE_DIR",
    "jobs": "EMSBREW_JOBS",
    "sdk_root": "EMSBREW_SDK_ROOT",
    "cxx_std": "EMSBREW_CXX_STD",
    "python": "EMSBREW_PYTHON",
    "state_dir": "EMSBREW_STATE_DIR",
    "formula": "EMSBREW_FORMULA",
}


def _from_env() -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for field_name, key in _ENV_KEYS.items():
        v = (os.getenv(key) or "").strip()
        if v:
            out[field_name] = v
    if "sdk_root" not in out:
        sdk = (os.getenv("SDKROOT") or "").strip()
        if sdk:
            out["sdk_root"] = sdk
    return out


def load_config_file(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load a flat settings mapping from a JSON or YAML file.

    Returns an empty dict if no file is configured. A file named by ``path``
    is required and raises FileNotFoundError when absent; one named by
    EMSBREW_CONFIG_FILE is skipped with a warning instead. Malformed files
    are skipped with a warning either way.
    """
    if path is not None:
        resolved = Path(path)
        if not resolved.exists():
            raise FileNotFoundError(f"Config file not found: {resolved}")
    else:
        env_path = os.getenv("EMSBREW_CONFIG_FILE", "").strip()
        if not env_path:
            return {}
        resolved = Path(env_path)

    if not resolved.exists():
        _log.warning("Config file %s does not exist; ignoring", resolved)
        return {}

    try:
        raw_text = resolved.read_text(encoding="utf-8")
    except OSError as exc:
        _log.warning("Cannot read config file %s: %s", resolved, exc)
        return {}

    try:
        data = json.loads(raw_text)
    except json.JSONDecodeError:
        try:
            import yaml

            data = yaml.safe_load(raw_text)
        except Exception as exc:
            _log.warning("Failed to parse config file %s as JSON or YAML: %s", resolved, exc)
            return {}

    if not isinstance(data, dict):
        _log.warning("Config file %s must be a flat mapping, got %s", resolved, type(data).__name__)
        return {}

    known = set(InstallerSettings.model_fields)
    unknown = sorted(k for k in data if k not in known)
    if unknown:
        _log.warning("Ignoring unknown config keys in %s: %s", resolved, ", ".join(unknown))
    _log.info("Loaded settings from %s", resolved)
    return {k: v for k, v in data.items() if k in known}


def load_settings(
    config_file: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> InstallerSettings:
    merged: Dict[str, Any] = {}
    merged.update(load_config_file(config_file))
    merged.update(_from_env())
    merged.update({k: v for k, v in (overrides or {}).items() if v is not None})
    return InstallerSettings(**merged)
